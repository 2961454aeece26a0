"""Convenience shim to prime or inspect the dashboard's GitHub views."""

from __future__ import annotations

import sys

from src.dashboard.runner import main as dashboard_main


if __name__ == "__main__":
    sys.exit(dashboard_main(sys.argv[1:]))
