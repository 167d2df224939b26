#!/usr/bin/env python3
"""
BlockGrid - Main Application Entry Point

Loads the stored editing session, applies the commands given on the command
line and prints the resulting layout.
"""

import sys
from pathlib import Path

# Ensure the package imports work when executed from a source checkout
_src = Path(__file__).resolve().parent / "src"
if _src.is_dir() and str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from blockgrid.app import run


def main():
    """Main application entry point."""
    return run(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
