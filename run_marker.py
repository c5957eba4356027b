#!/usr/bin/env python3
"""
Entry point script for the faction marker.

Run this script to watch a profile page, check a saved page, or manage the
stored faction list without installing the package.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

if __name__ == "__main__":
    from faction_marker.cli import cli_main
    sys.exit(cli_main())
