#!/usr/bin/env python3
"""
ATM Simulator Entry Point

Runs a single ATM terminal on stdin/stdout against the seeded in-memory
ledger. Configure with ATM_* environment variables or a .env file.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from atm.__main__ import main


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception as e:
        print(f"Error starting ATM: {e}", file=sys.stderr)
        sys.exit(1)
