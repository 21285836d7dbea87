"""
Entry point for running the pushnotifier CLI directly.
"""

import sys

from pushnotifier.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
