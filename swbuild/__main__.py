"""
Entry point for running swbuild as a module: python -m swbuild
"""

import sys
from .cli import main

if __name__ == "__main__":
    sys.exit(main())
