"""Entry point for running with python -m webbook."""

import sys

from webbook.cli import main

if __name__ == "__main__":
    sys.exit(main())
