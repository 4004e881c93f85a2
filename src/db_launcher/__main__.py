"""Entry point for ``python -m db_launcher``."""

import sys

from db_launcher.adapters.inbound.cli import main

if __name__ == "__main__":
    sys.exit(main())
