"""Allow ``python -m linerelay``."""

import sys

from linerelay.cli import main

if __name__ == "__main__":
    sys.exit(main())
