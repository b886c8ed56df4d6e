"""Allow ``python -m entrypack``."""

import sys

from entrypack.cli import main

if __name__ == "__main__":
    sys.exit(main())
