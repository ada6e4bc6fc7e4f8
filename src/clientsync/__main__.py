"""Allow ``python -m clientsync``."""

from __future__ import annotations

import sys

from clientsync.cli import main

if __name__ == "__main__":
    sys.exit(main())
