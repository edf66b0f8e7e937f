"""
Entry point for module execution (``python -m ctxlint``).

This module delegates execution to the CLI handler in ``ctxlint.cli.__main__``.
"""

import sys
from ctxlint.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
