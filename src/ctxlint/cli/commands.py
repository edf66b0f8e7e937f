"""
CLI Command Handlers Facade.

Re-exports handlers from `ctxlint.cli.handlers`.
"""

from ctxlint.cli.handlers.check import handle_check

__all__ = [
  "handle_check",
]
