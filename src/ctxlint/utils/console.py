"""
Central Logging and Console Utilities.

This module unifies the application's log output using the Python standard
`logging` library, backed by `rich` for formatting.

It serves two purposes:
1.  **Standard Logging Integration**: Provides a configured `logging.Logger` and
    adapter functions (`log_info`, `log_warning`, ...) that route to standard
    logging channels.
2.  **Environment Injection**: Implements a Proxy pattern for the Rich Console.
    The output destination (stderr, file, or in-memory buffer) can be swapped at
    runtime via `set_console`, which keeps log output capturable in tests.

Standard output is never written to. The default console targets stderr and the
default level is WARNING, so a clean run only emits diagnostics.

Attributes:
    console (_ConsoleProxy): A global, stable reference to the active Rich Console.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

LOGGER_NAME = "ctxlint"

logger = logging.getLogger(LOGGER_NAME)

_THEME = Theme(
  {
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "path": "bold blue",
  }
)


def _make_console() -> Console:
  return Console(theme=_THEME, stderr=True)


class _ConsoleProxy:
  """
  A Proxy wrapper around `rich.console.Console`.

  All printing operations are forwarded to the active backend. When the
  backend changes, the package logger's handler is rebuilt so that log
  records follow the console to its new destination.

  Attributes:
      _backend (Console): The active Rich Console instance.
  """

  def __init__(self) -> None:
    """Initializes the proxy with a default standard error console."""
    self._backend: Console = _make_console()
    self._configure_logging()

  def set_backend(self, new_console: Console) -> None:
    """
    Injects a new Console backend and updates logging handlers.

    Args:
        new_console (Console): The new Rich Console instance to use.
    """
    self._backend = new_console
    self._configure_logging()

  def reset(self) -> None:
    """Resets the proxy to a fresh standard error console."""
    self._backend = _make_console()
    self._configure_logging()

  @property
  def backend(self) -> Console:
    """
    Access the raw backend console.

    Returns:
        Console: The currently active implementation.
    """
    return self._backend

  def _configure_logging(self) -> None:
    for handler in list(logger.handlers):
      if isinstance(handler, RichHandler):
        logger.removeHandler(handler)

    rich_handler = RichHandler(
      console=self._backend,
      show_time=False,
      omit_repeated_times=False,
      show_path=False,
      markup=False,
      rich_tracebacks=True,
    )
    logger.addHandler(rich_handler)
    logger.propagate = False
    if logger.level == logging.NOTSET:
      logger.setLevel(logging.WARNING)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Global helper to inject a specific console instance.

  Args:
      new_console (Console): The configured Rich console to use globally.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  """Global helper to reset logging and console to standard error."""
  console.reset()


def set_log_level(verbosity: int) -> None:
  """
  Maps a CLI verbosity count to a logging level.

  Args:
      verbosity: 0 -> WARNING, 1 -> INFO, 2+ -> DEBUG.
  """
  if verbosity >= 2:
    level = logging.DEBUG
  elif verbosity == 1:
    level = logging.INFO
  else:
    level = logging.WARNING
  logger.setLevel(level)


def log_debug(msg: str) -> None:
  """Logs a debug message."""
  logger.debug(msg)


def log_info(msg: str) -> None:
  """
  Logs an informational message.

  Args:
      msg (str): The message content.
  """
  logger.info(msg)


def log_warning(msg: str) -> None:
  """
  Logs a warning message.

  Args:
      msg (str): The message content.
  """
  logger.warning(msg)


def log_error(msg: str) -> None:
  """
  Logs an error message.

  Args:
      msg (str): The message content.
  """
  logger.error(msg)
