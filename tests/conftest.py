"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Logging/console isolation between tests.
- Helpers for writing analyzable units to disk.
"""

import sys
import textwrap
import pytest
from pathlib import Path

# Add src to path so we can import 'ctxlint' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from ctxlint.utils.console import reset_console, set_log_level


@pytest.fixture(autouse=True)
def reset_logging():
  """
  Ensures log level and console redirection do not leak between tests.
  """
  yield
  set_log_level(0)
  reset_console()


@pytest.fixture
def write_source(tmp_path):
  """
  Returns a helper writing dedented source code below `tmp_path`.

  Usage::

      path = write_source("pkg/mod.py", code)
  """

  def _write(rel_path: str, code: str) -> Path:
    path = tmp_path / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(code).lstrip(), encoding="utf-8")
    return path

  return _write
