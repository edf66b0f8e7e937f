"""
Runtime Configuration Store.

Settings are read from the `[tool.ctxlint]` table of the nearest
`pyproject.toml` and then overridden by command line arguments.

Example::

    [tool.ctxlint]
    sentinel = "myapp.context:RequestContext"
    include_tests = false

    [tool.ctxlint.factories]
    "myapp.context.background" = "myapp.context:RequestContext"
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from ctxlint.core.universe import split_type_spec

if sys.version_info >= (3, 11):
  import tomllib
else:
  try:
    import tomli as tomllib
  except ImportError:
    tomllib = None  # type: ignore

DEFAULT_SENTINEL = "contextvars:Context"

DEFAULT_FACTORIES: Dict[str, str] = {
  "contextvars.copy_context": DEFAULT_SENTINEL,
  "contextvars.Context.copy": DEFAULT_SENTINEL,
}


def _is_dotted_identifier(value: str) -> bool:
  return bool(value) and all(part.isidentifier() for part in value.split("."))


class LintConfig(BaseModel):
  """
  Configuration for one analysis run.
  """

  sentinel_module: str = Field("contextvars", description="Module defining the sentinel type.")
  sentinel_type: str = Field("Context", description="Name of the sentinel class.")
  include_tests: bool = Field(False, description="Analyze test_*.py / *_test.py files in package directories.")
  factories: Dict[str, str] = Field(
    default_factory=lambda: dict(DEFAULT_FACTORIES),
    description="Qualified callable name -> 'module:Type' return type, for callables without annotations.",
  )

  @field_validator("sentinel_module")
  @classmethod
  def validate_module(cls, v: str) -> str:
    """
    Ensures the module is a dotted identifier.

    Raises:
        ValueError: If the module name is malformed.
    """
    v = v.strip()
    if not _is_dotted_identifier(v):
      raise ValueError(f"Invalid sentinel module: '{v}'")
    return v

  @field_validator("sentinel_type")
  @classmethod
  def validate_type(cls, v: str) -> str:
    """
    Ensures the type name is a plain identifier.

    Raises:
        ValueError: If the type name is malformed.
    """
    v = v.strip()
    if not v.isidentifier():
      raise ValueError(f"Invalid sentinel type: '{v}'")
    return v

  @field_validator("factories")
  @classmethod
  def validate_factories(cls, v: Dict[str, str]) -> Dict[str, str]:
    """
    Ensures every factory maps a dotted callable name to a type specification.

    Raises:
        ValueError: If a key or value is malformed.
    """
    for func_name, type_spec in v.items():
      if not _is_dotted_identifier(func_name):
        raise ValueError(f"Invalid factory name: '{func_name}'")
      split_type_spec(type_spec)
    return v

  @property
  def sentinel(self) -> str:
    """The sentinel as a `module:Type` string."""
    return f"{self.sentinel_module}:{self.sentinel_type}"

  @classmethod
  def load(
    cls,
    sentinel: Optional[str] = None,
    include_tests: Optional[bool] = None,
    search_path: Optional[Path] = None,
  ) -> "LintConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        sentinel: Override for the sentinel type (`module:Type`).
        include_tests: Override for test file inclusion.
        search_path: Directory to start searching for TOML config.

    Returns:
        LintConfig: The fully resolved configuration object.

    Raises:
        ValueError: If a setting is invalid.
    """
    start_dir = search_path or Path.cwd()
    toml_config, _ = _load_toml_settings(start_dir)

    final_sentinel = sentinel or toml_config.get("sentinel", DEFAULT_SENTINEL)
    module, type_name = split_type_spec(final_sentinel)

    if include_tests is not None:
      final_tests = include_tests
    else:
      final_tests = bool(toml_config.get("include_tests", False))

    factories = dict(DEFAULT_FACTORIES)
    factories.update(toml_config.get("factories", {}))

    return cls(
      sentinel_module=module,
      sentinel_type=type_name,
      include_tests=final_tests,
      factories=factories,
    )


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches the start directory and its parents for 'pyproject.toml' and
  extracts the `[tool.ctxlint]` table.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.

  Raises:
      ValueError: If the nearest pyproject.toml is not valid TOML.
  """
  if not tomllib:
    return {}, None

  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid {toml_path}: {e}") from e

      tool_section = data.get("tool", {})
      return tool_section.get("ctxlint", {}), parent

  return {}, None
