"""
Type Universe backed by the Python import system.

A `TypeUniverse` hands out interned `TypeRef` descriptors so that type identity
reduces to object identity:

1.  **Runtime classes**: Resolved by importing the defining module. Aliases and
    re-exports of the same class share one descriptor; distinct classes with the
    same printed name never do.
2.  **Local classes**: Classes defined inside an analyzed file are interned by
    a caller supplied key and can never be identical to an imported class.
3.  **Factories**: Callables without usable annotations (e.g. C builtins such as
    `contextvars.copy_context`) can be mapped to a return type by configuration.

A new universe is created for every analyzed unit.
"""

import importlib
import sys
import typing
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence, Tuple

from ctxlint.core.errors import TypeCheckError, UnresolvedModuleError, UnresolvedTypeError
from ctxlint.core.model import TypeRef
from ctxlint.utils.console import log_debug, log_warning

_MISSING = object()


def split_type_spec(spec: str) -> Tuple[str, str]:
  """
  Splits a `module:Type` (or `module.Type`) specification.

  Args:
      spec: The type specification string.

  Returns:
      Tuple[str, str]: (module, type name).

  Raises:
      ValueError: If the specification has no module part.
  """
  if ":" in spec:
    module, _, name = spec.partition(":")
  else:
    module, _, name = spec.rpartition(".")
  module, name = module.strip(), name.strip()
  if not module or not name:
    raise ValueError(f"Invalid type specification '{spec}'. Expected 'module:Type'.")
  return module, name


class TypeUniverse:
  """
  Resolves and interns type descriptors for one analyzed unit.
  """

  def __init__(
    self,
    search_paths: Sequence[Path] = (),
    factories: Optional[Mapping[str, str]] = None,
  ):
    """
    Initializes the universe.

    Args:
        search_paths: Directories prepended to `sys.path` while importing.
        factories: Map of qualified callable name -> `module:Type` return type.
    """
    self._search_paths = [str(p) for p in search_paths]
    self._factory_specs: Dict[str, str] = dict(factories or {})
    self._factories: Optional[Dict[int, Tuple[Any, TypeRef]]] = None
    self._interned: Dict[Any, TypeRef] = {}
    self._lookups: Dict[str, Any] = {}

  # --- Sentinel Resolution ---

  def resolve_type(self, module: str, type_name: str) -> TypeRef:
    """
    Resolves a named class from a named module.

    Raises:
        UnresolvedModuleError: If the module cannot be imported or raises
            while importing.
        UnresolvedTypeError: If the module has no class of that name.
    """
    with self._import_context():
      try:
        mod = importlib.import_module(module)
      except ImportError as e:
        raise UnresolvedModuleError(module, str(e)) from e
      except Exception as e:
        raise UnresolvedModuleError(module, f"{type(e).__name__}: {e}") from e

    obj = getattr(mod, type_name, None)
    if not isinstance(obj, type):
      raise UnresolvedTypeError(module, type_name)
    return self.type_of(obj)

  # --- Interning ---

  def type_of(self, cls: type) -> TypeRef:
    """Returns the unique descriptor for a runtime class."""
    key = ("runtime", id(cls))
    ref = self._interned.get(key)
    if ref is None:
      ref = TypeRef(name=f"{cls.__module__}.{cls.__qualname__}", origin=cls)
      self._interned[key] = ref
    return ref

  def local_type(self, key: str, name: str) -> TypeRef:
    """Returns the unique descriptor for a class defined in an analyzed file."""
    intern_key = ("local", key)
    ref = self._interned.get(intern_key)
    if ref is None:
      ref = TypeRef(name=name)
      self._interned[intern_key] = ref
    return ref

  # --- Name Lookup ---

  def lookup(self, qualified_name: str) -> Optional[Any]:
    """
    Resolves a dotted name to a runtime object.

    The longest importable module prefix is imported and the remaining parts are
    resolved as attributes. Results are cached for the lifetime of the universe.

    Args:
        qualified_name: e.g. "contextvars.Context" or "builtins.int".

    Returns:
        The object, or None when the name cannot be resolved.

    Raises:
        TypeCheckError: If a referenced module raises while being imported.
    """
    cached = self._lookups.get(qualified_name, _MISSING)
    if cached is not _MISSING:
      return cached

    result = self._lookup_uncached(qualified_name)
    self._lookups[qualified_name] = result
    return result

  def _lookup_uncached(self, qualified_name: str) -> Optional[Any]:
    parts = qualified_name.split(".")
    if not all(parts):
      # Relative import names start with a dot
      return None

    with self._import_context():
      for i in range(len(parts), 0, -1):
        module_name = ".".join(parts[:i])
        try:
          obj = importlib.import_module(module_name)
        except ImportError:
          continue
        except Exception as e:
          raise TypeCheckError(f"importing '{module_name}' failed: {e}") from e

        for attr in parts[i:]:
          obj = getattr(obj, attr, _MISSING)
          if obj is _MISSING:
            log_debug(f"Unresolved name '{qualified_name}'")
            return None
        return obj

    log_debug(f"Unresolved module for '{qualified_name}'")
    return None

  # --- Return Types ---

  def return_type(self, func: Any) -> Optional[TypeRef]:
    """
    Determines the declared return type of a runtime callable.

    Configured factories take precedence over annotations. Classes return
    instances of themselves.
    """
    if isinstance(func, type):
      return self.type_of(func)

    factory = self._factory_table().get(id(func))
    if factory is not None and factory[0] is func:
      return factory[1]

    try:
      hints = typing.get_type_hints(func)
    except (NameError, TypeError, AttributeError, SyntaxError):
      return None

    ret = hints.get("return")
    if isinstance(ret, type):
      return self.type_of(ret)
    return None

  def _factory_table(self) -> Dict[int, Tuple[Any, TypeRef]]:
    if self._factories is None:
      self._factories = {}
      for func_name, type_spec in sorted(self._factory_specs.items()):
        func = self.lookup(func_name)
        if func is None:
          log_warning(f"Skipping factory '{func_name}': not importable")
          continue
        module, type_name = split_type_spec(type_spec)
        try:
          ref = self.resolve_type(module, type_name)
        except (UnresolvedModuleError, UnresolvedTypeError) as e:
          log_warning(f"Skipping factory '{func_name}': {e}")
          continue
        self._factories[id(func)] = (func, ref)
    return self._factories

  @contextmanager
  def _import_context(self) -> Iterator[None]:
    added = [p for p in self._search_paths if p not in sys.path]
    sys.path[:0] = added
    try:
      yield
    finally:
      for p in added:
        if p in sys.path:
          sys.path.remove(p)
