"""Utilities for resolving Python attributes from qualified Kappa symbols.

A qualified symbol names a bound handle followed by an attribute path, using
':' for the first step and '.' for the rest (np:array, os:path.join,
df:columns.tolist). Every step reads the live Python object.
"""
from typing import Any

from kappa.bridge.handles import PyHandle
from kappa.errors import KappaTypeError
from kappa.types.environment import Environment
from kappa.types.symbol import Symbol


def is_qualified(sym: Symbol) -> bool:
    name = sym.id
    return ":" in name and not name.startswith(":") and not name.endswith(":")


def resolve_object_path(env: Environment, path: Symbol) -> Any:
    """Resolve a qualified symbol to the Python object it names."""
    first, *rest = path.id.replace(":", ".").split(".")

    root = env.lookup(Symbol(first))
    if not isinstance(root, PyHandle):
        raise KappaTypeError(f"{first} is not a Python object; cannot resolve {path}")

    obj: Any = root.target
    runtime = env.runtime
    for attr in rest:
        obj = runtime.getattr(obj, attr)
    return obj
