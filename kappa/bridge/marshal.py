"""Value marshalling between host values and Python values.

Outbound (host -> Python), default rules in priority order:

    1. single-element container of atoms     -> scalar (unless a sequence is forced)
    2. multi-element container of one atom kind -> list, source order
    3. container mixing kinds                -> tuple, source order
    4. string-keyed dict                     -> dict
    5. nil / #t / #f                         -> None / True / False
    6. rectangular numeric grid              -> numpy.ndarray (int64 if all ints, else float64)

Atoms are numbers, booleans, strings and nil. ``int`` and ``float`` are the
same kind ("number") but an element never changes type on the way out; only
an explicit Hint.FLOAT widens. Index values are passed through untouched:
translating between indexing conventions is the caller's job.

Inbound (Python -> host) is the inverse: sentinels map back, lists and tuples
become host lists, arrays become nested host lists, and anything without a
host representation is registered with the runtime and returned as a PyHandle.

Every conversion error is raised before a Python call is made.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, TYPE_CHECKING

import numpy as np

from kappa import LispValue
from kappa.config import BridgeConfig
from kappa.errors import KappaTypeMismatch, KappaInvalidKey
from kappa.bridge.hints import Hint, ForeignValue
from kappa.bridge.handles import PyHandle
from kappa.types.nil import Nil
from kappa.types.symbol import Symbol, TRUE, FALSE, to_bool_symbol
from kappa.types.lambda_fn import Lambda

if TYPE_CHECKING:
    from kappa.bridge.runtime import ForeignRuntime

NULL = "null"
BOOLEAN = "boolean"
NUMBER = "number"
STRING = "string"
LIST = "list"
MAPPING = "mapping"
HANDLE = "handle"
FOREIGN = "foreign"
FUNCTION = "function"
UNKNOWN = "unknown"

ATOM_KINDS = frozenset({NULL, BOOLEAN, NUMBER, STRING})

_DEFAULT_CONFIG = BridgeConfig()
_INT64 = np.iinfo(np.int64)


def kind_of(value: LispValue) -> str:
    """Classify a host value for the conversion tables."""
    if value is Nil:
        return NULL
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, Symbol):
        return BOOLEAN if value == TRUE or value == FALSE else UNKNOWN
    if isinstance(value, (int, float)):
        return NUMBER
    if isinstance(value, str):
        return STRING
    if isinstance(value, list):
        return LIST
    if isinstance(value, dict):
        return MAPPING
    if isinstance(value, PyHandle):
        return HANDLE
    if isinstance(value, ForeignValue):
        return FOREIGN
    if isinstance(value, Lambda):
        return FUNCTION
    return UNKNOWN


def _config(runtime: Optional[ForeignRuntime]) -> BridgeConfig:
    return runtime.config if runtime is not None else _DEFAULT_CONFIG


# ---------------------------------------------------------------------------
# Host -> Python
# ---------------------------------------------------------------------------

def to_foreign(value: LispValue, hint: Hint | str | None = None, *, runtime: Optional[ForeignRuntime] = None) -> Any:
    """Convert a host value to its Python form.

    Raises KappaTypeMismatch when no rule applies or the hint conflicts with
    the shape of the value.
    """
    if hint is not None:
        try:
            hint = Hint.parse(hint)
        except ValueError:
            raise KappaTypeMismatch(f"Unknown conversion hint {hint!r}") from None
        return _apply_hint(value, hint, runtime)
    return _convert(value, runtime)


def _convert(value: LispValue, runtime: Optional[ForeignRuntime]) -> Any:
    kind = kind_of(value)
    if kind == NULL:
        return None
    if kind == BOOLEAN:
        return value == TRUE if isinstance(value, Symbol) else value
    if kind in (NUMBER, STRING):
        return value
    if kind == LIST:
        return _list_to_foreign(value, runtime)
    if kind == MAPPING:
        return _mapping_to_foreign(value, runtime)
    if kind == HANDLE:
        return value.target
    if kind == FOREIGN:
        return value.value
    if kind == FUNCTION:
        if runtime is None or runtime.host_apply is None:
            raise KappaTypeMismatch(f"Cannot pass {value} to Python without a host evaluator")
        return runtime.export_callable(value)
    raise KappaTypeMismatch(f"No Python conversion for host value {value!r}")


def _list_to_foreign(items: list, runtime: Optional[ForeignRuntime]) -> Any:
    if not items:
        return []
    kinds = {kind_of(x) for x in items}
    if len(kinds) > 1:
        return tuple(_convert(x, runtime) for x in items)

    kind = kinds.pop()
    if kind in ATOM_KINDS:
        if len(items) == 1 and _config(runtime).collapse_singletons:
            return _convert(items[0], runtime)
        return [_convert(x, runtime) for x in items]
    if kind == LIST and grid_shape(items) is not None:
        return _grid_to_array(items)
    return [_convert(x, runtime) for x in items]


def _mapping_to_foreign(mapping: dict, runtime: Optional[ForeignRuntime]) -> dict:
    keys = list(mapping)
    if not _config(runtime).preserve_key_order:
        keys.sort(key=lambda k: (0, k) if isinstance(k, str) else (1, repr(k)))
    return {_mapping_key(k): _convert(mapping[k], runtime) for k in keys}


def _mapping_key(key: Any) -> Any:
    kind = kind_of(key)
    if kind in ATOM_KINDS:
        return _convert(key, None)
    if kind == HANDLE:
        return key.target
    raise KappaInvalidKey(f"Mapping key {key!r} has no Python form")


def grid_shape(value: LispValue) -> tuple[int, ...] | None:
    """Shape of a rectangular, non-empty numeric grid, or None if it is not one."""
    if kind_of(value) == NUMBER:
        return ()
    if not isinstance(value, list) or not value:
        return None
    shapes = {grid_shape(x) for x in value}
    if len(shapes) != 1 or None in shapes:
        return None
    return (len(value),) + shapes.pop()


def _leaves(value: LispValue) -> Iterable[Any]:
    if isinstance(value, list):
        for x in value:
            yield from _leaves(x)
    else:
        yield value


def _grid_to_array(value: LispValue) -> np.ndarray:
    leaves = list(_leaves(value))
    if all(isinstance(x, int) for x in leaves):
        if not all(_INT64.min <= x <= _INT64.max for x in leaves):
            raise KappaTypeMismatch("Integer grid has values outside the int64 range")
        dtype = np.int64
    else:
        dtype = np.float64
    try:
        return np.array(value, dtype=dtype)
    except OverflowError:
        raise KappaTypeMismatch("Numeric grid has values too large for float64") from None


# --- Hints ---

def _single(value: LispValue, hint: Hint) -> LispValue:
    if isinstance(value, list):
        if len(value) != 1:
            raise KappaTypeMismatch(
                f"{hint.value} hint needs a single value, got a container of {len(value)}"
            )
        value = value[0]
    if kind_of(value) not in ATOM_KINDS:
        raise KappaTypeMismatch(f"{hint.value} hint needs an atom, got {value!r}")
    return value


def _as_int(value: LispValue) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float):
        raise KappaTypeMismatch(
            f"Expected an integer, got the floating-point value {value!r}; use an integer literal"
        )
    raise KappaTypeMismatch(f"Expected an integer, got {value!r}")


def _as_float(value: LispValue) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise KappaTypeMismatch(f"Expected a number, got {value!r}")


def _numeric(value: LispValue, convert, runtime: Optional[ForeignRuntime]) -> Any:
    if isinstance(value, list):
        items = [convert(x) for x in value]
        if len(items) == 1 and _config(runtime).collapse_singletons:
            return items[0]
        return items
    return convert(value)


def _apply_hint(value: LispValue, hint: Hint, runtime: Optional[ForeignRuntime]) -> Any:
    if isinstance(value, ForeignValue):
        raise KappaTypeMismatch(f"{value!r} is already a Python value; it cannot take a {hint.value} hint")

    if hint is Hint.SEQUENCE:
        if isinstance(value, list):
            return [_convert(x, runtime) for x in value]
        return [_convert(value, runtime)]

    if hint is Hint.SCALAR:
        return _convert(_single(value, hint), runtime)

    if hint is Hint.INTEGER:
        return _numeric(value, _as_int, runtime)

    if hint is Hint.FLOAT:
        return _numeric(value, _as_float, runtime)

    if hint is Hint.TUPLE:
        if isinstance(value, list):
            return tuple(_convert(x, runtime) for x in value)
        return (_convert(value, runtime),)

    if hint is Hint.MAPPING:
        if not isinstance(value, dict):
            raise KappaTypeMismatch(f"mapping hint needs a dict, got {value!r}")
        return _mapping_to_foreign(value, runtime)

    if hint is Hint.ARRAY:
        if value == []:
            return np.zeros(0)
        if grid_shape(value) is None:
            raise KappaTypeMismatch(f"array hint needs a rectangular numeric grid, got {value!r}")
        return _grid_to_array(value)

    raise KappaTypeMismatch(f"Unhandled conversion hint {hint!r}")


# --- Explicit builders ---

def build_forced_sequence(
    *elements: LispValue,
    allow_null_elements: bool = True,
    runtime: Optional[ForeignRuntime] = None,
) -> ForeignValue:
    """Build a Python list of exactly len(elements) items.

    Never collapses to a scalar (zero and one elements included); nil elements
    become None, which is how shape declarations mark an unknown dimension.
    """
    out = []
    for el in elements:
        if el is Nil or el is None:
            if not allow_null_elements:
                raise KappaTypeMismatch("Null elements are not allowed in this sequence")
            out.append(None)
        else:
            out.append(_convert(el, runtime))
    return ForeignValue(out)


def build_identity_keyed_mapping(
    pairs: Iterable[tuple[LispValue, LispValue]],
    runtime: Optional[ForeignRuntime] = None,
) -> ForeignValue:
    """Build a dict keyed by the Python objects behind PyHandle keys.

    Keys compare by identity; a repeated handle keeps its first position and
    takes the last value given for it.
    """
    entries: dict[int, tuple[Any, Any]] = {}
    for key, value in pairs:
        if not isinstance(key, PyHandle):
            raise KappaInvalidKey(f"Identity-keyed mapping needs object handles as keys, got {key!r}")
        target = key.target
        try:
            hash(target)
        except TypeError:
            raise KappaInvalidKey(f"{key!r} refers to an unhashable object") from None
        entries[id(target)] = (target, _convert(value, runtime))

    result = {target: value for target, value in entries.values()}
    if len(result) != len(entries):
        raise KappaInvalidKey("Distinct handles compare equal in Python; they cannot key one mapping")
    return ForeignValue(result)


# ---------------------------------------------------------------------------
# Python -> host
# ---------------------------------------------------------------------------

def to_host(value: Any, runtime: ForeignRuntime) -> LispValue:
    """Convert a Python value to its host form; opaque objects become handles."""
    if value is None:
        return Nil
    if isinstance(value, (bool, np.bool_)):
        return to_bool_symbol(bool(value))
    if isinstance(value, np.generic):
        # numpy scalars subclass float/int; unwrap first
        return to_host(value.item(), runtime)
    if isinstance(value, (int, float, str)):
        return value
    if isinstance(value, np.ndarray):
        return to_host(value.tolist(), runtime)
    if isinstance(value, (list, tuple)):
        return [to_host(x, runtime) for x in value]
    if isinstance(value, dict):
        return {_host_key(k, runtime): to_host(v, runtime) for k, v in value.items()}
    if isinstance(value, PyHandle):
        return value
    exported = runtime.imported_callable(value)
    if exported is not None:
        return exported
    return runtime.wrap(value)


def _host_key(key: Any, runtime: ForeignRuntime) -> LispValue:
    converted = to_host(key, runtime)
    if isinstance(converted, (list, dict)):
        # tuple keys and the like stay hashable as handles
        return runtime.wrap(key)
    return converted
