from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Mapping, Optional


# Resolve installation dir (kappa package directory); helper modules ship in ../ext
_KAPPA_DIR = Path(__file__).resolve().parent

# Defaults
_DEFAULT_HELPERS_DIRS = [_KAPPA_DIR.parent / 'ext']

_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off'}


def paths_from_env(var: str, defaults: Iterable[Path]) -> List[Path]:
    raw = os.environ.get(var)
    if not raw:
        return [Path(p) for p in defaults]
    return [Path(p.strip()) for p in raw.split(os.pathsep) if p.strip()]


def flag_from_env(var: str, default: bool, environ: Optional[Mapping[str, str]] = None) -> bool:
    environ = os.environ if environ is None else environ
    raw = environ.get(var)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{var} must be a boolean flag, got {raw!r}")


def get_helpers_roots() -> List[Path]:
    return paths_from_env('KAPPA_HELPERS_PATH', _DEFAULT_HELPERS_DIRS)


@dataclass(frozen=True)
class BridgeConfig:
    """Marshalling options shared by a ForeignRuntime.

    preserve_key_order: string-keyed mappings keep host insertion order when
        True; when False keys are emitted in sorted order.
    collapse_singletons: single-element containers of atoms become foreign
        scalars unless a sequence is forced.
    """
    preserve_key_order: bool = True
    collapse_singletons: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> BridgeConfig:
        values = {
            'preserve_key_order': flag_from_env('KAPPA_PRESERVE_KEY_ORDER', True, environ),
            'collapse_singletons': flag_from_env('KAPPA_COLLAPSE_SINGLETONS', True, environ),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
