"""Importing Python modules into a Kappa environment.

`(import "numpy" as "np")` binds `np` to a handle on the numpy module.
With `helpers "np_helpers"` the handle instead points at a view whose
attributes come from the helper module first and the real module second, so
small adapter functions can sit next to the library they adapt. Helper modules
are looked up in KAPPA_HELPERS_PATH before the regular import path.
"""
from __future__ import annotations

import importlib
import importlib.util
import logging
from types import ModuleType
from typing import Any, Optional

from kappa.bridge.handles import PyHandle
from kappa.config import get_helpers_roots
from kappa.types.environment import Environment
from kappa.types.symbol import Symbol

logger = logging.getLogger(__name__)


class HelperOverlay:
    """Module view that resolves attributes in a helper module first."""

    def __init__(self, module: ModuleType, helpers: ModuleType):
        self._module = module
        self._helpers = helpers

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        if not name.startswith("_") and hasattr(self._helpers, name):
            return getattr(self._helpers, name)
        return getattr(self._module, name)

    def __repr__(self):
        return f"<module {self._module.__name__!r} with helpers {self._helpers.__name__!r}>"


def load_helpers(name: str) -> ModuleType:
    for root in get_helpers_roots():
        candidate = root / f"{name}.py"
        if candidate.is_file():
            spec = importlib.util.spec_from_file_location(f"kappa_helpers.{name}", candidate)
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
            logger.debug("loaded helper module %s from %s", name, candidate)
            return module
    return importlib.import_module(name)


def import_module(
    env: Environment,
    module_name: str,
    alias: Optional[str] = None,
    helpers_module: Optional[str] = None,
) -> PyHandle:
    """Import `module_name` and bind a handle to it at the root environment.

    The binding name is `alias`, defaulting to the last dotted component of the
    module name. Import errors propagate unchanged.
    """
    target: Any = importlib.import_module(module_name)
    if helpers_module:
        target = HelperOverlay(target, load_helpers(helpers_module))

    handle = env.runtime.wrap(target)
    name = alias or module_name.rsplit(".", 1)[-1]
    env.root.define(Symbol(name), handle)
    logger.debug("imported %s as %s", module_name, name)
    return handle
