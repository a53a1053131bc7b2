"""The foreign runtime handle: one per interpreter, passed explicitly.

ForeignRuntime ties together everything that is stateful on the Python side of
the bridge: marshalling options, the table of objects the host holds handles
to, the stack of entered scopes, and the hook used to call host lambdas back
from Python. There is no module-level default instance.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

from kappa import LispValue
from kappa.config import BridgeConfig
from kappa.errors import KappaTypeError
from kappa.bridge import marshal
from kappa.bridge.hints import Hint, ForeignValue
from kappa.bridge.handles import ObjectTable, PyHandle
from kappa.bridge.scope import ScopeStack, ScopeHandle
from kappa.types.lambda_fn import Lambda

logger = logging.getLogger(__name__)

HostApplyFn = Callable[[Lambda, list], LispValue]


class HostCallable:
    """Python callable standing in for a host Lambda passed to Python."""

    __slots__ = ("fn", "_runtime")

    def __init__(self, fn: Lambda, runtime: ForeignRuntime):
        self.fn = fn
        self._runtime = runtime

    def __call__(self, *args, **kwargs):
        if kwargs:
            raise TypeError(f"{self.fn} takes positional arguments only")
        rt = self._runtime
        host_args = [rt.to_host(a) for a in args]
        return rt.to_foreign(rt.host_apply(self.fn, host_args))

    def __repr__(self):
        return f"<HostCallable {self.fn}>"


class ForeignRuntime:
    def __init__(self, config: Optional[BridgeConfig] = None):
        self.config: BridgeConfig = config if config is not None else BridgeConfig.from_env()
        self.objects = ObjectTable()
        self.scopes = ScopeStack()
        self.host_apply: Optional[HostApplyFn] = None

    # ----------------- Handles -----------------
    def wrap(self, obj: Any) -> PyHandle:
        return PyHandle(self.objects.register(obj), self.objects)

    def deref(self, value: Any) -> Any:
        """The live object behind a handle; other values are returned unchanged."""
        return value.target if isinstance(value, PyHandle) else value

    def release(self, handle: PyHandle) -> bool:
        return self.objects.release(handle.ref)

    @property
    def live_count(self) -> int:
        return len(self.objects)

    # ----------------- Marshalling -----------------
    def to_foreign(self, value: LispValue, hint: Hint | str | None = None) -> Any:
        return marshal.to_foreign(value, hint, runtime=self)

    def to_host(self, value: Any) -> LispValue:
        return marshal.to_host(value, self)

    def forced_sequence(self, *elements: LispValue, allow_null_elements: bool = True) -> ForeignValue:
        return marshal.build_forced_sequence(*elements, allow_null_elements=allow_null_elements, runtime=self)

    def identity_mapping(self, pairs: Iterable[tuple[LispValue, LispValue]]) -> ForeignValue:
        return marshal.build_identity_keyed_mapping(pairs, runtime=self)

    def export_callable(self, fn: Lambda) -> HostCallable:
        return HostCallable(fn, self)

    def imported_callable(self, obj: Any) -> Optional[Lambda]:
        """The Lambda behind a HostCallable this runtime exported, if `obj` is one."""
        if isinstance(obj, HostCallable) and obj._runtime is self:
            return obj.fn
        return None

    # ----------------- Calls -----------------
    def getattr(self, target: Any, name: str) -> Any:
        """Read `name` from the live object; never served from host-side state."""
        return getattr(self.deref(target), name)

    def call(self, fn: Any, args: Iterable[LispValue] = (), kwargs: Optional[dict[str, LispValue]] = None) -> LispValue:
        """Call a Python callable with host arguments and return a host value.

        All arguments are converted before the call is made. Exceptions raised
        by the callee propagate unchanged.
        """
        target = self.deref(fn)
        if not callable(target):
            raise KappaTypeError(f"Cannot call non-callable Python object {target!r}")
        py_args = [self.to_foreign(a) for a in args]
        py_kwargs = {k: self.to_foreign(v) for k, v in (kwargs or {}).items()}
        logger.debug("calling %s with %d args, %d kwargs",
                     getattr(target, "__qualname__", type(target).__name__), len(py_args), len(py_kwargs))
        return self.to_host(target(*py_args, **py_kwargs))

    # ----------------- Scopes -----------------
    def enter_scoped(self, context: LispValue, alias: Optional[str] = None) -> ScopeHandle:
        return self.scopes.enter(self.to_foreign(context), alias)

    def exit_scoped(self, handle: ScopeHandle, exc: Optional[BaseException] = None) -> bool:
        return self.scopes.exit(handle, exc)

    def unwind_scoped(self, handle: ScopeHandle, exc: Optional[BaseException]) -> Optional[BaseException]:
        return self.scopes.unwind(handle, exc)

    def run_scoped(self, context: LispValue, fn: Callable[[LispValue], Any], alias: Optional[str] = None) -> Any:
        """Run `fn` with the host form of the entered value, inside `context`."""
        return self.scopes.run(self.to_foreign(context), lambda entered: fn(self.to_host(entered)), alias)

    @property
    def scope_depth(self) -> int:
        return self.scopes.depth
