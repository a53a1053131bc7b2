"""Scoped execution contexts on the Python side of the bridge.

A scope wraps a Python context manager (a session, a graph's as_default(), a
name scope, an open file...). Entering pushes it on the runtime's stack;
exiting must happen exactly once, on every path out of the block, and in
strict reverse order of entry.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from kappa.errors import KappaScopeError, KappaTypeMismatch

logger = logging.getLogger(__name__)


class ScopeHandle:
    """One entered context on a ScopeStack."""

    __slots__ = ("context", "value", "alias", "depth", "active")

    def __init__(self, context: Any, value: Any, alias: Optional[str], depth: int):
        self.context = context
        self.value = value  # whatever __enter__ returned
        self.alias = alias
        self.depth = depth
        self.active = True

    def __repr__(self):
        state = "active" if self.active else "exited"
        name = f" as {self.alias}" if self.alias else ""
        return f"<ScopeHandle {type(self.context).__name__}{name} depth={self.depth} {state}>"


class ScopeStack:
    """LIFO stack of entered contexts, owned by the thread that created it."""

    def __init__(self):
        self._stack: list[ScopeHandle] = []
        self._owner = threading.get_ident()

    def _check_owner(self) -> None:
        if threading.get_ident() != self._owner:
            raise KappaScopeError("Scoped contexts cannot be shared across threads; use one runtime per thread")

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def innermost(self) -> Optional[ScopeHandle]:
        return self._stack[-1] if self._stack else None

    def enter(self, context: Any, alias: Optional[str] = None) -> ScopeHandle:
        self._check_owner()
        enter = getattr(type(context), "__enter__", None)
        if enter is None or getattr(type(context), "__exit__", None) is None:
            raise KappaTypeMismatch(f"{type(context).__name__} object is not a context manager")
        value = enter(context)
        handle = ScopeHandle(context, value, alias, len(self._stack) + 1)
        self._stack.append(handle)
        logger.debug("entered scope %r", handle)
        return handle

    def exit(self, handle: ScopeHandle, exc: Optional[BaseException] = None) -> bool:
        """Exit `handle`, which must be the innermost active scope.

        Returns True when the context manager asks to suppress `exc`.
        """
        self._check_owner()
        if not handle.active:
            raise KappaScopeError(f"{handle!r} has already been exited")
        if self.innermost is not handle:
            raise KappaScopeError(
                f"Scopes must exit in reverse order of entry: {handle!r} is not the innermost scope "
                f"({self.innermost!r})"
            )
        self._stack.pop()
        handle.active = False
        logger.debug("exiting scope %r", handle)
        if exc is None:
            return bool(type(handle.context).__exit__(handle.context, None, None, None))
        return bool(type(handle.context).__exit__(handle.context, type(exc), exc, exc.__traceback__))

    def unwind(self, handle: ScopeHandle, exc: Optional[BaseException]) -> Optional[BaseException]:
        """Exit every scope above `handle`, innermost first, then `handle` itself.

        Used when a block ends abnormally and may have left inner scopes open.
        Each context sees the error still in flight: a context that suppresses
        it clears it for the outer ones, and an error raised by an __exit__
        replaces it. Returns the error left over, or None if it was suppressed.
        """
        self._check_owner()
        if not handle.active or not any(h is handle for h in self._stack):
            raise KappaScopeError(f"{handle!r} is not an active scope on this stack")
        while True:
            inner = self._stack[-1]
            try:
                if self.exit(inner, exc):
                    exc = None
            except BaseException as ex:
                exc = ex
            if inner is handle:
                return exc

    def run(self, context: Any, fn: Callable[[Any], Any], alias: Optional[str] = None) -> Any:
        """Run `fn(entered_value)` inside `context`; exit runs exactly once on every path."""
        handle = self.enter(context, alias)
        try:
            result = fn(handle.value)
        except BaseException as ex:
            remaining = self.unwind(handle, ex)
            if remaining is None:
                return None
            if remaining is ex:
                raise
            raise remaining
        if self.innermost is not handle:
            leak = KappaScopeError(f"Scopes entered inside {handle!r} were not exited")
            self.unwind(handle, leak)
            raise leak
        self.exit(handle)
        return result
