"""Runtime environment for Kappa.

The Environment stores bindings of Symbols to evaluated host values and supports
nested scopes via an `outer` link. The root frame also carries the
ForeignRuntime that every Python call made from this environment goes through;
inner frames reach it via `runtime`.
"""

from __future__ import annotations

from io import StringIO
from typing import Optional, TYPE_CHECKING

from kappa import LispValue
from kappa.errors import KappaInvalidSymbol, KappaUnboundSymbol
from kappa.types.symbol import Symbol

if TYPE_CHECKING:
    from kappa.bridge.runtime import ForeignRuntime


class Environment:
    """Hierarchical mapping from Symbols to host values."""

    __slots__ = ("vars", "outer", "_runtime")

    def __init__(self, outer: Optional[Environment] = None, runtime: Optional[ForeignRuntime] = None):
        self.vars: dict[Symbol, LispValue] = {}
        self.outer: Environment | None = outer
        self._runtime = runtime

    @property
    def root(self) -> Environment:
        env = self
        while env.outer is not None:
            env = env.outer
        return env

    @property
    def runtime(self) -> ForeignRuntime:
        """The foreign runtime bound to the root frame.

        Created lazily for bare environments (tests, embedding) so that every
        environment chain has exactly one runtime.
        """
        root = self.root
        if root._runtime is None:
            from kappa.bridge.runtime import ForeignRuntime
            root._runtime = ForeignRuntime()
        return root._runtime

    def define(self, name: Symbol, value: LispValue) -> None:
        """Bind `name` to `value` in this frame.

        Raises KappaInvalidSymbol if `name` is not a Symbol, or is a keyword.
        """
        if not isinstance(name, Symbol) or name.is_keyword:
            raise KappaInvalidSymbol(f"Cannot define {name} as a symbol")
        self.vars[name] = value

    def find(self, symbol: Symbol) -> Optional[Environment]:
        """Find the nearest environment in the chain that contains `symbol`."""
        env: Optional[Environment] = self
        while env is not None:
            if symbol in env.vars:
                return env
            env = env.outer
        return None

    def set(self, name: Symbol, value: LispValue) -> None:
        """Update an existing binding for `name` in the environment chain."""
        env = self.find(name)
        if env is None:
            raise KappaUnboundSymbol(f"Cannot set unbound symbol {name}")
        env.vars[name] = value

    def lookup(self, name: Symbol) -> LispValue:
        env = self.find(name)
        if env is None:
            raise KappaUnboundSymbol(f"Cannot lookup unbound symbol {name}")
        return env.vars[name]

    def update(self, mapping: dict[Symbol, LispValue]) -> None:
        """Bulk-define a mapping of Symbol -> value in the current frame."""
        for k, v in mapping.items():
            self.define(k, v)

    def _write_vars(self, buffer: StringIO) -> None:
        buffer.write("{")
        buffer.write(", ".join(f"{k}: {v!r}" for k, v in self.vars.items()))
        buffer.write("}")

    def __str__(self) -> str:
        with StringIO() as buffer:
            self._write_vars(buffer)
            if self.outer is not None:
                buffer.write(" -> ...")  # indicate parent exists
            return buffer.getvalue()

    def __repr__(self) -> str:
        chain = []
        env: Optional[Environment] = self
        while env is not None:
            with StringIO() as env_buf:
                env._write_vars(env_buf)
                chain.append(env_buf.getvalue())
            env = env.outer
        return f"<Environment chain: {' -> '.join(chain)}>"
