"""Lambda function representation and argument binding for Kappa."""

from __future__ import annotations

from io import StringIO

from kappa import SExpression, LispValue
from kappa.types.environment import Environment
from kappa.types.symbol import Symbol
from kappa.errors import KappaArityError
from kappa.types.nil import Nil

OPTIONAL = Symbol("&optional")
REST = Symbol("&rest")


class Lambda:
    """A first-class lambda with formal parameters, body, and closure env."""

    __slots__ = ("formals", "body", "env")

    def __init__(
        self, formals: list[Symbol], body: SExpression, env: Environment | None = None
    ):
        self.formals: list[Symbol] = formals
        self.body: SExpression = body
        # Avoid shared default Environment across instances
        self.env: Environment = env if env is not None else Environment()

    def __str__(self) -> str:
        with StringIO() as buffer:
            buffer.write("(λ (")
            buffer.write(" ".join(str(f) for f in self.formals))
            buffer.write(") ")
            buffer.write(str(self.body))
            buffer.write(")")
            return buffer.getvalue()

    def __repr__(self) -> str:
        return str(self)

    @property
    def is_simple(self) -> bool:
        """True when the lambda list is purely positional."""
        return OPTIONAL not in self.formals and REST not in self.formals

    def extend_env(self, args: list[LispValue], evaluate_fn=None) -> Environment:
        """
        Bind argument values to the formal parameters and return a new
        Environment (outer = closure env) for evaluating the body.

        Supports required positionals, &optional (name) or (name default), and
        &rest name. Defaults are evaluated in the new frame when evaluate_fn is given.
        """
        formals = list(self.formals)
        supplied = list(args)
        local_env = Environment(outer=self.env)

        rest_name: Symbol | None = None
        if REST in formals:
            idx = formals.index(REST)
            if idx + 1 >= len(formals):
                raise KappaArityError("Malformed parameter list: &rest must be followed by a name")
            rest_name = formals[idx + 1]
            formals = formals[:idx]

        optional_specs: list = []
        if OPTIONAL in formals:
            idx = formals.index(OPTIONAL)
            optional_specs = formals[idx + 1:]
            formals = formals[:idx]

        if len(supplied) < len(formals):
            missing = formals[len(supplied):]
            raise KappaArityError(
                f"Too few arguments; missing {len(missing)} parameter(s): {[str(s) for s in missing]}"
            )
        for name in formals:
            local_env.define(name, supplied.pop(0))

        for spec in optional_specs:
            name = spec if isinstance(spec, Symbol) else spec[0]
            if supplied:
                local_env.define(name, supplied.pop(0))
            elif isinstance(spec, list) and len(spec) >= 2 and evaluate_fn is not None:
                local_env.define(name, evaluate_fn(spec[1], local_env))
            else:
                local_env.define(name, Nil)

        if rest_name is not None:
            local_env.define(rest_name, supplied)
        elif supplied:
            raise KappaArityError(f"Too many arguments: {supplied}")
        return local_env
