"""Special form: with.

    (with (expr as name) body...)
    (with expr body...)

Evaluates `expr` to a Python context manager, enters it through the runtime's
scope stack, runs the body, and exits the scope on every way out of the
body: normal completion or an error. Scopes the body leaves open are exited
first, innermost first. The entered value is bound to `name` for the
duration of the body only.
"""

from kappa import SExpression, LispValue, EvaluatorFn
from kappa.errors import KappaArityError, KappaInvalidSymbol, KappaScopeError
from kappa.types.environment import Environment
from kappa.types.nil import Nil
from kappa.types.symbol import Symbol

AS = Symbol("as")


def _parse_binding(spec: SExpression) -> tuple[SExpression, Symbol | None]:
    if isinstance(spec, list) and len(spec) == 3 and spec[1] == AS:
        alias = spec[2]
        if not isinstance(alias, Symbol):
            raise KappaInvalidSymbol(f"with alias must be a symbol, got {alias!r}")
        return spec[0], alias
    return spec, None


def with_form(
    tail: list[SExpression],
    env: Environment,
    evaluate_fn: EvaluatorFn,
    _: bool = False,
) -> LispValue:
    if not tail:
        raise KappaArityError("with requires a context expression")

    context_expr, alias = _parse_binding(tail[0])
    body = tail[1:]
    runtime = env.runtime

    context = evaluate_fn(context_expr, env)
    scope = runtime.enter_scoped(context, alias.id if alias else None)
    local_env = Environment(outer=env)
    try:
        if alias is not None:
            local_env.define(alias, runtime.to_host(scope.value))
        result: LispValue = Nil
        for expr in body:
            # The scope closes after the body, so nothing here is a tail call
            result = evaluate_fn(expr, local_env)
    except BaseException as ex:
        # Scopes left open by the body close before this one
        remaining = runtime.unwind_scoped(scope, ex)
        if remaining is None:
            return Nil
        if remaining is ex:
            raise
        raise remaining
    if runtime.scopes.innermost is not scope:
        leak = KappaScopeError(f"Scopes entered inside {scope!r} were not exited")
        runtime.unwind_scoped(scope, leak)
        raise leak
    runtime.exit_scoped(scope)
    return result
