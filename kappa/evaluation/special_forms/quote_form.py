from kappa import SExpression, LispValue, EvaluatorFn
from kappa.errors import KappaArityError
from kappa.types.environment import Environment


def quote_form(
    tail: list[SExpression],
    env: Environment,
    evaluate_fn: EvaluatorFn,
    _: bool = False,
) -> LispValue:
    """(quote expr) returns expr unevaluated."""
    if len(tail) != 1:
        raise KappaArityError("quote requires exactly 1 argument")
    return tail[0]
