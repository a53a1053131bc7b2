from kappa import EvaluatorFn
from kappa import SExpression, LispValue
from kappa.errors import KappaArityError
from kappa.types.nil import Nil
from kappa.types.environment import Environment


def define_form(
    tail: list[SExpression],
    env: Environment,
    evaluate_fn: EvaluatorFn,
    _: bool = False,
) -> LispValue:
    """
    (define name value)
    Tail-call awareness is irrelevant here, since define does not produce a value to be tail-called.
    """
    if len(tail) != 2:
        raise KappaArityError("define requires exactly 2 arguments")

    name, val_expr = tail
    value = evaluate_fn(val_expr, env)
    env.define(name, value)
    return Nil
