from kappa import EvaluatorFn
from kappa import SExpression, LispValue
from kappa.errors import KappaArityError
from kappa.types.symbol import FALSE, is_true
from kappa.types.environment import Environment


def if_form(
    tail: list[SExpression],
    env: Environment,
    evaluate_fn: EvaluatorFn,
    is_tail_call: bool = False,
) -> LispValue:
    if len(tail) < 2:
        raise KappaArityError("if requires a condition and a then-expression")

    if is_true(evaluate_fn(tail[0], env)):
        return evaluate_fn(tail[1], env, is_tail_call)
    elif len(tail) > 2:
        return evaluate_fn(tail[2], env, is_tail_call)
    else:
        return FALSE  # default "false" if no else
