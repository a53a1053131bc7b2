from kappa import EvaluatorFn
from kappa import SExpression, LispValue
from kappa.types.environment import Environment
from kappa.types.nil import Nil


def progn_form(
    tail: list[SExpression],
    env: Environment,
    evaluate_fn: EvaluatorFn,
    is_tail_call: bool = False,
) -> LispValue:
    if not tail:
        return Nil
    for e in tail[:-1]:
        evaluate_fn(e, env)
    return evaluate_fn(tail[-1], env, is_tail_call)
