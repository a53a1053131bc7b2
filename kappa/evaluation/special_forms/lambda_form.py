from kappa import EvaluatorFn
from kappa import SExpression, LispValue
from kappa.errors import KappaArityError
from kappa.types.environment import Environment
from kappa.types.lambda_fn import Lambda
from kappa.types.nil import Nil
from kappa.types.symbol import Symbol


def lambda_form(
    tail: list[SExpression],
    env: Environment,
    evaluate_fn: EvaluatorFn,
    _: bool = False,
) -> LispValue:
    # (lambda (params) body...) allows zero or more body forms; several forms
    # are an implicit progn, none means the call returns nil.
    if not tail:
        raise KappaArityError("lambda requires at least a parameter list")

    params = tail[0]
    if params is Nil:
        params = []
    if not isinstance(params, list):
        raise KappaArityError(f"lambda parameter list must be a list, got {params!r}")
    body_forms = tail[1:]

    if not body_forms:
        body = Nil
    elif len(body_forms) == 1:
        body = body_forms[0]
    else:
        body = [Symbol("progn"), *body_forms]

    return Lambda(params, body, env)
