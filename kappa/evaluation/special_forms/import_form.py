from __future__ import annotations

from kappa import SExpression, LispValue, EvaluatorFn
from kappa.errors import KappaArityError, KappaTypeError
from kappa.modules.python_loader import import_module
from kappa.types.environment import Environment
from kappa.types.nil import Nil
from kappa.types.symbol import Symbol


def _name(value: SExpression, what: str) -> str:
    if isinstance(value, Symbol):
        return value.id
    if isinstance(value, str):
        return value
    raise KappaTypeError(f"import {what} must be a string or symbol, got {value!r}")


def import_form(tail: list[SExpression], env: Environment, evaluate_fn: EvaluatorFn, _: bool = False) -> LispValue:
    """
    Usage:
        (import "module_name" as "alias" helpers "helper_module_name")
    """
    if not tail:
        raise KappaArityError("import requires a module name")
    module_name = _name(tail[0], "module name")
    alias = None
    helpers_module = None

    i = 1
    while i < len(tail):
        key = tail[i]
        if i + 1 >= len(tail):
            raise KappaArityError(f"import option {key} is missing a value")
        if key == Symbol("as"):
            alias = _name(tail[i + 1], "alias")
        elif key == Symbol("helpers"):
            helpers_module = _name(tail[i + 1], "helpers module")
        else:
            raise KappaArityError(f"Unknown import option {key}")
        i += 2

    import_module(env, module_name, alias=alias, helpers_module=helpers_module)
    return Nil
