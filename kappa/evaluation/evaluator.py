"""Core evaluator and trampoline for the Kappa interpreter.

Implements special-form dispatch, qualified-symbol access into Python objects,
and tail-call aware application via a simple trampoline using TailCall objects.
"""

from __future__ import annotations

from kappa import SExpression, LispValue
from kappa.bridge.handles import PyHandle
from kappa.errors import KappaTypeError
from kappa.types.environment import Environment
from kappa.types.lambda_fn import Lambda
from kappa.types.symbol import Symbol
from kappa.evaluation.apply import apply, call_foreign, resolve_tail
from kappa.evaluation.special_forms import SPECIAL_FORMS
from kappa.evaluation.py_module_util import is_qualified, resolve_object_path


def evaluate(expr: SExpression, env: Environment) -> LispValue:
    """
    Trampoline evaluator: tail-call aware evaluation.
    """
    return resolve_tail(evaluate0(expr, env, True), evaluate0)


def _is_applicable(value: LispValue) -> bool:
    return isinstance(value, (Lambda, PyHandle)) or callable(value)


def evaluate0(
    expr: SExpression,
    env: Environment,
    is_tail_call: bool = False,
) -> LispValue:
    """
    Core evaluator: single-step evaluation with tail-call awareness.
    Returns either a value or, in tail position, a TailCall.
    """
    match expr:
        case list([]):
            return []

        case list([head, *tail_args]):
            if isinstance(head, Symbol):
                if head in SPECIAL_FORMS:
                    return SPECIAL_FORMS[head](tail_args, env, evaluate0, is_tail_call)
                if is_qualified(head):
                    attr = resolve_object_path(env, head)
                    return call_foreign(env, attr, [evaluate0(arg, env) for arg in tail_args])
                fn = env.lookup(head)
                if not _is_applicable(fn):
                    raise KappaTypeError(f"Cannot apply non-function {head} = {fn!r}")
            elif isinstance(head, list):
                fn = evaluate0(head, env)
                if not _is_applicable(fn):
                    # Nested literal data, e.g. ((1 2) (3 4))
                    return expr
            elif _is_applicable(head):
                fn = head
            else:
                # Literal data list, e.g. (1 2 3)
                return expr

            args = [evaluate0(arg, env) for arg in tail_args]
            return apply(fn, args, env, evaluate0, is_tail_call)

        case Symbol():
            # Keywords are self-evaluating (keyword arguments to Python calls)
            if expr.is_keyword:
                return expr
            if is_qualified(expr):
                return env.runtime.to_host(resolve_object_path(env, expr))
            return env.lookup(expr)

    # --- Atoms return as-is ---
    return expr
