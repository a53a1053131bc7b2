"""Special forms: condition-case and cond.

- condition-case: error handling construct similar to Emacs Lisp's condition-case.
  Handlers name a condition class; the caught exception is bound as a Python
  handle, so (e:args) and friends work on it.
- cond: multi-branch conditional form.
"""

from kappa import SExpression, LispValue, EvaluatorFn
from kappa.errors import (
    KappaArityError,
    KappaError,
    KappaInvalidKey,
    KappaScopeError,
    KappaTypeMismatch,
)
from kappa.types.environment import Environment
from kappa.types.nil import Nil
from kappa.types.symbol import Symbol, TRUE, is_true

# Condition names usable in handlers, most specific first
CONDITIONS: dict[Symbol, type[BaseException]] = {
    Symbol("type-mismatch"): KappaTypeMismatch,
    Symbol("invalid-key"): KappaInvalidKey,
    Symbol("scope-error"): KappaScopeError,
    Symbol("kappa-error"): KappaError,
    Symbol("error"): Exception,
}

PYTHON_ERROR = Symbol("python-error")


def _handles(condition: Symbol, ex: Exception) -> bool:
    if condition == PYTHON_ERROR:
        # anything raised on the Python side of the bridge
        return not isinstance(ex, KappaError)
    cls = CONDITIONS.get(condition)
    return cls is not None and isinstance(ex, cls)


def _eval_body(evaluate_fn: EvaluatorFn, body: list[SExpression], env: Environment, is_tail_call: bool) -> LispValue:
    result: LispValue = Nil
    for i, expr in enumerate(body):
        is_last = i == len(body) - 1
        result = evaluate_fn(expr, env, is_tail_call and is_last)
    return result


def condition_case_form(
    tail: list[SExpression],
    env: Environment,
    evaluate_fn: EvaluatorFn,
    is_tail_call: bool = False,
) -> LispValue:
    """(condition-case body (condition [var] handler-body...) ...)"""
    if not tail:
        raise KappaArityError("condition-case requires at least a body expression")

    body_expr = tail[0]
    handlers = tail[1:]

    try:
        # Not in tail position: a deferred call would escape the handlers
        return evaluate_fn(body_expr, env)
    except Exception as ex:
        for handler in handlers:
            if not isinstance(handler, list) or not handler:
                continue
            condition, *rest = handler
            if not isinstance(condition, Symbol) or not _handles(condition, ex):
                continue

            local_env = Environment(outer=env)
            if len(rest) >= 2 and isinstance(rest[0], Symbol):
                local_env.define(rest[0], env.runtime.wrap(ex))
                rest = rest[1:]
            return _eval_body(evaluate_fn, rest, local_env, is_tail_call)
        raise


def cond_form(
    tail: list[SExpression],
    env: Environment,
    evaluate_fn: EvaluatorFn,
    is_tail_call: bool = False,
) -> LispValue:
    """Evaluate a (cond (test expr...) ...).

    The first clause whose test is truthy (not Nil and not #f) has its body
    evaluated; a clause with only a test returns the test's value. `else` and
    #t always match. If no clause matches, return Nil.
    """
    for clause in tail:
        if not isinstance(clause, list) or not clause:
            continue
        test, *body = clause

        if test == Symbol("else") or test == TRUE:
            test_val = TRUE
        else:
            test_val = evaluate_fn(test, env)
            if not is_true(test_val):
                continue
        if not body:
            return test_val
        return _eval_body(evaluate_fn, body, env, is_tail_call)

    return Nil
