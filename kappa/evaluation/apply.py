"""Application engine for Kappa.

This module centralizes function application semantics for the interpreter:
- Tail-call awareness via TailCall objects (consumed by the trampoline).
- Application of host builtins registered in the environment.
- Calls into Python through the runtime, with keyword symbols mapped to
  Python keyword arguments.

Keeping this logic in one place prevents duplication between the evaluator,
special forms, builtins and callbacks coming back from Python.
"""

from __future__ import annotations

from typing import Any

from kappa import LispValue, EvaluatorFn
from kappa.bridge.handles import PyHandle
from kappa.errors import KappaArityError, KappaTypeError
from kappa.types.environment import Environment
from kappa.types.lambda_fn import Lambda
from kappa.types.symbol import Symbol
from kappa.types.tail_call import TailCall


def resolve_tail(value: LispValue, evaluate_fn: EvaluatorFn) -> LispValue:
    """Step the trampoline until a concrete value is produced."""
    while isinstance(value, TailCall):
        value = evaluate_fn(value.fn.body, value.env, True)
    return value


def apply_lambda(
    fn: Lambda,
    args: list[LispValue],
    evaluate_fn: EvaluatorFn,
    is_tail_call: bool,
) -> LispValue | TailCall:
    """Apply a host Lambda.

    In tail position the body is not evaluated here: a TailCall is returned
    for the trampoline. Otherwise the body is evaluated to a concrete value.
    """
    new_env = fn.extend_env(list(args), evaluate_fn)
    if is_tail_call:
        return TailCall(fn, new_env)
    return resolve_tail(evaluate_fn(fn.body, new_env, True), evaluate_fn)


def split_keywords(args: list[LispValue]) -> tuple[list[LispValue], dict[str, LispValue]]:
    """Separate `:name value` pairs from positional arguments."""
    positional: list[LispValue] = []
    kwargs: dict[str, LispValue] = {}
    i = 0
    while i < len(args):
        arg = args[i]
        if isinstance(arg, Symbol) and arg.is_keyword:
            if i + 1 >= len(args):
                raise KappaArityError(f"Keyword {arg} is missing a value")
            kwargs[arg.keyword_name] = args[i + 1]
            i += 2
        else:
            positional.append(arg)
            i += 1
    return positional, kwargs


def call_foreign(env: Environment, fn: Any, args: list[LispValue]) -> LispValue:
    """Call a Python callable (or handle) through the environment's runtime."""
    positional, kwargs = split_keywords(args)
    return env.runtime.call(fn, positional, kwargs)


def apply(
    head: Any,
    args: list[LispValue],
    env: Environment,
    evaluate_fn: EvaluatorFn,
    tail: bool = False,
) -> LispValue | TailCall:
    """Apply a Lambda, a Python handle, or a host builtin `fn(env, args)`."""
    if isinstance(head, Lambda):
        return apply_lambda(head, args, evaluate_fn, tail)
    if isinstance(head, PyHandle):
        return call_foreign(env, head, args)
    if callable(head):
        return head(env, args)
    raise KappaTypeError(f"Cannot apply non-function {head!r}")
