"""Built-in functions for the Kappa runtime environment.

This module defines core arithmetic, comparison, list processing, predicates
and printing, plus the `py-*` builtins that give Lisp code explicit control
over how values cross into Python (hints, forced sequences, identity-keyed
mappings, handles).

Every builtin has the signature `fn(env, args)`.
"""
from __future__ import annotations

from kappa import LispValue
from kappa.bridge.handles import PyHandle
from kappa.bridge.hints import Hint, ForeignValue
from kappa.errors import KappaTypeError, KappaArityError, KappaInvalidKey
from kappa.evaluation.apply import apply as apply_engine, call_foreign, resolve_tail
from kappa.evaluation.evaluator import evaluate0
from kappa.types.environment import Environment
from kappa.types.nil import Nil
from kappa.types.symbol import Symbol, TRUE, FALSE, to_bool_symbol


def _arity(name: str, args: list[LispValue], n: int) -> None:
    if len(args) != n:
        plural = "argument" if n == 1 else "arguments"
        raise KappaArityError(f"{name} requires exactly {n} {plural}")


def equals(env: Environment, expr: list[LispValue]) -> Symbol:
    """Return #t if all arguments are equal (or zero/one arg), else #f."""
    first = expr[0] if expr else Nil
    return to_bool_symbol(all(is_equal(first, other) for other in expr[1:]))


def not_equals(env: Environment, expr: list[LispValue]) -> Symbol:
    """Logical negation of equals."""
    return FALSE if equals(env, expr) == TRUE else TRUE


def is_equal(a, b):
    """Deep equality for host values, element-wise for lists."""
    if a is b:
        return True
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(is_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    if type(a) != type(b):
        return False
    return a == b


# -------------------------------
# Arithmetic
# -------------------------------
def add(env: Environment, expr: list[LispValue]) -> LispValue:
    """Return the numeric sum of all arguments; errors if any arg is non-numeric."""
    try:
        return sum(expr)
    except TypeError:
        raise KappaTypeError("All arguments to + must be numbers")


def sub(env: Environment, expr: list[LispValue]) -> LispValue:
    """Subtract all subsequent numbers from the first; unary negation for one arg."""
    if not expr:
        raise KappaArityError("- requires at least 1 argument")
    try:
        if len(expr) == 1:
            return -expr[0]
        result = expr[0]
        for x in expr[1:]:
            result -= x
        return result
    except TypeError:
        raise KappaTypeError("All arguments to - must be numbers")


def mul(env: Environment, expr: list[LispValue]) -> LispValue:
    result = 1
    try:
        for x in expr:
            result *= x
        return result
    except TypeError:
        raise KappaTypeError("All arguments to * must be numbers")


def div(env: Environment, expr: list[LispValue]) -> LispValue:
    """Divide left-to-right; with one arg returns reciprocal."""
    if not expr:
        raise KappaArityError("/ requires at least 1 argument")
    try:
        if len(expr) == 1:
            return 1 / expr[0]
        result = expr[0]
        for x in expr[1:]:
            result /= x
        return result
    except TypeError:
        raise KappaTypeError("All arguments to / must be numbers")


def mod(env: Environment, expr: list[LispValue]) -> LispValue:
    """(mod n d) => n % d. Exactly 2 integer arguments."""
    _arity("mod", expr, 2)
    n, d = expr
    if not isinstance(n, int) or not isinstance(d, int):
        raise KappaTypeError("All arguments to mod must be integers")
    return n % d


def lt(env: Environment, expr: list[LispValue]) -> Symbol:
    return to_bool_symbol(all(a < b for a, b in zip(expr, expr[1:])))


def lte(env: Environment, expr: list[LispValue]) -> Symbol:
    return to_bool_symbol(all(a <= b for a, b in zip(expr, expr[1:])))


def gt(env: Environment, expr: list[LispValue]) -> Symbol:
    return to_bool_symbol(all(a > b for a, b in zip(expr, expr[1:])))


def gte(env: Environment, expr: list[LispValue]) -> Symbol:
    return to_bool_symbol(all(a >= b for a, b in zip(expr, expr[1:])))


def logical_not(env: Environment, expr: list[LispValue]) -> Symbol:
    """Logical NOT for a single value; only Nil and #f are considered falsey."""
    _arity("not", expr, 1)
    return to_bool_symbol(expr[0] is Nil or expr[0] == FALSE)


# -------------------------------
# Lists
# -------------------------------
def cons(env: Environment, expr: list[LispValue]) -> LispValue:
    """Prepend head to a list; a non-list tail makes a dotted pair."""
    _arity("cons", expr, 2)
    head, tail = expr
    if tail is Nil:
        return [head]
    if isinstance(tail, list):
        return [head] + tail
    return [head], tail


def car(env: Environment, expr: list[LispValue]) -> LispValue:
    _arity("car", expr, 1)
    xs = expr[0]
    if isinstance(xs, tuple):
        return xs[0][0] if xs[0] else Nil
    if isinstance(xs, list) and xs:
        return xs[0]
    return Nil


def cdr(env: Environment, expr: list[LispValue]) -> LispValue:
    _arity("cdr", expr, 1)
    xs = expr[0]
    if isinstance(xs, tuple):
        items, tail = xs
        return items[1:] if len(items) > 1 else tail
    if isinstance(xs, list) and len(xs) > 1:
        return xs[1:]
    return Nil


def list_builtin(env: Environment, expr: list[LispValue]) -> list[LispValue]:
    return list(expr)


def length(env: Environment, expr: list[LispValue]) -> int:
    _arity("length", expr, 1)
    xs = expr[0]
    if xs is Nil:
        return 0
    if not isinstance(xs, (list, dict, str)):
        raise KappaTypeError(f"length expects a list, dict or string, got {xs!r}")
    return len(xs)


def nth(env: Environment, expr: list[LispValue]) -> LispValue:
    """(nth i xs) zero-based element access; Nil when out of range."""
    _arity("nth", expr, 2)
    i, xs = expr
    if not isinstance(i, int) or not isinstance(xs, list):
        raise KappaTypeError("nth expects an integer index and a list")
    return xs[i] if 0 <= i < len(xs) else Nil


def append(env: Environment, expr: list[LispValue]) -> list[LispValue]:
    """Concatenate lists; Nil is treated as the empty list."""
    result = []
    for item in expr:
        if item is Nil:
            continue
        if not isinstance(item, list):
            raise KappaTypeError(f"append expects list arguments, got {type(item).__name__}")
        result.extend(item)
    return result


def null(env: Environment, args: list[LispValue]) -> Symbol:
    """Predicate: #t if the single argument is Nil or the empty list."""
    _arity("null?", args, 1)
    return to_bool_symbol(args[0] is Nil or args[0] == [])


def apply(env: Environment, expr: list[LispValue]) -> LispValue:
    """(apply f args): call f with the elements of args."""
    _arity("apply", expr, 2)
    func, args = expr
    if not isinstance(args, list):
        raise KappaTypeError("Second argument to apply must be a list")
    return resolve_tail(apply_engine(func, list(args), env, evaluate0, False), evaluate0)


# -------------------------------
# String-keyed records
# -------------------------------
def _record_key(key: LispValue) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, Symbol) and key.is_keyword:
        return key.keyword_name
    raise KappaInvalidKey(f"dict keys must be strings or keywords, got {key!r}")


def dict_builtin(env: Environment, args: list[LispValue]) -> dict:
    """(dict "a" 1 :b 2) -> {"a": 1, "b": 2}, keys in the order given."""
    if len(args) % 2:
        raise KappaArityError("dict requires key/value pairs")
    return {_record_key(k): v for k, v in zip(args[::2], args[1::2])}


def get(env: Environment, args: list[LispValue]) -> LispValue:
    """(get d key [default])"""
    if len(args) not in (2, 3):
        raise KappaArityError("get requires a dict, a key and an optional default")
    d, key = args[0], args[1]
    default = args[2] if len(args) == 3 else Nil
    if not isinstance(d, dict):
        raise KappaTypeError(f"get expects a dict, got {d!r}")
    if isinstance(key, Symbol) and key.is_keyword:
        key = key.keyword_name
    return d.get(key, default)


# -------------------------------
# Printing
# -------------------------------
def to_lisp_string(x: LispValue) -> str:
    """Printable form of a host value (Nil -> "nil", Symbol -> id, lists in parens)."""
    if x is Nil:
        return "nil"
    if isinstance(x, Symbol):
        return x.id
    if isinstance(x, list):
        return "(" + " ".join(to_lisp_string(e) for e in x) + ")"
    if isinstance(x, tuple):
        items, tail = x
        return "(" + " ".join(to_lisp_string(e) for e in items) + " . " + to_lisp_string(tail) + ")"
    if isinstance(x, dict):
        return "{" + ", ".join(f"{to_lisp_string(k)}: {to_lisp_string(v)}" for k, v in x.items()) + "}"
    return str(x) if isinstance(x, str) else repr(x)


def print_builtin(env: Environment, args: list[LispValue]) -> LispValue:
    print(" ".join(to_lisp_string(a) for a in args))
    return Nil


# -------------------------------
# Python bridge
# -------------------------------
def _hinted(name: str, hint: Hint):
    def convert(env: Environment, args: list[LispValue]) -> ForeignValue:
        _arity(name, args, 1)
        return ForeignValue(env.runtime.to_foreign(args[0], hint))
    convert.__name__ = name.replace("-", "_")
    convert.__doc__ = f"({name} x): convert x to Python with the {hint.value} hint."
    return convert


def py_tuple(env: Environment, args: list[LispValue]) -> ForeignValue:
    """(py-tuple a b ...) -> Python tuple in argument order, whatever the kinds."""
    return ForeignValue(env.runtime.to_foreign(list(args), Hint.TUPLE))


def py_seq(env: Environment, args: list[LispValue]) -> ForeignValue:
    """(py-seq a b ...) -> Python list of exactly len(args) items; nil becomes None.

    Also bound as `shape`, for declarations like (shape nil 784).
    """
    return env.runtime.forced_sequence(*args)


def py_feed(env: Environment, args: list[LispValue]) -> ForeignValue:
    """(py-feed h1 v1 h2 v2 ...) -> dict keyed by the objects behind the handles."""
    if len(args) % 2:
        raise KappaArityError("py-feed requires handle/value pairs")
    return env.runtime.identity_mapping(zip(args[::2], args[1::2]))


def _handle(name: str, value: LispValue) -> PyHandle:
    if not isinstance(value, PyHandle):
        raise KappaTypeError(f"{name} expects a Python handle, got {value!r}")
    return value


def py_getattr(env: Environment, args: list[LispValue]) -> LispValue:
    """(py-getattr obj "name") reads an attribute from the live object."""
    _arity("py-getattr", args, 2)
    obj, name = args
    if not isinstance(name, str):
        raise KappaTypeError(f"py-getattr expects an attribute name string, got {name!r}")
    runtime = env.runtime
    return runtime.to_host(runtime.getattr(_handle("py-getattr", obj), name))


def py_call(env: Environment, args: list[LispValue]) -> LispValue:
    """(py-call f args... :kw value ...)"""
    if not args:
        raise KappaArityError("py-call requires a callable")
    return call_foreign(env, _handle("py-call", args[0]), list(args[1:]))


def py_get(env: Environment, args: list[LispValue]) -> LispValue:
    """(py-get x) converts an explicitly marshalled value back to its host form."""
    _arity("py-get", args, 1)
    x = args[0]
    runtime = env.runtime
    if isinstance(x, ForeignValue):
        return runtime.to_host(x.value)
    if isinstance(x, PyHandle):
        return runtime.to_host(x.target)
    return x


def is_py_handle(env: Environment, args: list[LispValue]) -> Symbol:
    _arity("py-handle?", args, 1)
    return to_bool_symbol(isinstance(args[0], PyHandle))


def py_release(env: Environment, args: list[LispValue]) -> Symbol:
    """(py-release h) drops the runtime's reference; later use of h is an error."""
    _arity("py-release", args, 1)
    return to_bool_symbol(env.runtime.release(_handle("py-release", args[0])))


def register(env: Environment) -> None:
    """Register all builtin functions and constants into the given environment."""
    env.update(
        {
            Symbol("+"): add,
            Symbol("-"): sub,
            Symbol("*"): mul,
            Symbol("/"): div,
            Symbol("mod"): mod,
            Symbol("="): equals,
            Symbol("eq?"): equals,
            Symbol("/="): not_equals,
            Symbol("<"): lt,
            Symbol("<="): lte,
            Symbol(">"): gt,
            Symbol(">="): gte,
            Symbol("not"): logical_not,
            Symbol("cons"): cons,
            Symbol("car"): car,
            Symbol("cdr"): cdr,
            Symbol("list"): list_builtin,
            Symbol("length"): length,
            Symbol("nth"): nth,
            Symbol("append"): append,
            Symbol("null?"): null,
            Symbol("apply"): apply,
            Symbol("dict"): dict_builtin,
            Symbol("get"): get,
            Symbol("print"): print_builtin,
            Symbol("py-int"): _hinted("py-int", Hint.INTEGER),
            Symbol("py-float"): _hinted("py-float", Hint.FLOAT),
            Symbol("py-scalar"): _hinted("py-scalar", Hint.SCALAR),
            Symbol("py-array"): _hinted("py-array", Hint.ARRAY),
            Symbol("py-tuple"): py_tuple,
            Symbol("py-seq"): py_seq,
            Symbol("shape"): py_seq,
            Symbol("py-feed"): py_feed,
            Symbol("py-getattr"): py_getattr,
            Symbol("py-call"): py_call,
            Symbol("py-get"): py_get,
            Symbol("py-handle?"): is_py_handle,
            Symbol("py-release"): py_release,
        }
    )
    env.define(TRUE, TRUE)
    env.define(FALSE, FALSE)
