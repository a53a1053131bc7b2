import pytest

from kappa.builtin.env_builtin import register, to_lisp_string
from kappa.errors import KappaArityError, KappaTypeError, KappaInvalidKey
from kappa.evaluation.evaluator import evaluate
from kappa.reader.parser import TokenStream, lex
from kappa.types import Environment, Symbol, Nil, TRUE, FALSE


@pytest.fixture
def env():
    """Fresh environment with builtins loaded."""
    e = Environment()
    register(e)
    return e


def eval_one(source, env):
    stream = TokenStream(lex(source))
    return evaluate(stream.parse_expr(), env)


@pytest.mark.parametrize(
    "source,expected",
    [
        ("(+ 1 2 3)", 6),
        ("(- 10 3 2)", 5),
        ("(- 4)", -4),
        ("(* 2 3 4)", 24),
        ("(/ 12 3)", 4),
        ("(/ 4)", 0.25),
        ("(+ (* 2 3) (- 10 4))", 12),
        ("(+ 1 2.5 3)", 6.5),
        ("(+)", 0),
        ("(*)", 1),
        ("(+ 1 (* 2 (+ 3 4) (- 10 6)))", 57),  # 1 + 2*(7*4)
        ("(mod 7 3)", 1),
        ("(mod -7 3)", 2),
    ]
)
def test_arithmetic(source, expected, env):
    assert eval_one(source, env) == expected


@pytest.mark.parametrize(
    "source,error",
    [
        ('(+ 1 "a")', KappaTypeError),
        ("(-)", KappaArityError),
        ("(/)", KappaArityError),
        ("(mod 7.5 2)", KappaTypeError),
        ("(mod 7)", KappaArityError),
    ]
)
def test_arithmetic_errors(source, error, env):
    with pytest.raises(error):
        eval_one(source, env)


@pytest.mark.parametrize(
    "source,expected",
    [
        ("(= 1 1 1)", TRUE),
        ("(= 1 1.0)", TRUE),
        ("(= 1 2)", FALSE),
        ('(eq? "a" "a")', TRUE),
        ("(= (list 1 (list 2)) (list 1 (list 2)))", TRUE),
        ("(/= 1 2)", TRUE),
        ("(< 1 2 3)", TRUE),
        ("(< 1 3 2)", FALSE),
        ("(<= 2 2)", TRUE),
        ("(> 3 2 1)", TRUE),
        ("(>= 1 2)", FALSE),
        ("(not nil)", TRUE),
        ("(not #f)", TRUE),
        ("(not 0)", FALSE),
        ("(null? nil)", TRUE),
        ("(null? (list))", TRUE),
        ("(null? (list 1))", FALSE),
    ]
)
def test_comparisons_and_predicates(source, expected, env):
    assert eval_one(source, env) == expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("(cons 1 (list 2 3))", [1, 2, 3]),
        ("(cons 1 nil)", [1]),
        ("(cons 1 2)", ([1], 2)),
        ("(car (list 1 2))", 1),
        ("(car nil)", Nil),
        ("(cdr (list 1 2 3))", [2, 3]),
        ("(cdr (list 1))", Nil),
        ("(cdr (cons 1 2))", 2),
        ("(length (list 1 2 3))", 3),
        ("(length nil)", 0),
        ("(nth 0 (list 5 6))", 5),
        ("(nth 2 (list 5 6))", Nil),
        ("(append (list 1) nil (list 2 3))", [1, 2, 3]),
        ("(apply + (list 1 2 3))", 6),
        ("(apply (lambda (a b) (* a b)) (list 6 7))", 42),
    ]
)
def test_list_builtins(source, expected, env):
    assert eval_one(source, env) == expected


def test_dict_builds_string_keyed_records(env):
    result = eval_one('(dict "b" 1 :a 2)', env)
    assert result == {"b": 1, "a": 2}
    assert list(result) == ["b", "a"]


@pytest.mark.parametrize(
    "source,expected",
    [
        ('(get (dict "a" 1) "a")', 1),
        ('(get (dict "a" 1) :a)', 1),
        ('(get (dict "a" 1) "b")', Nil),
        ('(get (dict "a" 1) "b" 0)', 0),
    ]
)
def test_get(source, expected, env):
    assert eval_one(source, env) == expected


def test_dict_errors(env):
    with pytest.raises(KappaArityError):
        eval_one('(dict "a")', env)
    with pytest.raises(KappaInvalidKey):
        eval_one("(dict 'a 1)", env)


@pytest.mark.parametrize(
    "value,expected",
    [
        (Nil, "nil"),
        (Symbol("#t"), "#t"),
        ([1, [2, "x"]], "(1 (2 x))"),
        (([1], 2), "(1 . 2)"),
        ({"a": 1}, "{a: 1}"),
        (2.5, "2.5"),
    ]
)
def test_to_lisp_string(value, expected):
    assert to_lisp_string(value) == expected


def test_print(env, capsys):
    assert eval_one('(print "x =" 1 (list 2 3))', env) is Nil
    assert capsys.readouterr().out == "x = 1 (2 3)\n"
