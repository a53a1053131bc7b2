import pytest

from kappa.bridge.hints import ForeignValue
from kappa.bridge.marshal import build_forced_sequence, build_identity_keyed_mapping
from kappa.bridge.handles import PyHandle
from kappa.errors import KappaInvalidKey, KappaTypeMismatch
from kappa.types import Nil, Symbol


class AlwaysEqual:
    """Distinct objects that Python considers the same dict key."""

    def __eq__(self, other):
        return isinstance(other, AlwaysEqual)

    def __hash__(self):
        return 1


# -------------------------------
# Forced sequences
# -------------------------------
@pytest.mark.parametrize(
    "elements,expected",
    [
        ((), []),
        ((5,), [5]),
        ((Nil, 784), [None, 784]),
        (("a", 1), ["a", 1]),
        (([1, 2],), [[1, 2]]),
    ]
)
def test_forced_sequence(runtime, elements, expected):
    result = runtime.forced_sequence(*elements)
    assert isinstance(result, ForeignValue)
    assert result.value == expected


def test_forced_sequence_rejects_nulls_when_asked(runtime):
    with pytest.raises(KappaTypeMismatch):
        runtime.forced_sequence(Nil, 784, allow_null_elements=False)


def test_forced_sequence_without_runtime():
    assert build_forced_sequence(1).value == [1]


def test_forced_sequence_is_not_reconverted(runtime):
    # A one-element forced sequence stays a list when passed on to Python
    assert runtime.call(len, [runtime.forced_sequence(7)]) == 1


# -------------------------------
# Identity-keyed mappings
# -------------------------------
def test_identity_mapping_keys_are_the_objects(runtime):
    a, b = object(), object()
    ha, hb = runtime.wrap(a), runtime.wrap(b)
    result = runtime.identity_mapping([(ha, [1, 2]), (hb, "x")])
    assert isinstance(result, ForeignValue)
    assert result.value == {a: [1, 2], b: "x"}


def test_identity_mapping_last_value_wins(runtime):
    a, b = object(), object()
    ha, hb = runtime.wrap(a), runtime.wrap(b)
    result = runtime.identity_mapping([(ha, 1), (hb, 2), (ha, 3)]).value
    assert len(result) == 2
    assert result[a] == 3
    assert list(result) == [a, b]


def test_identity_mapping_empty(runtime):
    assert runtime.identity_mapping([]).value == {}


@pytest.mark.parametrize("key", ["a", 1, Nil, Symbol(":k")])
def test_identity_mapping_rejects_non_handle_keys(runtime, key):
    with pytest.raises(KappaInvalidKey):
        runtime.identity_mapping([(key, 1)])


def test_identity_mapping_rejects_unhashable_objects(runtime):
    with pytest.raises(KappaInvalidKey):
        runtime.identity_mapping([(runtime.wrap([1, 2]), 1)])


def test_identity_mapping_rejects_colliding_objects(runtime):
    pairs = [(runtime.wrap(AlwaysEqual()), 1), (runtime.wrap(AlwaysEqual()), 2)]
    with pytest.raises(KappaInvalidKey):
        runtime.identity_mapping(pairs)


def test_identity_mapping_without_runtime(runtime):
    obj = object()
    result = build_identity_keyed_mapping([(runtime.wrap(obj), 1)])
    assert result.value == {obj: 1}


# -------------------------------
# From Kappa code
# -------------------------------
def test_shape_declaration(itp):
    result = itp.eval("(shape nil 784)")
    assert isinstance(result, ForeignValue)
    assert result.value == [None, 784]
    assert itp.eval("(py-get (py-seq 3))") == [3]


def test_py_feed(itp):
    itp.eval("""
      (import "builtins")
      (define a (builtins:object))
      (define b (builtins:object))
      (define feed (py-feed a (1 2) b 3.5 a (4 5)))
    """)
    a = itp.eval("a")
    b = itp.eval("b")
    assert isinstance(a, PyHandle)
    feed = itp.eval("feed").value
    assert feed == {a.target: [4, 5], b.target: 3.5}
    assert itp.eval("(length (py-get feed))") == 2
    assert itp.eval("(get (py-get feed) a)") == [4, 5]


def test_py_feed_errors(itp):
    with pytest.raises(KappaInvalidKey):
        itp.eval('(py-feed "a" 1)')
    assert itp.eval('(condition-case (py-feed 1 2) (invalid-key "bad"))') == "bad"
