import numpy as np
from hypothesis import given, strategies as st

from kappa.bridge.runtime import ForeignRuntime
from kappa.config import BridgeConfig
from kappa.types import Nil, TRUE, FALSE

# Hypothesis runs many examples per test; the runtime is built inside each
# test rather than taken from a function-scoped fixture.


def _runtime(**options):
    return ForeignRuntime(BridgeConfig(**options))


# -------------------------------
# Strategies
# -------------------------------
ints = st.integers(min_value=-10**6, max_value=10**6)
floats = st.floats(allow_nan=False, allow_infinity=False)
numbers = st.one_of(ints, floats)
strings = st.text(max_size=10)
booleans = st.sampled_from([TRUE, FALSE])

homogeneous_atoms = st.one_of(
    st.lists(numbers, min_size=2, max_size=8),
    st.lists(strings, min_size=2, max_size=8),
    st.lists(booleans, min_size=2, max_size=8),
)

mixed_atoms = st.tuples(
    st.lists(st.one_of(numbers, strings, booleans, st.just(Nil)), max_size=6),
    ints,
    strings,
).flatmap(lambda t: st.permutations(t[0] + [t[1], t[2]]))

string_keyed = st.dictionaries(strings, ints, max_size=8)


# -------------------------------
# Properties
# -------------------------------
@given(homogeneous_atoms)
def test_homogeneous_lists_keep_order_and_element_types(items):
    result = _runtime().to_foreign(items)
    assert isinstance(result, list)
    assert len(result) == len(items)
    for host, foreign in zip(items, result):
        if isinstance(host, (int, float)):
            assert type(foreign) is type(host)
            assert foreign == host


@given(homogeneous_atoms)
def test_homogeneous_lists_round_trip(items):
    rt = _runtime()
    assert rt.to_host(rt.to_foreign(items)) == items


@given(mixed_atoms)
def test_mixed_lists_become_tuples_in_source_order(items):
    rt = _runtime()
    result = rt.to_foreign(items)
    assert isinstance(result, tuple)
    assert len(result) == len(items)
    assert rt.to_host(result) == items


@given(st.one_of(numbers, strings, booleans))
def test_singletons_collapse_unless_disabled(atom):
    assert _runtime().to_host(_runtime().to_foreign([atom])) == atom
    assert len(_runtime(collapse_singletons=False).to_foreign([atom])) == 1


@given(string_keyed)
def test_string_keys_keep_insertion_order(d):
    assert list(_runtime().to_foreign(d)) == list(d)


@given(string_keyed)
def test_string_keys_sorted_when_order_not_preserved(d):
    assert list(_runtime(preserve_key_order=False).to_foreign(d)) == sorted(d)


@given(string_keyed)
def test_string_keyed_dicts_round_trip(d):
    rt = _runtime()
    back = rt.to_host(rt.to_foreign(d))
    assert back == d
    assert list(back) == list(d)


@given(st.lists(st.one_of(ints, st.just(Nil)), max_size=10))
def test_forced_sequence_has_exactly_n_elements(items):
    result = _runtime().forced_sequence(*items).value
    assert isinstance(result, list)
    assert len(result) == len(items)
    assert [x is None for x in result] == [x is Nil for x in items]


@given(
    st.integers(min_value=1, max_value=5),
    st.integers(min_value=1, max_value=5),
    st.booleans(),
)
def test_rectangular_grids_become_arrays(rows, cols, as_float):
    value = 1.5 if as_float else 1
    grid = [[value] * cols for _ in range(rows)]
    result = _runtime().to_foreign(grid)
    assert isinstance(result, np.ndarray)
    assert result.shape == (rows, cols)
    assert result.dtype == (np.float64 if as_float else np.int64)


@given(st.lists(ints, min_size=1, max_size=5), st.integers(min_value=2, max_value=4))
def test_array_round_trip(row, n):
    rt = _runtime()
    grid = [list(row) for _ in range(n)]
    assert rt.to_host(rt.to_foreign(grid)) == grid
