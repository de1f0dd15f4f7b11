"""Tests for the compound rules: sequences, fixed sequences, pairs, tuples, maps."""

from __future__ import annotations

import collections
import collections.abc
from typing import Annotated

import pytest

from tomlget import (
    MAX_DEPTH,
    ArityMismatchError,
    ExactConversion,
    FixedLength,
    FixedSequenceConversion,
    MapConversion,
    PairConversion,
    Registry,
    SequenceConversion,
    TupleConversion,
    TypeMismatchError,
    UnsupportedConversionError,
    Value,
    ValueType,
    get,
    load_yaml,
    resolve,
)

INT = ExactConversion(int, ValueType.INTEGER)


class Key(str):
    pass


class TestResolution:
    def test_sequence(self) -> None:
        assert resolve(list[int]) == SequenceConversion(list[int], INT)

    def test_fixed_sequence(self) -> None:
        target = Annotated[list[int], FixedLength(3)]
        assert resolve(target) == FixedSequenceConversion(target, INT, 3)

    def test_pair_and_tuple_split_on_arity(self) -> None:
        assert isinstance(resolve(tuple[int, str]), PairConversion)
        assert isinstance(resolve(tuple[int]), TupleConversion)
        assert isinstance(resolve(tuple[int, str, float]), TupleConversion)

    def test_map(self) -> None:
        assert resolve(dict[str, int]) == MapConversion(dict[str, int], str, INT)

    def test_cached_per_registry(self) -> None:
        registry = Registry()
        assert registry.resolve(list[int]) is registry.resolve(list[int])

    def test_plain_annotated_passes_through(self) -> None:
        assert resolve(Annotated[list[int], "ports"]) == resolve(list[int])

    def test_type_alias(self) -> None:
        type Ports = list[int]
        assert resolve(Ports) == SequenceConversion(list[int], INT)

    @pytest.mark.parametrize(
        "target",
        [
            dict[int, str],
            dict[Key | None, int],
            set[int],
            frozenset[int],
            list[object],
            tuple[int, set[int]],
            Annotated[int, FixedLength(1)],
            Annotated[list[int], FixedLength(1), FixedLength(2)],
            Annotated[tuple[int, int], FixedLength(2)],
            int | str,
        ],
    )
    def test_unsupported(self, target: object) -> None:
        with pytest.raises(UnsupportedConversionError):
            resolve(target)

    def test_map_key_must_be_text(self) -> None:
        with pytest.raises(UnsupportedConversionError, match="not constructible from text"):
            resolve(dict[int, int])

    def test_depth_limit(self) -> None:
        target: object = int
        for _ in range(MAX_DEPTH + 2):
            target = list[target]  # type: ignore[valid-type]
        with pytest.raises(UnsupportedConversionError, match="maximum depth"):
            resolve(target)


class TestSequences:
    def test_list(self) -> None:
        assert get(Value([1, 2, 3]), list[int]) == [1, 2, 3]

    def test_abstract_sequences_give_lists(self) -> None:
        v = Value([1, 2])
        assert get(v, collections.abc.Sequence[int]) == [1, 2]
        assert get(v, collections.abc.MutableSequence[int]) == [1, 2]

    def test_variadic_tuple(self) -> None:
        assert get(Value([1, 2, 3]), tuple[int, ...]) == (1, 2, 3)

    def test_deque(self) -> None:
        result = get(Value([1, 2]), collections.deque[int])
        assert isinstance(result, collections.deque)
        assert list(result) == [1, 2]

    def test_empty(self) -> None:
        assert get(Value([]), list[str]) == []

    def test_values(self) -> None:
        v = Value([1, "x"])
        assert get(v, list[Value]) == [Value(1), Value("x")]

    def test_nested(self) -> None:
        assert get(Value([[1], [2, 3]]), list[tuple[int, ...]]) == [(1,), (2, 3)]

    def test_element_failure_aborts(self) -> None:
        with pytest.raises(TypeMismatchError) as exc_info:
            get(Value([1, "two", 3]), list[int])
        assert exc_info.value.actual is ValueType.STRING

    def test_element_failure_reports_element_location(self) -> None:
        doc = load_yaml("ports:\n  - 80\n  - eighty\n", name="ports.yaml")
        with pytest.raises(TypeMismatchError) as exc_info:
            get(doc.payload["ports"], list[int])
        assert exc_info.value.location is not None
        assert exc_info.value.location.line == 3
        assert exc_info.value.location.column == 5

    def test_requires_array(self) -> None:
        with pytest.raises(TypeMismatchError) as exc_info:
            get(Value({"a": 1}), list[int])
        assert exc_info.value.actual is ValueType.TABLE


class TestFixedSequences:
    def test_exact_length(self) -> None:
        assert get(Value([1, 2, 3]), Annotated[list[int], FixedLength(3)]) == [1, 2, 3]

    def test_tuple_container(self) -> None:
        target = Annotated[tuple[int, ...], FixedLength(2)]
        assert get(Value([1, 2]), target) == (1, 2)

    def test_too_many(self) -> None:
        with pytest.raises(ArityMismatchError) as exc_info:
            get(Value([1, 2, 3]), Annotated[list[int], FixedLength(2)])
        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 3

    def test_too_few_is_not_padded(self) -> None:
        with pytest.raises(ArityMismatchError) as exc_info:
            get(Value([1]), Annotated[list[int], FixedLength(2)])
        assert exc_info.value.actual == 1

    def test_arity_checked_before_elements(self) -> None:
        with pytest.raises(ArityMismatchError):
            get(Value(["a", "b", "c"]), Annotated[list[int], FixedLength(2)])

    def test_zero_length(self) -> None:
        assert get(Value([]), Annotated[list[int], FixedLength(0)]) == []

    def test_negative_length_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            FixedLength(-1)


class TestPairsAndTuples:
    def test_pair(self) -> None:
        assert get(Value([1, "x"]), tuple[int, str]) == (1, "x")

    def test_pair_second_element_mismatch(self) -> None:
        with pytest.raises(TypeMismatchError) as exc_info:
            get(Value([1, "x"]), tuple[int, int])
        assert exc_info.value.expected == (ValueType.INTEGER,)
        assert exc_info.value.actual is ValueType.STRING

    def test_pair_arity(self) -> None:
        with pytest.raises(ArityMismatchError) as exc_info:
            get(Value([1, 2, 3]), tuple[int, int])
        assert (exc_info.value.expected, exc_info.value.actual) == (2, 3)

    def test_triple(self) -> None:
        v = Value([1, "x", 2.5])
        assert get(v, tuple[int, str, float]) == (1, "x", 2.5)

    def test_single(self) -> None:
        assert get(Value([7]), tuple[int]) == (7,)

    def test_empty_tuple(self) -> None:
        assert get(Value([]), tuple[()]) == ()
        with pytest.raises(ArityMismatchError):
            get(Value([1]), tuple[()])

    def test_tuple_arity_before_elements(self) -> None:
        with pytest.raises(ArityMismatchError) as exc_info:
            get(Value(["a", "b"]), tuple[int, int, int])
        assert (exc_info.value.expected, exc_info.value.actual) == (3, 2)


class TestMaps:
    def test_dict(self) -> None:
        v = Value({"a": 1, "b": 2})
        assert get(v, dict[str, int]) == {"a": 1, "b": 2}

    def test_dict_of_values(self) -> None:
        v = Value({"a": 1, "b": "x"})
        result = get(v, dict[str, Value])
        assert len(result) == 2
        assert result["b"] == Value("x")

    def test_preserves_table_order(self) -> None:
        v = Value({"z": 1, "a": 2, "m": 3})
        assert list(get(v, dict[str, int])) == ["z", "a", "m"]

    def test_ordered_dict(self) -> None:
        result = get(Value({"a": 1}), collections.OrderedDict[str, int])
        assert isinstance(result, collections.OrderedDict)

    def test_abstract_mapping(self) -> None:
        assert get(Value({"a": 1}), collections.abc.Mapping[str, int]) == {"a": 1}

    def test_key_subclass(self) -> None:
        result = get(Value({"a": 1}), dict[Key, int])
        (key,) = result
        assert isinstance(key, Key)

    def test_nested_compounds(self) -> None:
        v = Value({"east": [[1, "a"]], "west": []})
        target = dict[str, list[tuple[int, str]]]
        assert get(v, target) == {"east": [(1, "a")], "west": []}

    def test_value_failure_aborts(self) -> None:
        with pytest.raises(TypeMismatchError):
            get(Value({"a": 1, "b": "x"}), dict[str, int])

    def test_requires_table(self) -> None:
        with pytest.raises(TypeMismatchError) as exc_info:
            get(Value([1]), dict[str, int])
        assert exc_info.value.expected == (ValueType.TABLE,)
