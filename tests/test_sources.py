from __future__ import annotations

from dataclasses import dataclass

import pytest

from coreduce import NotEnumerableError, enumerate_source
from coreduce.sources import EXHAUSTED, PullSource


@dataclass
class Point:
    x: int
    y: int
    label: str = "p"


class TestEnumerateSource:

    def test_list_uses_positions(self):
        assert list(enumerate_source(["one", "two", "three"])) == [
            (0, "one"),
            (1, "two"),
            (2, "three"),
        ]

    def test_string_enumerates_characters(self):
        assert list(enumerate_source("ab")) == [(0, "a"), (1, "b")]

    def test_dict_uses_native_keys_in_insertion_order(self):
        source = {"one": "uno", "two": "dos", "three": "tres"}
        assert list(enumerate_source(source)) == [
            ("one", "uno"),
            ("two", "dos"),
            ("three", "tres"),
        ]

    def test_items_view_delivers_pairs_as_is(self):
        source = {"one": "cat", "two": "dog"}.items()
        assert list(enumerate_source(source)) == [("one", "cat"), ("two", "dog")]

    def test_dataclass_uses_field_names(self):
        assert list(enumerate_source(Point(1, 2))) == [("x", 1), ("y", 2), ("label", "p")]

    def test_generator_uses_positions(self):
        source = (n * n for n in range(3))
        assert list(enumerate_source(source)) == [(0, 0), (1, 1), (2, 4)]

    def test_enumeration_is_lazy(self):
        drawn = []

        def numbers():
            for n in range(3):
                drawn.append(n)
                yield n

        pairs = enumerate_source(numbers())
        assert drawn == []
        assert next(pairs) == (0, 0)
        assert drawn == [0]

    @pytest.mark.parametrize("source", [None, 42, 3.5, object()])
    def test_non_enumerable_raises_type_error(self, source):
        with pytest.raises(TypeError) as exc_info:
            enumerate_source(source)
        assert isinstance(exc_info.value, NotEnumerableError)
        assert exc_info.value.source is source

    def test_dataclass_type_is_not_enumerable(self):
        with pytest.raises(NotEnumerableError):
            enumerate_source(Point)


class TestPullSource:

    def test_pulls_pairs_then_stays_exhausted(self):
        source = PullSource(enumerate_source(["a"]))
        assert source.pull() == (0, "a")
        assert source.pull() is EXHAUSTED
        assert source.pull() is EXHAUSTED

    def test_pause_and_resume_are_noops(self):
        source = PullSource(enumerate_source(["a"]))
        source.pause()
        source.resume()
        assert source.pull() == (0, "a")
