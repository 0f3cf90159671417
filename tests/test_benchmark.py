"""Tests for hyperbench.benchmark — the benchmark tree data model."""

from __future__ import annotations

import itertools
import unittest

from hyperbench.benchmark import (
    Group,
    Leaf,
    Resource,
    Series,
    as_forest,
    bench,
    bench_each,
    bracket,
    check_restartable,
    group,
    iter_values,
    series,
)

from bench_test_helpers import noop


class TestResource(unittest.TestCase):
    """Tests for the bracket resource handle."""

    def test_acquired_value(self) -> None:
        r = Resource(42)
        self.assertTrue(r.acquired)
        self.assertEqual(r.value, 42)

    def test_none_is_a_valid_value(self) -> None:
        r = Resource(None)
        self.assertTrue(r.acquired)
        self.assertIsNone(r.value)

    def test_empty_raises(self) -> None:
        r = Resource.empty()
        self.assertFalse(r.acquired)
        with self.assertRaises(RuntimeError):
            _ = r.value

    def test_repr(self) -> None:
        self.assertEqual(repr(Resource.empty()), "Resource(<empty>)")
        self.assertEqual(repr(Resource("db")), "Resource('db')")


class TestRestartable(unittest.TestCase):
    """Tests for restartable value sources."""

    def test_list_accepted(self) -> None:
        values = [1, 2, 3]
        self.assertIs(check_restartable(values), values)
        self.assertEqual(list(iter_values(values)), [1, 2, 3])
        self.assertEqual(list(iter_values(values)), [1, 2, 3])

    def test_factory_accepted(self) -> None:
        def factory() -> itertools.count[int]:
            return itertools.count(1)

        check_restartable(factory)
        first = list(itertools.islice(iter_values(factory), 3))
        second = list(itertools.islice(iter_values(factory), 3))
        self.assertEqual(first, [1, 2, 3])
        self.assertEqual(second, [1, 2, 3])

    def test_generator_rejected(self) -> None:
        with self.assertRaises(TypeError):
            check_restartable(x for x in range(3))

    def test_iterator_rejected(self) -> None:
        with self.assertRaises(TypeError):
            check_restartable(iter([1, 2]))

    def test_non_iterable_rejected(self) -> None:
        with self.assertRaises(TypeError):
            check_restartable(5)  # type: ignore[arg-type]


class TestConstruction(unittest.TestCase):
    """Tests for the construction helpers."""

    def test_bench(self) -> None:
        leaf = bench("case", noop)
        self.assertIsInstance(leaf, Leaf)
        self.assertEqual(leaf.name, "case")

    def test_group_freezes_children(self) -> None:
        children = [bench("a", noop), bench("b", noop)]
        g = group("g", children)
        self.assertIsInstance(g, Group)
        self.assertIsInstance(g.children, tuple)
        children.append(bench("c", noop))
        self.assertEqual(len(g.children), 2)

    def test_series_rejects_generator(self) -> None:
        with self.assertRaises(TypeError):
            series((n for n in range(3)), lambda n: bench("b", noop))

    def test_series_iterates_repeatedly(self) -> None:
        s = series(range(3), lambda n: bench("b", noop))
        self.assertIsInstance(s, Series)
        self.assertEqual(list(s), [0, 1, 2])
        self.assertEqual(list(s), [0, 1, 2])

    def test_bench_each_repeats_action(self) -> None:
        calls: list[int] = []
        leaf = bench_each("each", lambda: calls.append(1))
        leaf.runnable(5)
        self.assertEqual(len(calls), 5)

    def test_bracket_does_not_run_setup(self) -> None:
        calls: list[str] = []
        bracket(
            lambda: calls.append("setup"),
            lambda r: calls.append("teardown"),
            lambda r: bench("b", noop),
        )
        self.assertEqual(calls, [])

    def test_as_forest(self) -> None:
        leaf = bench("a", noop)
        self.assertEqual(as_forest(leaf), (leaf,))
        self.assertEqual(as_forest([leaf, leaf]), (leaf, leaf))


if __name__ == "__main__":
    unittest.main()
