"""Tests for hyperbench.runner — depth-first execution of benchmark trees."""

from __future__ import annotations

import itertools
import unittest

from hyperbench.benchmark import Resource, bench, bracket, group, series
from hyperbench.identifiers import identifiers
from hyperbench.runner import IdentifierCursor, iter_benchmark, run_benchmark
from hyperbench.selector import filtered, uniform
from hyperbench.strategy import fixed

from bench_test_helpers import Workload, noop, recording_leaf


class TestIdentifierCursor(unittest.TestCase):
    """Tests for IdentifierCursor."""

    def test_pop_in_order(self) -> None:
        cursor = IdentifierCursor(["a", "b"])
        self.assertEqual(cursor.pop(), "a")
        self.assertEqual(cursor.pop(), "b")
        self.assertEqual(cursor.consumed, 2)

    def test_underflow(self) -> None:
        cursor = IdentifierCursor([])
        with self.assertRaises(RuntimeError):
            cursor.pop()


class TestRunBenchmark(unittest.TestCase):
    """Tests for run_benchmark()."""

    def test_ids_match_visited_leaves(self) -> None:
        visited: list[str] = []
        tree = [
            group(
                "g",
                [
                    recording_leaf("a", visited, "g/a"),
                    series([1, 2], lambda n: recording_leaf("s", visited, f"g/s:{n}")),
                    bracket(
                        lambda: "res",
                        lambda r: None,
                        lambda r: group("br", [recording_leaf("x", visited, "g/br/x")]),
                    ),
                ],
            ),
            recording_leaf("top", visited),
        ]
        results = run_benchmark(uniform(fixed(1)), tree)
        ran = [ident for ident, _ in results]
        self.assertEqual(ran, identifiers(tree))
        self.assertEqual(ran, visited)
        self.assertEqual(ran, ["g/a", "g/s:1", "g/s:2", "g/br/x", "top"])

    def test_single_benchmark_accepted(self) -> None:
        results = run_benchmark(uniform(fixed(4)), bench("one", noop))
        self.assertEqual(len(results), 1)
        ident, sample = results[0]
        self.assertEqual(ident, "one")
        self.assertEqual(sample.measurements[0].batch_size, 4)

    def test_skipped_cases_not_run(self) -> None:
        skipped = Workload()
        kept = Workload()
        tree = group("g", [bench("skip", skipped), bench("keep", kept)])
        results = run_benchmark(filtered(lambda i: i.endswith("keep"), fixed(1)), tree)
        self.assertEqual([i for i, _ in results], ["g/keep"])
        self.assertEqual(skipped.calls, [])
        self.assertEqual(kept.calls, [1])

    def test_skipping_keeps_identifier_alignment(self) -> None:
        tree = group("g", [bench("a", noop), bench("b", noop), bench("c", noop)])
        results = run_benchmark(filtered(lambda i: i != "g/b", fixed(1)), tree)
        self.assertEqual([i for i, _ in results], ["g/a", "g/c"])

    def test_empty_tree(self) -> None:
        self.assertEqual(run_benchmark(uniform(fixed(1)), []), [])
        self.assertEqual(run_benchmark(uniform(fixed(1)), group("g", [])), [])

    def test_workload_failure_propagates(self) -> None:
        tree = [bench("ok", noop), bench("bad", Workload(fail_on_call=1))]
        with self.assertRaises(RuntimeError):
            run_benchmark(uniform(fixed(1)), tree)


class TestBracket(unittest.TestCase):
    """Tests for bracketed resource handling during a run."""

    def test_resource_visible_to_runnable(self) -> None:
        seen: list[object] = []

        def make(r: Resource[str]):  # type: ignore[no-untyped-def]
            return bench("use", lambda n: seen.append(r.value))

        run_benchmark(uniform(fixed(1)), bracket(lambda: "conn", lambda r: None, make))
        self.assertEqual(seen, ["conn"])

    def test_setup_and_teardown_once(self) -> None:
        events: list[str] = []
        tree = bracket(
            lambda: events.append("setup") or "res",
            lambda r: events.append(f"teardown:{r}"),
            lambda r: group(
                "g",
                [
                    bench("a", lambda n: events.append("run a")),
                    bench("b", lambda n: events.append("run b")),
                ],
            ),
        )
        run_benchmark(uniform(fixed(1)), tree)
        self.assertEqual(events, ["setup", "run a", "run b", "teardown:res"])

    def test_teardown_on_failure(self) -> None:
        events: list[str] = []
        tree = bracket(
            lambda: "res",
            lambda r: events.append("teardown"),
            lambda r: bench("bad", Workload(fail_on_call=1)),
        )
        with self.assertRaises(RuntimeError):
            run_benchmark(uniform(fixed(1)), tree)
        self.assertEqual(events, ["teardown"])

    def test_nested_brackets_release_inner_first(self) -> None:
        events: list[str] = []
        tree = bracket(
            lambda: "outer",
            lambda r: events.append(f"release {r}"),
            lambda outer: bracket(
                lambda: "inner",
                lambda r: events.append(f"release {r}"),
                lambda inner: bench("bad", Workload(fail_on_call=1)),
            ),
        )
        with self.assertRaises(RuntimeError):
            run_benchmark(uniform(fixed(1)), tree)
        self.assertEqual(events, ["release inner", "release outer"])

    def test_setup_failure_skips_teardown(self) -> None:
        events: list[str] = []

        def failing_setup() -> str:
            raise OSError("cannot connect")

        tree = bracket(
            failing_setup,
            lambda r: events.append("teardown"),
            lambda r: bench("a", noop),
        )
        with self.assertRaises(OSError):
            run_benchmark(uniform(fixed(1)), tree)
        self.assertEqual(events, [])

    def test_teardown_failure_propagates(self) -> None:
        def failing_teardown(r: str) -> None:
            raise OSError("cannot close")

        tree = bracket(lambda: "res", failing_teardown, lambda r: bench("a", noop))
        with self.assertRaises(OSError):
            run_benchmark(uniform(fixed(1)), tree)

    def test_skipped_bracket_still_acquires(self) -> None:
        events: list[str] = []
        tree = bracket(
            lambda: events.append("setup"),
            lambda r: events.append("teardown"),
            lambda r: bench("a", noop),
        )
        self.assertEqual(run_benchmark(lambda i: None, tree), [])
        self.assertEqual(events, ["setup", "teardown"])

    def test_mismatched_tree_underflows(self) -> None:
        # Builds no leaves during discovery but one leaf during the run.
        def cont(r: Resource[str]):  # type: ignore[no-untyped-def]
            if r.acquired:
                return bench("surprise", noop)
            return group("g", [])

        events: list[str] = []
        tree = bracket(lambda: "res", lambda r: events.append("teardown"), cont)
        with self.assertRaises(RuntimeError):
            run_benchmark(uniform(fixed(1)), tree)
        self.assertEqual(events, ["teardown"])


class TestIterBenchmark(unittest.TestCase):
    """Tests for lazy, streaming execution."""

    def test_unbounded_series_partial_consumption(self) -> None:
        work = Workload()
        tree = series(lambda: itertools.count(1), lambda n: bench("b", work))
        first = list(itertools.islice(iter_benchmark(uniform(fixed(1)), tree), 3))
        self.assertEqual([i for i, _ in first], ["b:1", "b:2", "b:3"])
        self.assertEqual(len(work.calls), 3)

    def test_runs_on_demand(self) -> None:
        work = Workload()
        it = iter_benchmark(uniform(fixed(1)), [bench("a", work), bench("b", work)])
        self.assertEqual(work.calls, [])
        next(it)
        self.assertEqual(work.calls, [1])

    def test_close_releases_bracket(self) -> None:
        events: list[str] = []
        tree = bracket(
            lambda: "res",
            lambda r: events.append("teardown"),
            lambda r: series(lambda: itertools.count(1), lambda n: bench("b", noop)),
        )
        it = iter_benchmark(uniform(fixed(1)), tree)
        next(it)
        next(it)
        self.assertEqual(events, [])
        it.close()
        self.assertEqual(events, ["teardown"])


if __name__ == "__main__":
    unittest.main()
