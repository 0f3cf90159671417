"""Benchmark tree data model.

A benchmark suite is a tree of four node kinds:

- :class:`Leaf` -- a named case whose runnable takes a batch size and
  performs that many iterations of work.
- :class:`Group` -- a named namespace of child benchmarks.
- :class:`Bracket` -- acquires a resource with ``setup`` before its
  sub-tree runs and releases it with ``teardown`` afterwards.  The
  sub-tree is built by ``continuation`` from a :class:`Resource` handle.
- :class:`Series` -- one sub-tree per value of a (possibly unbounded)
  sequence, each qualified by that value in its identifier.

Trees are immutable once built.  Use the lowercase helpers
(:func:`bench`, :func:`group`, :func:`bracket`, :func:`series`) to
construct them.
"""

from __future__ import annotations

import collections.abc
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Iterator, TypeVar, Union

from hyperbench.timing import Runnable

R = TypeVar("R")
V = TypeVar("V")

_EMPTY = object()


# ---------------------------------------------------------------------------
# Restartable sequences
# ---------------------------------------------------------------------------


ValueSource = Union[Iterable[Any], Callable[[], Iterator[Any]]]


def check_restartable(values: ValueSource, what: str = "values") -> ValueSource:
    """Reject one-shot iterators where a sequence is walked more than once.

    A restartable source is either a re-iterable collection (list, tuple,
    range, ...) or a zero-argument callable returning a fresh iterator,
    e.g. ``lambda: itertools.count(1)``.

    Raises:
        TypeError: If *values* is an iterator or generator object.
    """
    if callable(values):
        return values
    if isinstance(values, collections.abc.Iterator):
        raise TypeError(
            f"{what} must be re-iterable or a zero-argument factory returning "
            f"an iterator, got one-shot {type(values).__name__}"
        )
    if not isinstance(values, collections.abc.Iterable):
        raise TypeError(f"{what} must be iterable, got {type(values).__name__}")
    return values


def iter_values(values: ValueSource) -> Iterator[Any]:
    """Start a fresh pass over a restartable source."""
    if callable(values):
        return iter(values())
    return iter(values)


# ---------------------------------------------------------------------------
# Resource handle
# ---------------------------------------------------------------------------


class Resource(Generic[R]):
    """Handle to a bracket's acquired resource.

    Continuations receive a handle rather than the raw value so that the
    tree can be walked for identifiers without acquiring anything.  Only
    read :attr:`value` from inside a runnable.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Any = _EMPTY) -> None:
        self._value = value

    @classmethod
    def empty(cls) -> Resource[Any]:
        """Placeholder handle used during identifier discovery."""
        return cls()

    @property
    def acquired(self) -> bool:
        return self._value is not _EMPTY

    @property
    def value(self) -> R:
        if self._value is _EMPTY:
            raise RuntimeError(
                "Bracket resource accessed outside of a run; read it from "
                "inside the runnable, not while building the tree"
            )
        return self._value  # type: ignore[no-any-return]

    def __repr__(self) -> str:
        if self._value is _EMPTY:
            return "Resource(<empty>)"
        return f"Resource({self._value!r})"


# ---------------------------------------------------------------------------
# Tree nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Leaf:
    """A named terminal benchmark case."""

    name: str
    runnable: Runnable


@dataclass(frozen=True)
class Group:
    """A named namespace of benchmarks."""

    name: str
    children: tuple[Benchmark, ...] = ()


@dataclass(frozen=True)
class Bracket(Generic[R]):
    """A sub-tree with scoped resource acquisition."""

    setup: Callable[[], R]
    teardown: Callable[[R], object]
    continuation: Callable[[Resource[R]], Benchmark]


@dataclass(frozen=True)
class Series(Generic[V]):
    """A sub-tree expanded once per value of a restartable sequence."""

    values: ValueSource
    continuation: Callable[[V], Benchmark]

    def __post_init__(self) -> None:
        check_restartable(self.values, "Series values")

    def __iter__(self) -> Iterator[V]:
        return iter_values(self.values)


Benchmark = Union[Leaf, Group, Bracket, Series]


# ---------------------------------------------------------------------------
# Construction helpers
# ---------------------------------------------------------------------------


def bench(name: str, runnable: Runnable) -> Leaf:
    """Create a benchmark case from a callable taking a batch size."""
    return Leaf(name, runnable)


def bench_each(name: str, action: Callable[[], object]) -> Leaf:
    """Create a benchmark case from a callable performing one iteration."""

    def runnable(batch_size: int) -> None:
        for _ in range(batch_size):
            action()

    return Leaf(name, runnable)


def group(name: str, children: Iterable[Benchmark]) -> Group:
    """Create a named group of benchmarks."""
    return Group(name, tuple(children))


def bracket(
    setup: Callable[[], R],
    teardown: Callable[[R], object],
    continuation: Callable[[Resource[R]], Benchmark],
) -> Bracket[R]:
    """Create a bracket that acquires a resource around a sub-tree."""
    return Bracket(setup, teardown, continuation)


def series(values: ValueSource, continuation: Callable[[V], Benchmark]) -> Series[V]:
    """Create a parameterized sub-tree, one instance per value."""
    return Series(values, continuation)


def as_forest(benchmarks: Benchmark | Iterable[Benchmark]) -> tuple[Benchmark, ...]:
    """Normalize a single benchmark or a sequence of them to a tuple."""
    if isinstance(benchmarks, (Leaf, Group, Bracket, Series)):
        return (benchmarks,)
    return tuple(benchmarks)
