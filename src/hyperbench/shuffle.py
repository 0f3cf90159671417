"""Randomized reordering of benchmark trees.

Running benchmarks in a fixed order lets one case's after-effects (warm
caches, heap growth, frequency scaling) bias the next.  :func:`reorder`
permutes siblings at every level of a tree, reproducibly: the same root
seed always yields the same order.

Each node receives its own sub-generator, derived from the parent
generator and the node's position by hashing, so the randomness used by
one branch does not depend on how any sibling branch was reordered.
"""

from __future__ import annotations

import hashlib
import random
from dataclasses import replace
from typing import Callable, Iterable, Sequence, TypeVar

from hyperbench.benchmark import Benchmark, Bracket, Group, Leaf, Series, as_forest

T = TypeVar("T")


class Generator:
    """A deterministic, splittable source of randomness."""

    __slots__ = ("seed",)

    def __init__(self, seed: int) -> None:
        self.seed = seed

    def split(self, index: int) -> Generator:
        """Derive the independent sub-generator for child *index*."""
        digest = hashlib.blake2b(
            f"{self.seed}:{index}".encode(),
            digest_size=8,
        ).digest()
        return Generator(int.from_bytes(digest, "big"))

    def splitn(self, n: int) -> list[Generator]:
        return [self.split(i) for i in range(n)]

    def permutation(self, n: int) -> list[int]:
        """Uniformly random permutation of ``range(n)``."""
        order = list(range(n))
        random.Random(self.seed).shuffle(order)
        return order

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Generator) and other.seed == self.seed

    def __hash__(self) -> int:
        return hash(self.seed)

    def __repr__(self) -> str:
        return f"Generator({self.seed})"


ShuffleFn = Callable[[Generator, Sequence[Benchmark]], Sequence[Benchmark]]


def shuffle(gen: Generator, items: Sequence[T]) -> list[T]:
    """Return a new list with *items* permuted using *gen*."""
    return [items[i] for i in gen.permutation(len(items))]


def reorder(
    shuffle_fn: ShuffleFn,
    gen: Generator,
    benchmarks: Benchmark | Iterable[Benchmark],
) -> list[Benchmark]:
    """Reorder siblings at every level of a benchmark forest.

    *benchmarks* may be a single benchmark or a sequence of them.
    *shuffle_fn* is applied to the top-level benchmarks and to the
    children of every group.  Bracket and series sub-trees are reordered
    as they are produced, with the generator assigned to that node; the
    order of series values is left unchanged.
    """
    items = as_forest(benchmarks)
    reordered = [
        _reorder_node(shuffle_fn, sub, bk) for sub, bk in zip(gen.splitn(len(items)), items)
    ]
    return list(shuffle_fn(gen, reordered))


def _reorder_node(shuffle_fn: ShuffleFn, gen: Generator, benchmark: Benchmark) -> Benchmark:
    if isinstance(benchmark, Leaf):
        return benchmark
    if isinstance(benchmark, Group):
        return replace(benchmark, children=tuple(reorder(shuffle_fn, gen, benchmark.children)))
    if isinstance(benchmark, (Bracket, Series)):
        inner = benchmark.continuation
        return replace(
            benchmark,
            continuation=lambda x: _reorder_node(shuffle_fn, gen, inner(x)),
        )
    raise TypeError(f"Not a benchmark: {benchmark!r}")
