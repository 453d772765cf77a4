"""Generator algebra and combinator library.

A ``Gen[T]`` is a pure function of (size, seed) to a T. ``bind`` is the only
sequencing primitive: it splits the seed, runs the first generator on one
half and the continuation on the other, with the same size on both sides.
Every other combinator here reduces to it (the list-building ones inline the
same split chain as a loop).

Usage:
    from gencheck.gen import choose, composite, evaluate, vector
    from gencheck.seed import Seed

    @composite
    def small_matrix(draw, rows: int):
        width = draw(choose(1, 4))
        return [draw(vector(choose(0, 9), width)) for _ in range(rows)]

    evaluate(small_matrix(3), max_size=10, seed=Seed.of(42))
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .errors import ConfigurationError, PreconditionError
from .seed import Seed, range_, split

T = TypeVar("T")
U = TypeVar("U")

# Attempts before such_that gives up on a predicate
SUCH_THAT_MAX_TRIES = 100


@dataclass(frozen=True)
class Gen(Generic[T]):
    """Generator of a random value, driven by a size and a seed."""

    run: Callable[[int, Seed], T]

    def map(self, f: Callable[[T], U]) -> Gen[U]:
        """Apply ``f`` to every generated value."""
        return fmap(f, self)

    def bind(self, k: Callable[[T], Gen[U]]) -> Gen[U]:
        """Feed the generated value into ``k`` and run the generator it returns."""
        return bind(self, k)


# --- Algebra ---


def fmap(f: Callable[[T], U], gen: Gen[T]) -> Gen[U]:
    """Transform the output of ``gen``; size and seed pass through untouched."""
    run = gen.run
    return Gen(lambda size, seed: f(run(size, seed)))


def bind(gen: Gen[T], k: Callable[[T], Gen[U]]) -> Gen[U]:
    """Monadic bind: split the seed, run ``gen`` on one half, ``k(value)`` on the other."""

    def run(size: int, seed: Seed) -> U:
        left, right = split(seed)
        return k(gen.run(size, left)).run(size, right)

    return Gen(run)


def pure(value: T) -> Gen[T]:
    """Generator that ignores size and seed and always yields ``value``."""
    return Gen(lambda size, seed: value)


def sized(f: Callable[[int], Gen[T]]) -> Gen[T]:
    """Build a generator from the current size."""
    return Gen(lambda size, seed: f(size).run(size, seed))


def resize(n: int, gen: Gen[T]) -> Gen[T]:
    """Run ``gen`` with size ``n`` instead of the ambient size."""
    run = gen.run
    return Gen(lambda size, seed: run(n, seed))


# Yields the seed itself; the starting point for hand-written generators
rand: Gen[Seed] = Gen(lambda size, seed: seed)


def evaluate(gen: Gen[T], max_size: int, seed: Seed) -> T:
    """Pick a size uniformly in [0, max_size] and run ``gen`` at that size."""
    if max_size < 0:
        raise PreconditionError(f"max_size ({max_size}) must be non-negative")
    size, rest = range_(0, max_size, seed)
    return gen.run(size, rest)


def sample(gen: Gen[T], count: int, max_size: int, seed: Seed) -> list[T]:
    """Evaluate ``gen`` ``count`` times, each on its own split of ``seed``."""
    if count < 0:
        raise PreconditionError(f"count ({count}) must be non-negative")
    values: list[T] = []
    for _ in range(count):
        left, seed = split(seed)
        values.append(evaluate(gen, max_size, left))
    return values


def composite(fn: Callable[..., T]) -> Callable[..., Gen[T]]:
    """Turn a function drawing values through ``draw`` into a generator factory.

    ``fn(draw, *args, **kwargs)`` may call ``draw(gen)`` any number of times.
    Each draw splits the seed exactly like a chain of binds, so a composite
    generator is as deterministic as one written with ``bind``.
    """

    @functools.wraps(fn)
    def build(*args: Any, **kwargs: Any) -> Gen[T]:
        def run(size: int, seed: Seed) -> T:
            current = seed

            def draw(gen: Gen[U]) -> U:
                nonlocal current
                left, current = split(current)
                return gen.run(size, left)

            return fn(draw, *args, **kwargs)

        return Gen(run)

    return build


# --- Combinators ---


def choose(lo: int, hi: int) -> Gen[int]:
    """Uniform integer in [lo, hi], inclusive."""
    if lo > hi:
        raise PreconditionError(f"choose: lo ({lo}) must be <= hi ({hi})")
    return Gen(lambda size, seed: range_(lo, hi, seed)[0])


def elements(xs: Iterable[T]) -> Gen[T]:
    """Pick one of ``xs`` uniformly, by index."""
    items = tuple(xs)
    if not items:
        raise ConfigurationError("elements: candidate list is empty")
    return choose(0, len(items) - 1).map(items.__getitem__)


def oneof(gens: Iterable[Gen[T]]) -> Gen[T]:
    """Run one of ``gens``, chosen with equal probability."""
    candidates = tuple(gens)
    if not candidates:
        raise ConfigurationError("oneof: generator list is empty")
    return bind(elements(candidates), lambda g: g)


def frequency(weighted: Iterable[tuple[int, Gen[T]]]) -> Gen[T]:
    """Run one of the generators, chosen with probability proportional to its weight.

    Draws n in [1, total] and takes the first entry whose running total
    reaches n, so earlier entries win ties.
    """
    entries = tuple(weighted)
    if any(w < 0 for w, _ in entries):
        raise ConfigurationError("frequency: weights must be non-negative")
    total = sum(w for w, _ in entries)
    if total <= 0:
        raise ConfigurationError(f"frequency: total weight must be positive, got {total}")

    def pick(n: int) -> Gen[T]:
        running = 0
        for w, g in entries:
            running += w
            if n <= running:
                return g
        raise AssertionError(f"frequency: draw {n} exceeds total weight {total}")

    return bind(choose(1, total), pick)


def sequence(gens: Iterable[Gen[T]]) -> Gen[list[T]]:
    """Generator of the list of results of ``gens``, in order.

    Element i runs on the left half of the i-th split, the same seeds a
    right-nested chain of binds would hand out.
    """
    runs = tuple(g.run for g in gens)

    def run(size: int, seed: Seed) -> list[T]:
        values: list[T] = []
        for r in runs:
            left, seed = split(seed)
            values.append(r(size, left))
        return values

    return Gen(run)


def vector(gen: Gen[T], n: int) -> Gen[list[T]]:
    """List of exactly ``n`` values drawn independently from ``gen``."""
    if n < 0:
        raise PreconditionError(f"vector: length ({n}) must be non-negative")
    return sequence([gen] * n)


def such_that(gen: Gen[T], predicate: Callable[[T], bool], max_tries: int = SUCH_THAT_MAX_TRIES) -> Gen[T]:
    """Keep drawing from ``gen`` until ``predicate`` holds, growing the size each try."""
    if max_tries <= 0:
        raise PreconditionError(f"such_that: max_tries ({max_tries}) must be positive")

    def run(size: int, seed: Seed) -> T:
        for attempt in range(max_tries):
            left, seed = split(seed)
            value = gen.run(size + attempt, left)
            if predicate(value):
                return value
        raise ConfigurationError(f"such_that: no value satisfied the predicate in {max_tries} tries")

    return Gen(run)


def _lift_n(f: Callable[..., U], gens: Sequence[Gen[Any]]) -> Gen[U]:
    return sequence(gens).map(lambda values: f(*values))


def lift(f: Callable[[T], U]) -> Callable[[Gen[T]], Gen[U]]:
    """Lift a function over values to a function over generators."""
    return lambda a: fmap(f, a)


def lift2(f: Callable[..., U]) -> Callable[..., Gen[U]]:
    return lambda a, b: _lift_n(f, (a, b))


def lift3(f: Callable[..., U]) -> Callable[..., Gen[U]]:
    return lambda a, b, c: _lift_n(f, (a, b, c))


def lift4(f: Callable[..., U]) -> Callable[..., Gen[U]]:
    return lambda a, b, c, d: _lift_n(f, (a, b, c, d))


def lift5(f: Callable[..., U]) -> Callable[..., Gen[U]]:
    return lambda a, b, c, d, e: _lift_n(f, (a, b, c, d, e))


def lift6(f: Callable[..., U]) -> Callable[..., Gen[U]]:
    return lambda a, b, c, d, e, g: _lift_n(f, (a, b, c, d, e, g))


def tuple2(a: Gen[Any], b: Gen[Any]) -> Gen[tuple]:
    return lift2(lambda *xs: xs)(a, b)


def tuple3(a: Gen[Any], b: Gen[Any], c: Gen[Any]) -> Gen[tuple]:
    return lift3(lambda *xs: xs)(a, b, c)


def tuple4(a: Gen[Any], b: Gen[Any], c: Gen[Any], d: Gen[Any]) -> Gen[tuple]:
    return lift4(lambda *xs: xs)(a, b, c, d)


def tuple5(a: Gen[Any], b: Gen[Any], c: Gen[Any], d: Gen[Any], e: Gen[Any]) -> Gen[tuple]:
    return lift5(lambda *xs: xs)(a, b, c, d, e)


def tuple6(a: Gen[Any], b: Gen[Any], c: Gen[Any], d: Gen[Any], e: Gen[Any], f: Gen[Any]) -> Gen[tuple]:
    return lift6(lambda *xs: xs)(a, b, c, d, e, f)


def two(gen: Gen[T]) -> Gen[tuple[T, T]]:
    """Pair of independent values from ``gen``."""
    return tuple2(gen, gen)


def three(gen: Gen[T]) -> Gen[tuple[T, T, T]]:
    return tuple3(gen, gen, gen)


def four(gen: Gen[T]) -> Gen[tuple[T, T, T, T]]:
    return tuple4(gen, gen, gen, gen)


# --- Seed perturbation ---


def variant(v: int, gen: Gen[T]) -> Gen[T]:
    """Run ``gen`` on the (v+1)-th seed of the chain obtained by repeated splitting.

    This is the primitive every co-generator is built from: distinct ``v``
    give unrelated output streams for the same incoming seed.
    """
    if v < 0:
        raise PreconditionError(f"variant: index ({v}) must be non-negative")
    run = gen.run

    def perturbed(size: int, seed: Seed) -> T:
        for _ in range(v + 1):
            chosen, seed = split(seed)
        return run(size, chosen)

    return Gen(perturbed)


def promote(f: Callable[[Any], Gen[T]]) -> Gen[Callable[[Any], T]]:
    """Turn a family of generators indexed by an argument into a generator of functions.

    The (size, seed) pair is captured once when the function is generated;
    each call runs ``f(a)`` on that same pair, so the result is a pure
    function of its argument.
    """

    def run(size: int, seed: Seed) -> Callable[[Any], T]:
        def generated(a: Any) -> T:
            return f(a).run(size, seed)

        return generated

    return Gen(run)
