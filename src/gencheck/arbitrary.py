"""ArbitrarySpec - the per-type capability pairing a generator with a co-generator.

A co-generator maps a value to a perturbation ``Gen[R] -> Gen[R]`` for any R.
Perturbations are built exclusively from ``variant`` and compose in declared
order, which is what lets ``functions.py`` derive pseudo-random functions
from nothing but a captured seed.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Any, Generic, TypeVar

from .errors import NotImplementedCapability
from .gen import Gen, fmap, such_that, variant

T = TypeVar("T")
U = TypeVar("U")

Perturbation = Callable[[Gen[Any]], Gen[Any]]
CoGenerator = Callable[[Any], Perturbation]

# Base-16 digits keep integer perturbations short: at most 16 splits per digit
_INT_DIGIT_BASE = 16


@dataclass(frozen=True)
class ArbitrarySpec(Generic[T]):
    """How to generate values of one type, and how to perturb by them."""

    generator: Gen[T]
    cogenerator: CoGenerator | None = None
    label: str = ""

    def coarbitrary(self, value: T) -> Perturbation:
        """Perturbation for ``value``.

        Raises:
            NotImplementedCapability: If this spec has no co-generator.
        """
        if self.cogenerator is None:
            name = self.label or "this type"
            raise NotImplementedCapability(f"co-generator for {name} is not implemented")
        return self.cogenerator(value)

    def with_label(self, label: str) -> ArbitrarySpec[T]:
        return replace(self, label=label)


def perturb(cogenerator: CoGenerator, value: Any, gen: Gen[U]) -> Gen[U]:
    """Apply ``cogenerator``'s perturbation for ``value`` to ``gen``."""
    return cogenerator(value)(gen)


def chain(perturbations: Iterable[Perturbation]) -> Perturbation:
    """Compose perturbations, applying them in the given order."""
    steps = tuple(perturbations)

    def apply(gen: Gen[U]) -> Gen[U]:
        for step in steps:
            gen = step(gen)
        return gen

    return apply


def tag(index: int) -> Perturbation:
    """Perturbation by a fixed case index."""
    return lambda gen: variant(index, gen)


# --- Co-generators for the built-in shapes ---


def cogen_constant(_value: Any) -> Perturbation:
    return tag(0)


def cogen_bool(value: bool) -> Perturbation:
    return tag(0 if value else 1)


def cogen_int(value: int) -> Perturbation:
    """Sign, then the magnitude's digits least significant first."""
    digits = [0 if value >= 0 else 1]
    magnitude = abs(value)
    while True:
        magnitude, digit = divmod(magnitude, _INT_DIGIT_BASE)
        digits.append(digit)
        if not magnitude:
            break
    return chain(tag(d) for d in digits)


def cogen_sequence(element: CoGenerator) -> CoGenerator:
    """List-shaped co-generator: ``variant(0)`` marks the end, ``variant(1)`` each cons."""

    def cogen(values: Sequence[Any]) -> Perturbation:
        items = list(values)

        def apply(gen: Gen[U]) -> Gen[U]:
            gen = variant(0, gen)
            for item in reversed(items):
                gen = element(item)(variant(1, gen))
            return gen

        return apply

    return cogen


def cogen_product(fields: Sequence[CoGenerator]) -> CoGenerator:
    """Co-generator for a fixed-arity tuple of field values, in declared order."""
    field_cogens = tuple(fields)

    def cogen(values: Sequence[Any]) -> Perturbation:
        return chain(c(v) for c, v in zip(field_cogens, values, strict=True))

    return cogen


def cogen_optional(inner: CoGenerator) -> CoGenerator:
    def cogen(value: Any) -> Perturbation:
        if value is None:
            return tag(0)
        return chain((tag(1), inner(value)))

    return cogen


def cogenerator_of(spec: ArbitrarySpec[Any]) -> CoGenerator:
    """Co-generator that defers to ``spec.coarbitrary`` (and its error) at use time."""
    return spec.coarbitrary


# --- Spec transformers ---


def filter(spec: ArbitrarySpec[T], predicate: Callable[[T], bool]) -> ArbitrarySpec[T]:
    """Restrict generated values to those satisfying ``predicate``."""
    return replace(spec, generator=such_that(spec.generator, predicate))


def convert(spec: ArbitrarySpec[T], to: Callable[[T], U], from_: Callable[[U], T]) -> ArbitrarySpec[U]:
    """Spec for a type isomorphic to ``spec``'s, via ``to``/``from_``."""
    cogenerator = None
    if spec.cogenerator is not None:
        base = spec.cogenerator
        cogenerator = lambda value: base(from_(value))  # noqa: E731
    return ArbitrarySpec(generator=fmap(to, spec.generator), cogenerator=cogenerator, label=spec.label)


def map_filter(spec: ArbitrarySpec[T], f: Callable[[T], T], predicate: Callable[[T], bool]) -> ArbitrarySpec[T]:
    """Map generated values through ``f``, then keep those satisfying ``predicate``."""
    return replace(spec, generator=such_that(fmap(f, spec.generator), predicate))
