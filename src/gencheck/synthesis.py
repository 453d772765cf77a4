"""Reflective synthesis engine - build an ArbitrarySpec from a type's structure.

Size policy:
  - Product: every field runs at ``size // field_count - 1``, so size strictly
    decreases on the way down.
  - Sum: once size is exhausted (<= 0) only the cases of minimum structural
    weight remain candidates, which forces base cases. The chosen case then
    runs at ``size // candidate_count``.
  - Array: exactly ``size`` elements (none below zero), each run at the
    ambient size.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from .arbitrary import ArbitrarySpec, Perturbation, chain, cogen_sequence, tag
from .errors import ConfigurationError
from .gen import Gen, oneof, resize, sequence, sized, vector
from .reflect import (
    ArrayType,
    ProductType,
    SumType,
    classify,
    structural_weight,
)

logger = logging.getLogger(__name__)

Resolver = Callable[[Any], ArbitrarySpec[Any]]


def synthesize(tp: Any, resolve: Resolver) -> ArbitrarySpec[Any]:
    """Build a spec for ``tp`` by structural decomposition.

    ``resolve`` supplies specs for component types (and must cope with
    ``tp`` itself reappearing in its own fields).

    Raises:
        ConfigurationError: If ``tp`` has no supported structure.
    """
    descriptor = classify(tp)
    if isinstance(descriptor, ArrayType):
        spec = array_spec(descriptor, resolve)
    elif isinstance(descriptor, ProductType):
        spec = product_spec(descriptor, resolve)
    elif isinstance(descriptor, SumType):
        spec = sum_spec(tp, descriptor, resolve)
    else:
        raise ConfigurationError(f"unhandled type {tp!r}: {descriptor.reason}", type=tp)

    shape = type(descriptor).__name__
    logger.debug(
        "Synthesized arbitrary for %r as %s",
        tp,
        shape,
        extra={"gencheck_type": repr(tp), "gencheck_shape": shape},
    )
    return spec.with_label(repr(tp))


def array_spec(descriptor: ArrayType, resolve: Resolver) -> ArbitrarySpec[Any]:
    element = resolve(descriptor.element)
    element_gen = element.generator

    def of_size(size: int) -> Gen[list[Any]]:
        return vector(element_gen, max(size, 0))

    return ArbitrarySpec(
        generator=sized(of_size).map(descriptor.constructor),
        cogenerator=cogen_sequence(element.coarbitrary),
    )


def product_generator(fields: Sequence[ArbitrarySpec[Any]], constructor: Callable[..., Any]) -> Gen[Any]:
    """Draw every field in declared order on its share of the size, then construct."""
    count = len(fields)

    def budgeted(gen: Gen[Any]) -> Gen[Any]:
        return sized(lambda size: resize(size // count - 1, gen))

    return sequence([budgeted(spec.generator) for spec in fields]).map(lambda values: constructor(*values))


def _fields_perturbation(fields: Sequence[ArbitrarySpec[Any]], values: Sequence[Any]) -> list[Perturbation]:
    return [spec.coarbitrary(v) for spec, v in zip(fields, values, strict=True)]


def product_spec(descriptor: ProductType, resolve: Resolver) -> ArbitrarySpec[Any]:
    fields = [resolve(t) for t in descriptor.fields]
    deconstruct = descriptor.deconstruct

    def cogenerator(value: Any) -> Perturbation:
        return chain(_fields_perturbation(fields, deconstruct(value)))

    return ArbitrarySpec(generator=product_generator(fields, descriptor.constructor), cogenerator=cogenerator)


def sum_spec(tp: Any, descriptor: SumType, resolve: Resolver) -> ArbitrarySpec[Any]:
    cases = descriptor.cases
    if not cases:
        raise ConfigurationError(f"unhandled type {tp!r}: sum type has no cases", type=tp)

    case_fields = [[resolve(t) for t in case.fields] for case in cases]
    case_gens = [product_generator(fields, case.constructor) for case, fields in zip(cases, case_fields)]
    weights = [structural_weight(case, tp) for case in cases]

    lowest = min(weights)
    base_gens = [g for g, w in zip(case_gens, weights) if w == lowest]
    base_choice = oneof(base_gens)
    any_choice = oneof(case_gens)
    case_weights = dict(zip((c.name for c in cases), weights))
    logger.debug(
        "Sum type %r case weights: %s",
        tp,
        case_weights,
        extra={"gencheck_type": repr(tp), "gencheck_weights": case_weights},
    )

    def of_size(size: int) -> Gen[Any]:
        if size <= 0:
            return resize(size // len(base_gens), base_choice)
        return resize(size // len(case_gens), any_choice)

    def cogenerator(value: Any) -> Perturbation:
        for index, case in enumerate(cases):
            if case.matches(value):
                fields = case_fields[index]
                return chain([tag(index), *_fields_perturbation(fields, case.deconstruct(value))])
        raise ConfigurationError(f"{value!r} matches no case of {tp!r}", type=tp)

    return ArbitrarySpec(generator=sized(of_size), cogenerator=cogenerator)
