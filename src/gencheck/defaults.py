"""Built-in arbitraries, installed into the default registry at import.

Scalars are registered from the ``Defaults`` holder class; parameterized
types are registered as generic families keyed by their origin. Every
built-in carries a co-generator, so functions can be generated over any of
them.
"""

from __future__ import annotations

import collections.abc
import math
from typing import Any, Optional

from .arbitrary import (
    ArbitrarySpec,
    Perturbation,
    chain,
    cogen_bool,
    cogen_constant,
    cogen_int,
    cogen_optional,
    cogen_product,
    cogen_sequence,
    tag,
)
from .functions import function_spec
from .gen import (
    Gen,
    bind,
    choose,
    elements,
    frequency,
    lift3,
    pure,
    sequence,
    sized,
    tuple2,
    tuple3,
    tuple4,
    tuple5,
    tuple6,
    vector,
)
from .registry import TypeRegistry, default_registry

# Characters are drawn from the 7-bit ASCII range
CHAR_MAX_CODE = 127
BYTE_MAX = 255

# Optional values are None one time in four
OPTIONAL_NONE_WEIGHT = 1
OPTIONAL_SOME_WEIGHT = 3

_TUPLE_COMBINATORS = {2: tuple2, 3: tuple3, 4: tuple4, 5: tuple5, 6: tuple6}


def list_of(gen: Gen[Any]) -> Gen[list[Any]]:
    """List whose length is drawn from [0, size + 1]; empty once size is exhausted."""

    def of_size(n: int) -> Gen[list[Any]]:
        if n <= 0:
            return pure([])
        return bind(choose(0, n + 1), lambda k: vector(gen, k))

    return sized(of_size)


def _integers_up_to_size() -> Gen[int]:
    return sized(lambda n: choose(-max(n, 0), max(n, 0)))


def _fraction(a: int, b: int, c: int) -> float:
    return a + b / (abs(c) + 1)


def _cogen_float(value: float) -> Perturbation:
    if math.isnan(value):
        return tag(0)
    if math.isinf(value):
        return tag(1 if value > 0 else 2)
    numerator, denominator = value.as_integer_ratio()
    return chain((tag(3), cogen_int(numerator), cogen_int(denominator)))


def _cogen_char(ch: str) -> Perturbation:
    return cogen_int(ord(ch))


class Defaults:
    """Default arbitraries for the scalar types."""

    @staticmethod
    def nothing() -> ArbitrarySpec[None]:
        return ArbitrarySpec(generator=pure(None), cogenerator=cogen_constant)

    @staticmethod
    def booleans() -> ArbitrarySpec[bool]:
        return ArbitrarySpec(generator=elements([True, False]), cogenerator=cogen_bool)

    @staticmethod
    def integers() -> ArbitrarySpec[int]:
        """Integers in [-size, size]."""
        return ArbitrarySpec(generator=_integers_up_to_size(), cogenerator=cogen_int)

    @staticmethod
    def floats() -> ArbitrarySpec[float]:
        """Finite floats built as a + b / (|c| + 1) from three sized integers."""
        ints = _integers_up_to_size()
        return ArbitrarySpec(generator=lift3(_fraction)(ints, ints, ints), cogenerator=_cogen_float)

    @staticmethod
    def strings() -> ArbitrarySpec[str]:
        chars = choose(0, CHAR_MAX_CODE).map(chr)
        return ArbitrarySpec(generator=list_of(chars).map("".join), cogenerator=cogen_sequence(_cogen_char))

    @staticmethod
    def byte_strings() -> ArbitrarySpec[bytes]:
        return ArbitrarySpec(generator=list_of(choose(0, BYTE_MAX)).map(bytes), cogenerator=cogen_sequence(cogen_int))


# --- Generic families ---


def optional_spec(inner: ArbitrarySpec[Any]) -> ArbitrarySpec[Any]:
    """None one time in four; always None once size is exhausted."""
    some_or_none = frequency([(OPTIONAL_NONE_WEIGHT, pure(None)), (OPTIONAL_SOME_WEIGHT, inner.generator)])
    generator = sized(lambda n: pure(None) if n <= 0 else some_or_none)
    return ArbitrarySpec(generator=generator, cogenerator=cogen_optional(inner.coarbitrary))


def list_spec(element: ArbitrarySpec[Any]) -> ArbitrarySpec[list[Any]]:
    return ArbitrarySpec(generator=list_of(element.generator), cogenerator=cogen_sequence(element.coarbitrary))


def tuple_spec(*components: ArbitrarySpec[Any]) -> ArbitrarySpec[tuple]:
    gens = [c.generator for c in components]
    arity = len(gens)
    if arity in _TUPLE_COMBINATORS:
        generator = _TUPLE_COMBINATORS[arity](*gens)
    else:
        generator = sequence(gens).map(tuple)
    return ArbitrarySpec(generator=generator, cogenerator=cogen_product([c.coarbitrary for c in components]))


def _sorted_for_perturbation(values: collections.abc.Iterable[Any]) -> list[Any]:
    # Equal containers must perturb identically whatever their insertion order
    return sorted(values, key=repr)


def dict_spec(key: ArbitrarySpec[Any], value: ArbitrarySpec[Any]) -> ArbitrarySpec[dict]:
    pair = cogen_product([key.coarbitrary, value.coarbitrary])
    items = cogen_sequence(pair)

    def cogenerator(d: dict) -> Perturbation:
        return items(sorted(d.items(), key=lambda kv: repr(kv[0])))

    return ArbitrarySpec(generator=list_of(tuple2(key.generator, value.generator)).map(dict), cogenerator=cogenerator)


def set_spec(element: ArbitrarySpec[Any]) -> ArbitrarySpec[set]:
    members = cogen_sequence(element.coarbitrary)
    return ArbitrarySpec(
        generator=list_of(element.generator).map(set),
        cogenerator=lambda s: members(_sorted_for_perturbation(s)),
    )


def frozenset_spec(element: ArbitrarySpec[Any]) -> ArbitrarySpec[frozenset]:
    members = cogen_sequence(element.coarbitrary)
    return ArbitrarySpec(
        generator=list_of(element.generator).map(frozenset),
        cogenerator=lambda s: members(_sorted_for_perturbation(s)),
    )


def callable_spec(*specs: ArbitrarySpec[Any]) -> ArbitrarySpec[Any]:
    """Callable[[A, ...], R]: the last spec is the result, the others the arguments."""
    *arguments, result = specs
    return function_spec(arguments, result)


def install(registry: TypeRegistry) -> None:
    """Register the built-in specs and families into ``registry``."""
    registry.register_instances(Defaults)
    registry.register_family(Optional, optional_spec)
    registry.register_family(list, list_spec)
    registry.register_family(tuple, tuple_spec)
    registry.register_family(dict, dict_spec)
    registry.register_family(set, set_spec)
    registry.register_family(frozenset, frozenset_spec)
    registry.register_family(collections.abc.Callable, callable_spec)


install(default_registry())
