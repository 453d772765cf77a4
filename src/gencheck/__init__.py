"""gencheck - random value generation for property-based testing.

Usage:
    from gencheck import Seed, evaluate, resolve

    spec = resolve(tuple[bool, int, list[bool]])
    value = evaluate(spec.generator, max_size=5, seed=Seed.of(2024))

Register a generator for your own type, or override a built-in:
    register(int, ArbitrarySpec(generator=arbitrary(int).map(lambda n: 2 * n), cogenerator=cogen_int))
"""

from .arbitrary import (
    ArbitrarySpec,
    chain,
    cogen_int,
    convert,
    filter,
    map_filter,
    perturb,
    tag,
)
from .errors import (
    ConfigurationError,
    GenCheckError,
    NotImplementedCapability,
    PreconditionError,
)
from .gen import (
    Gen,
    bind,
    choose,
    composite,
    elements,
    evaluate,
    fmap,
    four,
    frequency,
    lift,
    lift2,
    lift3,
    lift4,
    lift5,
    lift6,
    oneof,
    promote,
    pure,
    rand,
    resize,
    sample,
    sequence,
    sized,
    such_that,
    three,
    tuple2,
    tuple3,
    tuple4,
    tuple5,
    tuple6,
    two,
    variant,
    vector,
)
from .registry import (
    TypeRegistry,
    arbitrary,
    coarbitrary,
    default_registry,
    family,
    lookup,
    register,
    register_family,
    register_instances,
    resolve,
)
from .seed import Seed, new_seed, range_, split

# Import built-ins to register them
from . import defaults  # noqa: F401, E402

__all__ = [
    # Seed
    "Seed",
    "new_seed",
    "range_",
    "split",
    # Generators
    "Gen",
    "bind",
    "choose",
    "composite",
    "elements",
    "evaluate",
    "fmap",
    "four",
    "frequency",
    "lift",
    "lift2",
    "lift3",
    "lift4",
    "lift5",
    "lift6",
    "oneof",
    "promote",
    "pure",
    "rand",
    "resize",
    "sample",
    "sequence",
    "sized",
    "such_that",
    "three",
    "tuple2",
    "tuple3",
    "tuple4",
    "tuple5",
    "tuple6",
    "two",
    "variant",
    "vector",
    # Specs
    "ArbitrarySpec",
    "chain",
    "cogen_int",
    "convert",
    "filter",
    "map_filter",
    "perturb",
    "tag",
    # Registry
    "TypeRegistry",
    "arbitrary",
    "coarbitrary",
    "default_registry",
    "family",
    "lookup",
    "register",
    "register_family",
    "register_instances",
    "resolve",
    # Errors
    "ConfigurationError",
    "GenCheckError",
    "NotImplementedCapability",
    "PreconditionError",
]
