"""Function generator - pseudo-random pure functions via seed perturbation.

A generated function captures one (size, seed) pair when it is generated.
Each call perturbs that fixed seed by the argument's co-generator and runs
the result generator on it, so equal arguments always give equal results and
nothing is cached or counted between calls.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from .arbitrary import ArbitrarySpec, Perturbation, chain
from .errors import NotImplementedCapability
from .gen import Gen, bind, promote, sequence


def _arguments_perturbation(arguments: Sequence[ArbitrarySpec[Any]]) -> Callable[[tuple[Any, ...]], Perturbation]:
    def perturbation(args: tuple[Any, ...]) -> Perturbation:
        if len(args) != len(arguments):
            raise TypeError(f"generated function takes {len(arguments)} argument(s), got {len(args)}")
        return chain(spec.coarbitrary(a) for spec, a in zip(arguments, args))

    return perturbation


def function_spec(arguments: Sequence[ArbitrarySpec[Any]], result: ArbitrarySpec[Any]) -> ArbitrarySpec[Callable[..., Any]]:
    """Spec for functions of ``arguments`` returning values of ``result``.

    Raises:
        NotImplementedCapability: If an argument spec has no co-generator.
    """
    arguments = tuple(arguments)
    for spec in arguments:
        if spec.cogenerator is None:
            raise NotImplementedCapability(
                f"cannot generate functions over {spec.label or 'a type'}: co-generator is not implemented",
                type=spec.label,
            )

    perturbation = _arguments_perturbation(arguments)
    result_gen = result.generator
    tupled = promote(lambda args: perturbation(args)(result_gen))

    def curried(f: Callable[[tuple[Any, ...]], Any]) -> Callable[..., Any]:
        return lambda *args: f(args)

    argument_gen = sequence([spec.generator for spec in arguments])

    def cogenerator(f: Callable[..., Any]) -> Perturbation:
        # Perturb by the function's value at a randomly drawn argument
        def apply(gen: Gen[Any]) -> Gen[Any]:
            return bind(argument_gen, lambda args: result.coarbitrary(f(*args))(gen))

        return apply

    cogen = cogenerator if result.cogenerator is not None else None
    return ArbitrarySpec(generator=tupled.map(curried), cogenerator=cogen)
