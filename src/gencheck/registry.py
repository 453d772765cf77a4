"""Type registry - resolve "how to generate a T" for any type.

Resolution order for a requested type:
  1. an exact registration for the type
  2. a generic family registered for the type's origin (list, dict, tuple,
     Optional, Callable, ...), instantiated with the resolved argument specs
  3. reflective synthesis (see synthesis.py)

Results are cached per type. Registrations are serialized by a lock and
published as fresh read-only snapshots, so lookups never take the lock.
The last registration for a type wins and drops every cached spec.

Adding a generator for your own type:
    from gencheck.registry import register
    register(Celsius, ArbitrarySpec(generator=choose(-50, 50).map(Celsius)))

Adding a generic family:
    @family(Box)
    def box(content: ArbitrarySpec) -> ArbitrarySpec:
        return ArbitrarySpec(generator=content.generator.map(Box))
"""

from __future__ import annotations

import collections.abc
import logging
import threading
import typing
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any, Optional, TypeVar

from .arbitrary import ArbitrarySpec
from .gen import Gen
from .reflect import NoneType, is_union
from .seed import Seed
from .synthesis import synthesize

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Factory signature: one resolved spec per type argument, in order
FamilyFactory = Callable[..., ArbitrarySpec[Any]]

_EMPTY: Mapping[Any, Any] = MappingProxyType({})


def family_key(tp: Any) -> tuple[Any, tuple[Any, ...]] | None:
    """Family key and type arguments of a parameterized type, or None.

    ``Optional[T]`` (a two-member union with None) is keyed as
    ``typing.Optional``; variadic ``tuple[T, ...]`` has no family and goes
    to synthesis as an array.
    """
    origin = typing.get_origin(tp)
    if origin is None:
        return None
    args = typing.get_args(tp)

    if is_union(tp):
        if len(args) == 2 and NoneType in args:
            inner = args[0] if args[1] is NoneType else args[1]
            return Optional, (inner,)
        return None
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return None
        return tuple, tuple(a for a in args if a != ())
    if origin is collections.abc.Callable:
        if len(args) != 2 or args[0] is Ellipsis:
            return None
        parameters, result = args
        return collections.abc.Callable, (*parameters, result)
    return origin, args


class TypeRegistry:
    """Registry of ArbitrarySpecs by exact type and by generic family."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._specs: Mapping[Any, ArbitrarySpec[Any]] = _EMPTY
        self._families: Mapping[Any, FamilyFactory] = _EMPTY
        self._cache: Mapping[Any, ArbitrarySpec[Any]] = _EMPTY
        self._generation = 0
        self._building = threading.local()

    # --- Registration ---

    def register(self, tp: Any, spec: ArbitrarySpec[Any]) -> None:
        """Register ``spec`` for exactly ``tp``, replacing any earlier one."""
        if not spec.label:
            spec = spec.with_label(repr(tp))
        with self._lock:
            replaced = tp in self._specs
            self._specs = MappingProxyType({**self._specs, tp: spec})
            self._invalidate()
        logger.debug(
            "Registered arbitrary for %r%s",
            tp,
            " (replaced)" if replaced else "",
            extra={"gencheck_type": repr(tp), "gencheck_replaced": replaced},
        )

    def register_family(self, origin: Any, factory: FamilyFactory) -> None:
        """Register ``factory`` for every parameterization of ``origin``."""
        with self._lock:
            self._families = MappingProxyType({**self._families, origin: factory})
            self._invalidate()
        logger.debug(
            "Registered arbitrary family %s for %r",
            factory.__name__,
            origin,
            extra={"gencheck_type": repr(origin), "gencheck_family": factory.__name__},
        )

    def family(self, origin: Any) -> Callable[[FamilyFactory], FamilyFactory]:
        """Decorator form of ``register_family``."""

        def decorator(factory: FamilyFactory) -> FamilyFactory:
            self.register_family(origin, factory)
            return factory

        return decorator

    def register_instances(self, holder: type) -> list[Any]:
        """Register every public static method of ``holder`` returning ``ArbitrarySpec[X]``.

        The target type X is read from the method's return annotation.
        Returns the registered types, in definition order.
        """
        registered: list[Any] = []
        for name, member in vars(holder).items():
            if name.startswith("_") or not isinstance(member, staticmethod):
                continue
            fn = member.__func__
            target = typing.get_type_hints(fn).get("return")
            if typing.get_origin(target) is not ArbitrarySpec:
                continue
            (tp,) = typing.get_args(target)
            self.register(tp, fn())
            registered.append(tp)
        logger.debug("Registered %d arbitraries from %s", len(registered), holder.__name__)
        return registered

    def _invalidate(self) -> None:
        # Caller holds the lock
        self._cache = _EMPTY
        self._generation += 1

    # --- Lookup ---

    def lookup(self, tp: Any) -> ArbitrarySpec[Any] | None:
        """Registered or already-resolved spec for ``tp``, or None."""
        spec = self._specs.get(tp)
        if spec is None:
            spec = self._cache.get(tp)
        return spec

    def resolve(self, tp: Any) -> ArbitrarySpec[Any]:
        """Get the spec for ``tp``, building and caching it on first request.

        Raises:
            ConfigurationError: If no spec can be built for ``tp``.
        """
        spec = self.lookup(tp)
        if spec is not None:
            return spec

        building = self._in_progress()
        if any(tp == pending for pending in building):
            return self._deferred(tp)

        generation = self._generation
        building.append(tp)
        try:
            spec = self._build(tp)
        finally:
            building.pop()

        with self._lock:
            if generation == self._generation:
                self._cache = MappingProxyType({**self._cache, tp: spec})
        return spec

    def _build(self, tp: Any) -> ArbitrarySpec[Any]:
        key = family_key(tp)
        if key is not None:
            origin, args = key
            factory = self._families.get(origin)
            if factory is not None:
                logger.debug(
                    "Building arbitrary for %r from family %s",
                    tp,
                    factory.__name__,
                    extra={"gencheck_type": repr(tp), "gencheck_family": factory.__name__},
                )
                spec = factory(*(self.resolve(a) for a in args))
                return spec if spec.label else spec.with_label(repr(tp))
        logger.info("Synthesizing arbitrary for unregistered type %r", tp, extra={"gencheck_type": repr(tp)})
        return synthesize(tp, self.resolve)

    def _in_progress(self) -> list[Any]:
        stack = getattr(self._building, "stack", None)
        if stack is None:
            stack = self._building.stack = []
        return stack

    def _deferred(self, tp: Any) -> ArbitrarySpec[Any]:
        """Spec for a type still being built; looks the real spec up when first run."""

        def run(size: int, seed: Seed) -> Any:
            return self.resolve(tp).generator.run(size, seed)

        return ArbitrarySpec(
            generator=Gen(run),
            cogenerator=lambda value: self.resolve(tp).coarbitrary(value),
            label=repr(tp),
        )

    # --- Introspection ---

    def registered_types(self) -> list[Any]:
        return list(self._specs)

    def registered_families(self) -> list[Any]:
        return list(self._families)


# Process-wide registry, populated with the built-ins by gencheck.defaults
_default = TypeRegistry()


def default_registry() -> TypeRegistry:
    return _default


def register(tp: Any, spec: ArbitrarySpec[Any]) -> None:
    _default.register(tp, spec)


def register_family(origin: Any, factory: FamilyFactory) -> None:
    _default.register_family(origin, factory)


def family(origin: Any) -> Callable[[FamilyFactory], FamilyFactory]:
    return _default.family(origin)


def register_instances(holder: type) -> list[Any]:
    return _default.register_instances(holder)


def lookup(tp: Any) -> ArbitrarySpec[Any] | None:
    return _default.lookup(tp)


def resolve(tp: Any) -> ArbitrarySpec[Any]:
    return _default.resolve(tp)


def arbitrary(tp: Any) -> Gen[Any]:
    """Generator for ``tp`` from the default registry."""
    return _default.resolve(tp).generator


def coarbitrary(value: Any, gen: Gen[T], tp: Any = None) -> Gen[T]:
    """Perturb ``gen`` by ``value``, using the co-generator of ``tp`` (default: its runtime type)."""
    spec = _default.resolve(type(value) if tp is None else tp)
    return spec.coarbitrary(value)(gen)
