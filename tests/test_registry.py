"""Tests for the type registry: resolution order, overrides and caching."""

from __future__ import annotations

import collections.abc
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

import pytest

from gencheck import registry as registry_module
from gencheck.arbitrary import ArbitrarySpec, cogen_int
from gencheck.errors import ConfigurationError
from gencheck.gen import choose, pure, rand
from gencheck.registry import (
    TypeRegistry,
    arbitrary,
    coarbitrary,
    default_registry,
    family_key,
    lookup,
    register,
    register_instances,
    resolve,
)
from gencheck.seed import Seed

SEED = Seed.of(5150)

T = TypeVar("T")


@dataclass
class Box(Generic[T]):
    content: T


class Celsius(float):
    pass


class Fahrenheit(float):
    pass


class WeatherArbitraries:
    @staticmethod
    def celsius() -> ArbitrarySpec[Celsius]:
        return ArbitrarySpec(generator=choose(-40, 40).map(Celsius))

    @staticmethod
    def fahrenheit() -> ArbitrarySpec[Fahrenheit]:
        return ArbitrarySpec(generator=choose(-40, 104).map(Fahrenheit))

    @staticmethod
    def _kelvin() -> ArbitrarySpec[int]:
        return ArbitrarySpec(generator=pure(273))

    @staticmethod
    def freezing_point() -> float:
        return 0.0

    def boiling(self) -> ArbitrarySpec[bool]:
        return ArbitrarySpec(generator=pure(True))


def _values(gen, count=100, size=20):
    return [gen.run(size, Seed.of(i)) for i in range(count)]


class TestFamilyKey:
    def test_plain_type_has_no_family(self):
        assert family_key(int) is None

    def test_generic(self):
        assert family_key(dict[str, int]) == (dict, (str, int))

    def test_optional(self):
        assert family_key(Optional[int]) == (Optional, (int,))
        assert family_key(None | str) == (Optional, (str,))

    def test_wider_union_has_no_family(self):
        assert family_key(Union[int, str, None]) is None

    def test_variadic_tuple_has_no_family(self):
        assert family_key(tuple[int, ...]) is None

    def test_fixed_tuple(self):
        assert family_key(tuple[int, str]) == (tuple, (int, str))
        assert family_key(tuple[()]) == (tuple, ())

    def test_callable_flattens_parameters(self):
        key = family_key(collections.abc.Callable[[int, str], bool])
        assert key == (collections.abc.Callable, (int, str, bool))

    def test_callable_with_ellipsis_has_no_family(self):
        assert family_key(collections.abc.Callable[..., bool]) is None


class TestResolutionOrder:
    def test_exact_registration_beats_family(self, registry):
        registry.register(list[int], ArbitrarySpec(generator=pure([42])))
        assert registry.resolve(list[int]).generator.run(10, SEED) == [42]
        assert registry.resolve(list[bool]).generator.run(10, SEED) != [42]

    def test_family_beats_synthesis(self, registry):
        @registry.family(Box)
        def box(content: ArbitrarySpec) -> ArbitrarySpec:
            return ArbitrarySpec(generator=content.generator.map(lambda v: Box(content=("boxed", v))))

        value = registry.resolve(Box[int]).generator.run(10, SEED)
        assert value.content[0] == "boxed"
        assert isinstance(value.content[1], int)

    def test_parameterized_class_needs_a_family(self, registry):
        with pytest.raises(ConfigurationError):
            registry.resolve(Box[int])

    def test_family_receives_resolved_arguments(self, registry):
        received = []

        def pair_family(*specs):
            received.extend(specs)
            return ArbitrarySpec(generator=pure(None))

        registry.register_family(dict, pair_family)
        registry.resolve(dict[int, bool])
        assert received == [registry.resolve(int), registry.resolve(bool)]

    def test_family_spec_is_labelled(self, registry):
        assert registry.resolve(list[int]).label == repr(list[int])


class TestOverrides:
    def test_override_builtin_int(self):
        register(int, ArbitrarySpec(generator=arbitrary(int).map(lambda n: 2 * n), cogenerator=cogen_int))
        assert all(v % 2 == 0 for v in _values(arbitrary(int)))

    def test_override_reaches_composites(self):
        resolve(list[int])
        register(int, ArbitrarySpec(generator=pure(8), cogenerator=cogen_int))
        for values in _values(arbitrary(list[int])):
            assert all(v == 8 for v in values)

    def test_last_registration_wins(self, registry):
        registry.register(Celsius, ArbitrarySpec(generator=pure(Celsius(1))))
        registry.register(Celsius, ArbitrarySpec(generator=pure(Celsius(2))))
        assert registry.resolve(Celsius).generator.run(0, SEED) == 2

    def test_override_is_undone_between_tests(self):
        assert any(v % 2 for v in _values(arbitrary(int)))

    def test_registration_labels_spec(self, registry):
        registry.register(Celsius, ArbitrarySpec(generator=pure(Celsius(1))))
        assert registry.lookup(Celsius).label == repr(Celsius)

    def test_registration_keeps_explicit_label(self, registry):
        registry.register(Celsius, ArbitrarySpec(generator=pure(Celsius(1)), label="temperature"))
        assert registry.lookup(Celsius).label == "temperature"


class TestRegisterInstances:
    def test_registers_public_static_methods(self, registry):
        registered = registry.register_instances(WeatherArbitraries)
        assert registered == [Celsius, Fahrenheit]
        assert -40 <= registry.resolve(Celsius).generator.run(0, SEED) <= 40
        assert registry.lookup(int) is not None
        assert registry.lookup(bool).generator.run(0, SEED) in (True, False)

    def test_default_registry(self):
        register_instances(WeatherArbitraries)
        assert isinstance(arbitrary(Fahrenheit).run(0, SEED), Fahrenheit)


class TestLookup:
    def test_unknown_type(self, registry):
        assert registry.lookup(Celsius) is None

    def test_builtin_is_registered(self):
        assert lookup(int) is not None

    def test_resolved_composite_is_cached(self, registry):
        assert registry.lookup(list[int]) is None
        spec = registry.resolve(list[int])
        assert registry.lookup(list[int]) is spec

    def test_registration_drops_cache(self, registry):
        registry.resolve(list[int])
        registry.register(Celsius, ArbitrarySpec(generator=pure(Celsius(0))))
        assert registry.lookup(list[int]) is None

    def test_introspection(self, registry):
        assert int in registry.registered_types()
        assert list in registry.registered_families()
        assert collections.abc.Callable in registry.registered_families()

    def test_empty_registry(self):
        bare = TypeRegistry()
        assert bare.registered_types() == []
        assert bare.registered_families() == []


class TestModuleHelpers:
    def test_default_registry_is_shared(self):
        assert registry_module.default_registry() is default_registry()

    def test_arbitrary_is_resolved_generator(self):
        assert arbitrary(int) is resolve(int).generator

    def test_coarbitrary_uses_runtime_type(self):
        expected = cogen_int(5)(rand).run(0, SEED)
        assert coarbitrary(5, rand).run(0, SEED) == expected

    def test_coarbitrary_with_explicit_type(self):
        optional = resolve(Optional[int])
        assert coarbitrary(None, rand, Optional[int]).run(0, SEED) == optional.coarbitrary(None)(rand).run(0, SEED)


class TestConcurrency:
    def test_parallel_resolution(self, registry):
        types = [list[int], dict[str, bool], tuple[int, str], Optional[float], set[bytes]]

        def work(i):
            tp = types[i % len(types)]
            return registry.resolve(tp).generator.run(10, Seed.of(i))

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(work, range(200)))
        assert results == [work(i) for i in range(200)]

    def test_resolution_during_registration(self, registry):
        stop = threading.Event()
        errors = []

        def register_loop():
            n = 0
            while not stop.is_set():
                registry.register(Celsius, ArbitrarySpec(generator=pure(Celsius(n))))
                n += 1

        def resolve_loop():
            try:
                for i in range(300):
                    values = registry.resolve(list[int]).generator.run(10, Seed.of(i))
                    assert all(isinstance(v, int) for v in values)
            except Exception as exc:  # noqa: BLE001
                errors.append(exc)

        writer = threading.Thread(target=register_loop)
        readers = [threading.Thread(target=resolve_loop) for _ in range(4)]
        writer.start()
        for t in readers:
            t.start()
        for t in readers:
            t.join()
        stop.set()
        writer.join()
        assert errors == []


class TestRegistryLogging:
    def test_registration_is_logged(self, registry, caplog):
        caplog.set_level(logging.DEBUG, logger="gencheck.registry")
        registry.register(Celsius, ArbitrarySpec(generator=pure(Celsius(0))))
        registry.register(Celsius, ArbitrarySpec(generator=pure(Celsius(1))))
        messages = [r.getMessage() for r in caplog.records]
        assert any("Registered arbitrary for" in m and "(replaced)" in m for m in messages)
