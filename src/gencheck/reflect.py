"""Type reflection - classify a runtime type for reflective synthesis.

Every type falls into exactly one shape:
    ArrayType    tuple[T, ...], Sequence[T], MutableSequence[T], deque[T]
    ProductType  dataclasses, NamedTuples, pydantic models, fixed-arity tuples
    SumType      Union / X | Y, Enum subclasses, Literal[...]
    Unsupported  anything else

Forward references are resolved with ``typing.get_type_hints`` at
classification time, so self-referential types must be importable by name
from their module by then.
"""

from __future__ import annotations

import collections
import collections.abc
import dataclasses
import enum
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal, Union

from pydantic import BaseModel

from .errors import ConfigurationError

NoneType = type(None)


@dataclass(frozen=True)
class ArrayType:
    element: Any
    constructor: Callable[[list[Any]], Any]


@dataclass(frozen=True)
class ProductType:
    fields: tuple[Any, ...]
    constructor: Callable[..., Any]
    deconstruct: Callable[[Any], tuple[Any, ...]]


@dataclass(frozen=True)
class Case:
    """One alternative of a sum type."""

    name: str
    fields: tuple[Any, ...]
    constructor: Callable[..., Any]
    matches: Callable[[Any], bool]
    deconstruct: Callable[[Any], tuple[Any, ...]]


@dataclass(frozen=True)
class SumType:
    cases: tuple[Case, ...]


@dataclass(frozen=True)
class Unsupported:
    reason: str


TypeDescriptor = Union[ArrayType, ProductType, SumType, Unsupported]

_ARRAY_ORIGINS: dict[Any, Callable[[list[Any]], Any]] = {
    collections.abc.Sequence: tuple,
    collections.abc.MutableSequence: list,
    collections.deque: collections.deque,
}


def is_union(tp: Any) -> bool:
    return typing.get_origin(tp) in (Union, types.UnionType)


def classify(tp: Any) -> TypeDescriptor:
    """Classify ``tp`` into exactly one TypeDescriptor shape."""
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        return ArrayType(element=args[0], constructor=tuple)
    if origin in _ARRAY_ORIGINS and len(args) == 1:
        return ArrayType(element=args[0], constructor=_ARRAY_ORIGINS[origin])
    if origin is tuple:
        # tuple[()] spells the empty tuple
        fields = () if args == ((),) else args
        return ProductType(fields=tuple(fields), constructor=lambda *values: tuple(values), deconstruct=tuple)

    if is_union(tp):
        classes = [_runtime_class(member) for member in args]
        cases = tuple(_union_case(member, _narrower(cls, classes)) for member, cls in zip(args, classes))
        return SumType(cases=cases)
    if origin is Literal:
        return SumType(cases=tuple(_constant_case(repr(v), v) for v in args))
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        return SumType(cases=tuple(_constant_case(member.name, member) for member in tp))

    product = _product(tp)
    if product is not None:
        return product
    return Unsupported(reason=f"no structural decomposition for {tp!r}")


def _product(tp: Any) -> ProductType | None:
    """Decompose a record class into its fields, or None if ``tp`` is not one."""
    if not isinstance(tp, type):
        return None

    if issubclass(tp, BaseModel):
        names = tuple(tp.model_fields)
        fields = tuple(info.annotation for info in tp.model_fields.values())
        return ProductType(
            fields=fields,
            constructor=lambda *values: tp(**dict(zip(names, values))),
            deconstruct=_attribute_getter(names),
        )

    if dataclasses.is_dataclass(tp):
        hints = _type_hints(tp)
        names = tuple(f.name for f in dataclasses.fields(tp) if f.init)
        return ProductType(
            fields=tuple(hints[name] for name in names),
            constructor=lambda *values: tp(**dict(zip(names, values))),
            deconstruct=_attribute_getter(names),
        )

    if issubclass(tp, tuple) and hasattr(tp, "_fields"):
        hints = _type_hints(tp)
        names = tuple(tp._fields)
        return ProductType(
            fields=tuple(hints.get(name, Any) for name in names),
            constructor=lambda *values: tp(*values),
            deconstruct=tuple,
        )

    return None


def _type_hints(tp: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(tp)
    except NameError as exc:
        raise ConfigurationError(f"cannot resolve field types of {tp!r}: {exc}", type=tp) from exc


def _attribute_getter(names: tuple[str, ...]) -> Callable[[Any], tuple[Any, ...]]:
    return lambda value: tuple(getattr(value, name) for name in names)


def _runtime_class(member: Any) -> type | None:
    runtime_class = typing.get_origin(member) or member
    return runtime_class if isinstance(runtime_class, type) else None


def _narrower(cls: type | None, classes: list[type | None]) -> tuple[type, ...]:
    """Member classes that are strict subclasses of ``cls`` (bool under int)."""
    if cls is None:
        return ()
    return tuple(other for other in classes if other is not None and other is not cls and issubclass(other, cls))


def _union_case(member: Any, narrower: tuple[type, ...] = ()) -> Case:
    """Case for one union member; values of a narrower member class belong to that member."""
    if member is NoneType:
        return _constant_case("None", None)

    runtime_class = _runtime_class(member)

    def matches(value: Any) -> bool:
        return runtime_class is not None and isinstance(value, runtime_class) and not isinstance(value, narrower)

    product = _product(member)
    if product is not None:
        return Case(
            name=member.__name__,
            fields=product.fields,
            constructor=product.constructor,
            matches=matches,
            deconstruct=product.deconstruct,
        )

    # Anything else is a one-field case holding the value itself
    return Case(
        name=repr(member),
        fields=(member,),
        constructor=lambda value: value,
        matches=matches,
        deconstruct=lambda value: (value,),
    )


def _constant_case(name: str, constant: Any) -> Case:
    return Case(
        name=name,
        fields=(),
        constructor=lambda: constant,
        matches=lambda value: value is constant or (type(value) is type(constant) and value == constant),
        deconstruct=lambda value: (),
    )


def immediate_types(tp: Any) -> tuple[Any, ...]:
    """Types directly inside ``tp``: type arguments, union members or record fields."""
    origin = typing.get_origin(tp)
    if origin is Literal:
        return ()
    args = typing.get_args(tp)
    if args:
        flat: list[Any] = []
        for arg in args:
            # Callable[[A, B], R] nests its parameters in a list
            if isinstance(arg, list):
                flat.extend(arg)
            elif arg is not Ellipsis and arg != ():
                flat.append(arg)
        return tuple(flat)
    product = _product(tp)
    if product is not None:
        return product.fields
    return ()


def contained_types(tp: Any) -> list[Any]:
    """Transitive closure of the types reachable from ``tp`` (``tp`` excluded unless cyclic)."""
    seen: list[Any] = []
    stack = list(immediate_types(tp))
    while stack:
        current = stack.pop()
        if any(current == known for known in seen):
            continue
        seen.append(current)
        stack.extend(immediate_types(current))
    return seen


def structural_weight(case: Case, sum_type: Any) -> int:
    """0 for a nullary case, 2 if the case can reach ``sum_type``, else 1."""
    if not case.fields:
        return 0
    reachable = list(case.fields)
    for field in case.fields:
        reachable.extend(contained_types(field))
    return 2 if any(t == sum_type for t in reachable) else 1
