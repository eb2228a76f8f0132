"""
Type descriptors and their classification.

A TypeDescriptor is the non-nullable form of an annotation plus a nullable
flag. ``classify`` maps a descriptor onto one TypeKind; the synthesizer keeps
exactly one handler per kind.
"""

from __future__ import annotations

import collections
import collections.abc as abc
import enum
import types
import typing
from dataclasses import dataclass
from typing import Any, Annotated, Callable, Optional, Union, get_args, get_origin

from arbitrater.enums import is_literal

if typing.TYPE_CHECKING:
    from arbitrater.registry import GeneratorRegistry


NoneType = type(None)


class TypeKind(enum.Enum):
    PRIMITIVE = "primitive"
    COLLECTION = "collection"
    MAPPING = "mapping"
    ENUM = "enum"
    HIERARCHY = "hierarchy"
    TUPLE = "tuple"
    COMPOSITE = "composite"
    UNSUPPORTED = "unsupported"


_SEQUENCE_ORIGINS = frozenset(
    {
        list,
        collections.deque,
        abc.Sequence,
        abc.MutableSequence,
        abc.Collection,
        abc.Iterable,
    }
)
_SET_ORIGINS = frozenset({set, frozenset, abc.Set, abc.MutableSet})
_MAPPING_ORIGINS = frozenset(
    {dict, collections.OrderedDict, abc.Mapping, abc.MutableMapping}
)
# Classes that look constructible but never describe a value we can build
_OPAQUE_ORIGINS = frozenset({type, object, tuple, abc.Callable, typing.Any})


def is_a_union(hint: Any) -> bool:
    return isinstance(hint, types.UnionType) or get_origin(hint) is Union


def is_a_new_type(hint: Any) -> bool:
    return isinstance(hint, typing.NewType)


def strip_annotated(hint: Any) -> Any:
    while get_origin(hint) is Annotated:
        hint = hint.__origin__
    return hint


def is_variadic_tuple(hint: Any) -> bool:
    args = get_args(hint)
    return get_origin(hint) is tuple and len(args) == 2 and args[1] is Ellipsis


@dataclass(frozen=True)
class TypeDescriptor:
    hint: Any
    nullable: bool = False

    @classmethod
    def of(cls, hint: Any) -> TypeDescriptor:
        hint = strip_annotated(hint)
        if hint is None:
            return cls(NoneType)
        if not is_a_union(hint):
            return cls(hint)

        members = [strip_annotated(m) for m in get_args(hint)]
        rest = [m for m in members if m is not NoneType]
        nullable = len(rest) < len(members)
        if not rest:
            return cls(NoneType)
        if len(rest) == 1:
            return cls(rest[0], nullable)
        return cls(Union[tuple(rest)], nullable)

    @property
    def origin(self) -> Any:
        return get_origin(self.hint) or self.hint

    @property
    def args(self) -> tuple:
        return get_args(self.hint)

    def __str__(self) -> str:
        name = getattr(self.hint, "__qualname__", None) or repr(self.hint)
        return f"{name}?" if self.nullable else name


def classify(descriptor: TypeDescriptor, registry: GeneratorRegistry) -> TypeKind:
    hint = descriptor.hint
    if registry.lookup(hint) is not None:
        return TypeKind.PRIMITIVE

    if is_a_new_type(hint):
        return classify(TypeDescriptor.of(hint.__supertype__), registry)

    origin = descriptor.origin
    args = descriptor.args

    if origin in _SEQUENCE_ORIGINS or origin in _SET_ORIGINS:
        return TypeKind.COLLECTION if args else TypeKind.UNSUPPORTED
    if is_variadic_tuple(hint):
        return TypeKind.COLLECTION
    if origin in _MAPPING_ORIGINS:
        return TypeKind.MAPPING if len(args) == 2 else TypeKind.UNSUPPORTED
    if is_literal(hint):
        return TypeKind.ENUM
    if isinstance(origin, type) and issubclass(origin, enum.Enum):
        return TypeKind.ENUM
    if is_a_union(hint):
        return TypeKind.HIERARCHY
    if origin is tuple and args:
        return TypeKind.TUPLE
    if isinstance(origin, type) and origin not in _OPAQUE_ORIGINS:
        return TypeKind.COMPOSITE
    return TypeKind.UNSUPPORTED


def collection_factory(descriptor: TypeDescriptor) -> Callable[[list], Any]:
    """Container constructor matching the declared collection shape."""
    origin = descriptor.origin
    if origin in (frozenset, abc.Set):
        return frozenset
    if origin in _SET_ORIGINS:
        return set
    if origin is collections.deque:
        return collections.deque
    if origin is tuple:
        return tuple
    return list


def mapping_factory(descriptor: TypeDescriptor) -> Callable[[list], Any]:
    if descriptor.origin is collections.OrderedDict:
        return collections.OrderedDict
    return dict


def resolve_new_type(descriptor: TypeDescriptor) -> TypeDescriptor:
    """Follow NewType chains down to the underlying annotation."""
    while is_a_new_type(descriptor.hint):
        descriptor = TypeDescriptor.of(descriptor.hint.__supertype__)
    return descriptor


def substitute(hint: Any, bindings: Optional[dict]) -> Any:
    """Replace TypeVars in ``hint`` using ``bindings``."""
    if not bindings:
        return hint
    if isinstance(hint, typing.TypeVar):
        return bindings.get(hint, hint)
    params = getattr(hint, "__parameters__", ())
    if params and get_origin(hint) is not None:
        return hint[tuple(bindings.get(p, p) for p in params)]
    return hint
