"""
Type-dispatched value synthesis.

Every annotation is first reduced to a TypeDescriptor and classified into a
TypeKind; each kind has exactly one handler. Composite values recurse back
into a nested InstanceCreator owned by the same configuration.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, get_args

from arbitrater.enums import pick_variant
from arbitrater.exceptions import UnsupportedTypeError
from arbitrater.types import (
    TypeDescriptor,
    TypeKind,
    classify,
    collection_factory,
    mapping_factory,
    resolve_new_type,
)

if TYPE_CHECKING:
    from arbitrater.creator import InstanceCreator

logger = logging.getLogger(__name__)


class ValueSynthesizer:
    """Produces a random value for any supported annotation."""

    def __init__(self, creator: InstanceCreator):
        self.creator = creator

        self._handlers = {
            TypeKind.PRIMITIVE: self._generate_primitive,
            TypeKind.COLLECTION: self._generate_collection,
            TypeKind.MAPPING: self._generate_mapping,
            TypeKind.ENUM: self._generate_enum,
            TypeKind.HIERARCHY: self._generate_hierarchy,
            TypeKind.TUPLE: self._generate_tuple,
            TypeKind.COMPOSITE: self._generate_composite,
            TypeKind.UNSUPPORTED: self._unsupported,
        }

    @property
    def settings(self):
        return self.creator.settings

    @property
    def registry(self):
        return self.creator.registry

    @property
    def rng(self):
        return self.creator.rng

    def random_value(self, hint: Any) -> Any:
        descriptor = TypeDescriptor.of(hint)

        if descriptor.nullable and self.settings.generate_nulls:
            if self.rng.random() < self.settings.null_probability:
                logger.debug(f"Generating None for {descriptor}")
                return None

        # explicit registrations win over every structural rule
        generator = self.registry.lookup(descriptor.hint)
        if generator is not None:
            return generator()

        descriptor = resolve_new_type(descriptor)
        kind = classify(descriptor, self.registry)
        return self._handlers[kind](descriptor)

    def _generate_primitive(self, descriptor: TypeDescriptor) -> Any:
        return self.registry[descriptor.hint]()

    def _generate_collection(self, descriptor: TypeDescriptor) -> Any:
        element = descriptor.args[0]
        values = [
            self.random_value(element) for _ in range(self.settings.collection_size)
        ]
        return collection_factory(descriptor)(values)

    def _generate_mapping(self, descriptor: TypeDescriptor) -> Any:
        key_type, value_type = descriptor.args
        pairs = [
            (self.random_value(key_type), self.random_value(value_type))
            for _ in range(self.settings.mapping_size)
        ]
        return mapping_factory(descriptor)(pairs)

    def _generate_enum(self, descriptor: TypeDescriptor) -> Any:
        return pick_variant(descriptor.hint, self.rng)

    def _generate_hierarchy(self, descriptor: TypeDescriptor) -> Any:
        member = self.creator.locator.choose(get_args(descriptor.hint), descriptor.hint)
        return self.random_value(member)

    def _generate_tuple(self, descriptor: TypeDescriptor) -> tuple:
        return tuple(self.random_value(t) for t in descriptor.args)

    def _generate_composite(self, descriptor: TypeDescriptor) -> Any:
        return self.creator.create_nested(descriptor.hint)

    def _unsupported(self, descriptor: TypeDescriptor) -> Any:
        raise UnsupportedTypeError(f"No support for {descriptor.hint!r}")
