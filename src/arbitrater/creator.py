"""
InstanceCreator: builds one arbitrary instance of a target type.

Configuration calls (``generate_nulls``, ``use_default_values``,
``register_generator`` ...) return new creators; only ``with_value`` mutates
the receiver, and only its own override map.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import random
from functools import cached_property
from typing import Any, Generic, Mapping, Optional, TypeVar

from arbitrater.config import GeneratorSettings
from arbitrater.constructors import MISSING, CanonicalConstructor, Parameter
from arbitrater.exceptions import (
    InstanceCreationError,
    RecursionDepthError,
    UnknownParameterError,
    UnsupportedTypeError,
    type_name,
)
from arbitrater.locator import ConcreteTypeLocator, is_abstract, is_stateless_variant
from arbitrater.registry import DefaultConfiguration, Generator, GeneratorRegistry
from arbitrater.synthesizer import ValueSynthesizer
from arbitrater.types import (
    NoneType,
    TypeDescriptor,
    TypeKind,
    classify,
    resolve_new_type,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _singleton_of(cls: type) -> Any:
    factory = inspect.getattr_static(cls, "get_singleton", None)
    if isinstance(factory, classmethod):
        return cls.get_singleton()
    return MISSING


class InstanceCreator(Generic[T]):
    def __init__(
        self,
        target: type[T],
        settings: Optional[GeneratorSettings] = None,
        *,
        generators: Optional[Mapping[Any, Generator]] = None,
        rng: Optional[random.Random] = None,
        locator: Optional[ConcreteTypeLocator] = None,
        depth: int = 0,
    ):
        self.target = target
        self._descriptor = TypeDescriptor.of(target)
        self._resolved = resolve_new_type(self._descriptor)
        self.target_class = self._resolved.origin
        self.settings = settings or GeneratorSettings()
        self.rng = rng or DefaultConfiguration.rng()

        if isinstance(generators, GeneratorRegistry):
            self.registry = generators
        else:
            self.registry = DefaultConfiguration.generators(rng).with_extra(
                generators or {}
            )

        self.locator = locator or ConcreteTypeLocator(self.rng)
        self.depth = depth
        self._specific_values: dict[str, Any] = {}
        self._synthesizer = ValueSynthesizer(self)

    def __repr__(self) -> str:
        return f"InstanceCreator({type_name(self.target)}, {self.settings})"

    @cached_property
    def constructor(self) -> Optional[CanonicalConstructor]:
        return CanonicalConstructor.of(self._resolved.hint)

    # ---------- configuration ----------
    def _copy(
        self,
        settings: Optional[GeneratorSettings] = None,
        registry: Optional[GeneratorRegistry] = None,
    ) -> InstanceCreator[T]:
        clone = InstanceCreator(
            self.target,
            settings or self.settings,
            generators=registry if registry is not None else self.registry,
            rng=self.rng,
            locator=self.locator,
            depth=self.depth,
        )
        clone._specific_values = dict(self._specific_values)
        return clone

    def generate_nulls(self, enabled: bool = True) -> InstanceCreator[T]:
        return self._copy(dataclasses.replace(self.settings, generate_nulls=enabled))

    def use_default_values(self, enabled: bool = False) -> InstanceCreator[T]:
        return self._copy(
            dataclasses.replace(self.settings, use_default_values=enabled)
        )

    def with_settings(self, **changes: Any) -> InstanceCreator[T]:
        return self._copy(dataclasses.replace(self.settings, **changes))

    def register_generator(self, hint: Any, fn: Generator) -> InstanceCreator[T]:
        return self._copy(registry=self.registry.with_extra({hint: fn}))

    def with_generators(self, generators: Mapping[Any, Generator]) -> InstanceCreator[T]:
        return self._copy(registry=self.registry.with_extra(generators))

    def with_value(self, parameter_name: str, value: Any) -> InstanceCreator[T]:
        """Pin a constructor parameter to ``value`` instead of synthesizing it."""
        constructor = self.constructor
        if constructor is None or constructor.find(parameter_name) is None:
            raise UnknownParameterError(parameter_name, self.target_class)

        self._specific_values[parameter_name] = value
        return self

    # ---------- creation ----------
    def create_instance(self) -> T:
        """
        Create an arbitrary instance, or else explode
        """
        try:
            return self._build()
        except Exception as e:
            logger.debug(f"Failed to build {type_name(self.target)}", exc_info=True)
            raise InstanceCreationError(self.target) from e

    def create_instances(self, count: int) -> list[T]:
        return [self.create_instance() for _ in range(count)]

    def create_nested(self, target: Any) -> Any:
        """Build ``target`` with our generators and settings, one level deeper.

        Parameter overrides stay behind: they belong to our own constructor.
        Errors propagate unwrapped so the outermost creator reports them.
        """
        nested = InstanceCreator(
            target,
            self.settings,
            generators=self.registry,
            rng=self.rng,
            locator=self.locator,
            depth=self.depth + 1,
        )
        return nested._build()

    def _build(self) -> T:
        if self.depth > self.settings.max_depth:
            raise RecursionDepthError(self.target, self.settings.max_depth)

        # enums, containers, unions and registered types need no constructor
        registered = self.registry.lookup(self._descriptor.hint) is not None
        kind = classify(self._resolved, self.registry)
        needs_constructor = kind is TypeKind.COMPOSITE and not registered
        if not needs_constructor and not self._specific_values:
            return self._synthesizer.random_value(self.target)

        cls = self.target_class
        if is_abstract(cls):
            return self.create_nested(self.locator.select(cls))

        if cls is NoneType:
            return None
        if isinstance(cls, type):
            singleton = _singleton_of(cls)
            if singleton is not MISSING:
                return singleton

        constructor = self.constructor
        if constructor is None:
            if is_stateless_variant(cls):
                return cls()
            raise UnsupportedTypeError(
                f"Target class [{type_name(self.target)}] has no primary constructor. "
                f"Call 'register_generator' to supply an instance generator."
            )

        return constructor.invoke(self._constructor_arguments(constructor))

    def _constructor_arguments(self, constructor: CanonicalConstructor) -> dict[str, Any]:
        parameters = constructor.parameters
        included = [
            p.name in self._specific_values
            or not (p.has_default and self.settings.use_default_values)
            for p in parameters
        ]

        # positional-only arguments cannot have gaps before the last one passed
        last_positional = max(
            (i for i, p in enumerate(parameters) if p.positional_only and included[i]),
            default=-1,
        )
        for i in range(last_positional):
            if parameters[i].positional_only:
                included[i] = True

        arguments: dict[str, Any] = {}
        for parameter, include in zip(parameters, included):
            if not include:
                logger.debug(f"Leaving {parameter.name} to its default")
                continue
            arguments[parameter.name] = self._create_value(parameter)
        return arguments

    def _create_value(self, parameter: Parameter) -> Any:
        if parameter.name in self._specific_values:
            return self._specific_values[parameter.name]
        if parameter.annotation is MISSING:
            raise UnsupportedTypeError(
                f"Parameter {parameter.name} of [{type_name(self.target_class)}] "
                f"has no type annotation"
            )
        return self._synthesizer.random_value(parameter.annotation)


def arbitrary(target: type[T], **values: Any) -> T:
    """One arbitrary instance of ``target`` with the given parameters pinned."""
    creator = InstanceCreator(target)
    for name, value in values.items():
        creator.with_value(name, value)
    return creator.create_instance()
