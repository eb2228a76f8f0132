from .config import GeneratorSettings
from .creator import InstanceCreator, arbitrary
from .exceptions import (
    ArbitraterException,
    EmptyCandidateSetError,
    InstanceCreationError,
    RecursionDepthError,
    UnknownParameterError,
    UnsupportedTypeError,
)
from .locator import ConcreteTypeLocator, TypeUniverse
from .registry import DefaultConfiguration, GeneratorRegistry

__all__ = [
    "ArbitraterException",
    "ConcreteTypeLocator",
    "DefaultConfiguration",
    "EmptyCandidateSetError",
    "GeneratorRegistry",
    "GeneratorSettings",
    "InstanceCreationError",
    "InstanceCreator",
    "RecursionDepthError",
    "TypeUniverse",
    "UnknownParameterError",
    "UnsupportedTypeError",
    "arbitrary",
]
