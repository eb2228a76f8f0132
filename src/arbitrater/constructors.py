"""
Canonical constructor discovery.

The canonical constructor of a class is whatever ``cls(...)`` ends up calling,
provided the class (or one of its bases other than ``object``) actually
declares one. Parameter annotations are resolved with ``typing.get_type_hints``
so string annotations work, and TypeVars of a parametrized generic target are
substituted by its arguments.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import typing
from dataclasses import dataclass
from typing import Any, Optional, get_args, get_origin

from arbitrater.types import substitute

logger = logging.getLogger(__name__)

MISSING = inspect.Parameter.empty

_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True)
class Parameter:
    name: str
    annotation: Any
    has_default: bool
    positional_only: bool = False


def is_protocol(cls: Any) -> bool:
    return isinstance(cls, type) and bool(getattr(cls, "_is_protocol", False))


def declares_constructor(cls: type) -> bool:
    """True if something other than ``object`` provides __init__ or __new__."""
    for klass in cls.__mro__:
        if klass is object or is_protocol(klass):
            continue
        if "__init__" in vars(klass) or "__new__" in vars(klass):
            return True
    return False


def _hints_of(source: Any) -> dict[str, Any]:
    try:
        return typing.get_type_hints(source)
    except (NameError, TypeError, AttributeError) as e:
        logger.debug(f"Could not resolve annotations of {source!r}: {e}")
        return {}


def _resolve_hints(cls: type) -> dict[str, Any]:
    hints = _hints_of(cls)
    if dataclasses.is_dataclass(cls):
        return {
            name: hint.type if isinstance(hint, dataclasses.InitVar) else hint
            for name, hint in hints.items()
        }

    for name in ("__new__", "__init__"):
        fn = getattr(cls, name, None)
        if inspect.isfunction(fn):
            hints.update(_hints_of(fn))
    hints.pop("return", None)
    return hints


class CanonicalConstructor:
    """The parameters of a class's constructor and a way to call it."""

    __slots__ = ("target_class", "parameters")

    def __init__(self, target_class: type, parameters: tuple[Parameter, ...]):
        self.target_class = target_class
        self.parameters = parameters

    @classmethod
    def of(cls, target: Any) -> Optional[CanonicalConstructor]:
        """Resolve the constructor of ``target``; None if it has none we can use."""
        origin = get_origin(target) or target
        if not isinstance(origin, type) or not declares_constructor(origin):
            return None

        try:
            signature = inspect.signature(origin)
        except (TypeError, ValueError):
            # builtins implemented in C often have no introspectable signature
            return None

        bindings = None
        type_params = getattr(origin, "__parameters__", ())
        if type_params and get_args(target):
            bindings = dict(zip(type_params, get_args(target)))

        hints = _resolve_hints(origin)
        parameters = tuple(
            Parameter(
                name=p.name,
                annotation=substitute(hints.get(p.name, p.annotation), bindings),
                has_default=p.default is not MISSING,
                positional_only=p.kind is inspect.Parameter.POSITIONAL_ONLY,
            )
            for p in signature.parameters.values()
            if p.kind not in _SKIPPED_KINDS
        )
        return cls(origin, parameters)

    def find(self, name: str) -> Optional[Parameter]:
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter
        return None

    def invoke(self, arguments: dict[str, Any]) -> Any:
        args = []
        kwargs = {}
        for parameter in self.parameters:
            if parameter.name not in arguments:
                continue
            if parameter.positional_only:
                args.append(arguments[parameter.name])
            else:
                kwargs[parameter.name] = arguments[parameter.name]
        return self.target_class(*args, **kwargs)

    def __repr__(self) -> str:
        names = ", ".join(p.name for p in self.parameters)
        return f"CanonicalConstructor({self.target_class.__qualname__}({names}))"
