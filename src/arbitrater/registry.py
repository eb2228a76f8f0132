"""
Generator registry: maps exact, non-nullable annotations to zero-argument
callables producing a value of that type.

Registries are immutable. Extending one returns a new registry, so a creator
that was handed a registry keeps seeing the same table for its whole life.
"""

from __future__ import annotations

import random
import string
import uuid
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Callable, Iterator, Optional


Generator = Callable[[], Any]

_ALPHABET = string.ascii_letters + string.digits
_MIN_DATE = date(1970, 1, 1).toordinal()
_MAX_DATE = date(2100, 1, 1).toordinal()
_MAX_TIMESTAMP = 4102444800.0  # 2100-01-01T00:00:00Z


class GeneratorRegistry(Mapping):
    """Read-only view over a hint -> generator table."""

    __slots__ = ("_generators",)

    def __init__(self, generators: Optional[Mapping[Any, Generator]] = None) -> None:
        self._generators = MappingProxyType(dict(generators or {}))

    def __getitem__(self, hint: Any) -> Generator:
        return self._generators[hint]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._generators)

    def __len__(self) -> int:
        return len(self._generators)

    def __repr__(self) -> str:
        return f"GeneratorRegistry({len(self)} generators)"

    def lookup(self, hint: Any) -> Optional[Generator]:
        try:
            return self._generators.get(hint)
        except TypeError:
            # Annotated metadata or Literal values may be unhashable
            return None

    def with_extra(self, extra: Mapping[Any, Generator]) -> GeneratorRegistry:
        """Return a new registry where entries of ``extra`` override ours."""
        for hint, fn in extra.items():
            _check_generator(hint, fn)
        merged = dict(self._generators)
        merged.update(extra)
        return GeneratorRegistry(merged)


def _check_generator(hint: Any, fn: Any) -> None:
    if not callable(fn):
        raise TypeError(
            f"generator for {hint!r} must be callable, got {type(fn).__name__}"
        )


def _random_string(rng: random.Random) -> str:
    return "".join(rng.choices(_ALPHABET, k=rng.randint(8, 16)))


def _random_float(rng: random.Random) -> float:
    return rng.uniform(-1_000_000.0, 1_000_000.0)


def default_generators(rng: random.Random) -> dict[Any, Generator]:
    """Builtin generators, all drawing from ``rng``."""
    return {
        int: lambda: rng.randint(-(2**31), 2**31 - 1),
        float: lambda: _random_float(rng),
        complex: lambda: complex(_random_float(rng), _random_float(rng)),
        bool: lambda: rng.random() < 0.5,
        str: lambda: _random_string(rng),
        bytes: lambda: rng.randbytes(16),
        bytearray: lambda: bytearray(rng.randbytes(16)),
        Decimal: lambda: Decimal(rng.randint(-(10**8), 10**8)).scaleb(-2),
        date: lambda: date.fromordinal(rng.randint(_MIN_DATE, _MAX_DATE)),
        datetime: lambda: datetime.fromtimestamp(
            rng.uniform(0.0, _MAX_TIMESTAMP), tz=timezone.utc
        ),
        time: lambda: time(
            rng.randint(0, 23),
            rng.randint(0, 59),
            rng.randint(0, 59),
            rng.randint(0, 999_999),
        ),
        timedelta: lambda: timedelta(seconds=rng.randint(0, 365 * 24 * 3600)),
        uuid.UUID: lambda: uuid.UUID(int=rng.getrandbits(128), version=4),
        type(None): lambda: None,
    }


class DefaultConfiguration:
    """Process-wide defaults shared by every creator that is not given its own."""

    _random = random.Random()
    _custom: dict[Any, Generator] = {}
    _registry: Optional[GeneratorRegistry] = None

    @classmethod
    def rng(cls) -> random.Random:
        return cls._random

    @classmethod
    def seed(cls, value: Any) -> None:
        """Reseed the shared random source used by default generators."""
        cls._random.seed(value)

    @classmethod
    def generators(cls, rng: Optional[random.Random] = None) -> GeneratorRegistry:
        """Builtin generators drawing from ``rng`` plus every custom registration."""
        if rng is not None and rng is not cls._random:
            return cls._build(rng)
        if cls._registry is None:
            cls._registry = cls._build(cls._random)
        return cls._registry

    @classmethod
    def _build(cls, rng: random.Random) -> GeneratorRegistry:
        return GeneratorRegistry(default_generators(rng)).with_extra(cls._custom)

    @classmethod
    def register_generator(cls, hint: Any, fn: Generator) -> None:
        _check_generator(hint, fn)
        # Swap references; registries handed out earlier stay untouched
        cls._custom = {**cls._custom, hint: fn}
        cls._registry = None

    @classmethod
    def reset(cls) -> None:
        cls._custom = {}
        cls._registry = None
