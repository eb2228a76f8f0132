from __future__ import annotations

import abc
import inspect
import logging
import random
from collections import defaultdict
from typing import Any, Iterable, Optional, Sequence, get_origin

from arbitrater.constructors import declares_constructor, is_protocol
from arbitrater.exceptions import EmptyCandidateSetError

logger = logging.getLogger(__name__)


def is_abstract(cls: Any) -> bool:
    """Classes that cannot be built directly and need an implementor."""
    if not isinstance(cls, type):
        return False
    if inspect.isabstract(cls) or is_protocol(cls):
        return True
    # Marker bases such as `class Marker(ABC): pass`
    return abc.ABC in cls.__bases__ and not declares_constructor(cls)


def is_interface(cls: type) -> bool:
    """Abstract types without a constructor of their own."""
    return is_protocol(cls) or (is_abstract(cls) and not declares_constructor(cls))


def is_stateless_variant(cls: type) -> bool:
    """Concrete implementor of an abstract base that declares no constructor."""
    if is_abstract(cls) or declares_constructor(cls):
        return False
    return any(is_abstract(base) for base in cls.__mro__[1:])


def _qualified(cls: type) -> tuple[str, str]:
    return (cls.__module__, cls.__qualname__)


def _walk_classes() -> Iterable[type]:
    seen: set[type] = set()
    stack: list[type] = [object]
    while stack:
        cls = stack.pop()
        if cls in seen:
            continue
        seen.add(cls)
        yield cls
        # type.__subclasses__ is unbound on `type` itself
        stack.extend(type.__subclasses__(cls))


class TypeUniverse:
    """Index of every loaded class by the bases in its MRO.

    Built on first use and reused afterwards. Classes defined later are only
    visible after ``refresh()`` or an explicit ``register``. ``ABC.register``
    calls are picked up on the next lookup.
    """

    _singleton: Optional[TypeUniverse] = None

    def __init__(self) -> None:
        self._classes: list[type] = []
        self._subclasses: dict[type, set[type]] = defaultdict(set)
        self._virtual: dict[type, set[type]] = {}
        self._virtual_token = abc.get_cache_token()
        self._registered: dict[type, set[type]] = defaultdict(set)
        self._scanned = False

    @classmethod
    def get_singleton(cls) -> TypeUniverse:
        if cls._singleton is None:
            cls._singleton = cls()
        return cls._singleton

    def scan(self) -> None:
        classes: list[type] = []
        subclasses: dict[type, set[type]] = defaultdict(set)
        for cls in _walk_classes():
            classes.append(cls)
            for base in cls.__mro__[1:]:
                subclasses[base].add(cls)

        self._classes = classes
        self._subclasses = subclasses
        self._virtual = {}
        self._scanned = True
        logger.debug(f"Indexed {len(classes)} classes")

    def refresh(self) -> None:
        self.scan()

    def _ensure_scanned(self) -> None:
        if not self._scanned:
            self.scan()

    def register(self, base: type, *implementors: type) -> None:
        """Declare implementors the scan cannot discover on its own."""
        for implementor in implementors:
            if not isinstance(implementor, type):
                raise TypeError(f"{implementor!r} is not a class")
            self._registered[base].add(implementor)

    def subclasses_of(self, cls: type) -> set[type]:
        self._ensure_scanned()
        return set(self._subclasses.get(cls, ())) | self._registered.get(cls, set())

    def implementors_of(self, iface: type) -> set[type]:
        self._ensure_scanned()
        found = self.subclasses_of(iface)
        if isinstance(iface, abc.ABCMeta) and not is_protocol(iface):
            found |= self._virtual_subclasses_of(iface)
        return found

    def _virtual_subclasses_of(self, iface: type) -> set[type]:
        # ABC.register()'d classes never show up in __subclasses__
        token = abc.get_cache_token()
        if token != self._virtual_token:
            self._virtual = {}
            self._virtual_token = token
        if iface not in self._virtual:
            self._virtual[iface] = {
                cls
                for cls in self._classes
                if cls is not iface and _safe_issubclass(cls, iface)
            }
        return self._virtual[iface]


def _safe_issubclass(cls: type, base: type) -> bool:
    try:
        return issubclass(cls, base)
    except TypeError:
        return False


class ConcreteTypeLocator:
    """Picks a concrete implementor for an abstract type, uniformly at random."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        universe: Optional[TypeUniverse] = None,
    ):
        self.rng = rng or random.Random()
        self.universe = universe or TypeUniverse.get_singleton()

    def candidates(self, target: Any) -> list[type]:
        cls = get_origin(target) or target
        if is_interface(cls):
            found = self.universe.implementors_of(cls)
        else:
            found = self.universe.subclasses_of(cls)
        concrete = [c for c in found if not is_abstract(c)]
        # stable order so a seeded rng picks the same class every run
        return sorted(concrete, key=_qualified)

    def select(self, target: Any) -> type:
        chosen = self.choose(self.candidates(target), target)
        logger.debug(f"Selected {chosen.__qualname__} as implementor of {target!r}")
        return chosen

    def choose(self, options: Sequence[Any], owner: Any) -> Any:
        if not options:
            raise EmptyCandidateSetError(owner)
        return self.rng.choice(list(options))
