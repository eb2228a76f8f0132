import enum
import random
from typing import Any, Literal, get_args, get_origin

from arbitrater.exceptions import EmptyCandidateSetError


def is_literal(hint: Any) -> bool:
    return get_origin(hint) is Literal


def variants_of(hint: Any) -> list:
    """Declared variants of an Enum class or a Literal[...] annotation."""
    if is_literal(hint):
        return list(get_args(hint))
    if isinstance(hint, type) and issubclass(hint, enum.Enum):
        return list(hint)
    raise TypeError(f"{hint!r} is neither an Enum nor a Literal")


def pick_variant(hint: Any, rng: random.Random) -> Any:
    """Pick one declared variant uniformly at random."""
    variants = variants_of(hint)
    if not variants:
        raise EmptyCandidateSetError(hint)
    return rng.choice(variants)
