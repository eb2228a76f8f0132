from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GeneratorSettings:
    """Knobs for a single InstanceCreator.

    Never mutated in place; creators derive new settings with
    ``dataclasses.replace``.
    """

    use_default_values: bool = True  # Leave defaulted parameters to the constructor
    generate_nulls: bool = False  # Allow None for Optional parameters
    null_probability: float = 0.5  # P(None) when generate_nulls is on
    collection_size: int = 2  # Elements drawn for lists, sets, tuple[X, ...]
    mapping_size: int = 10  # Key/value draws for mappings, duplicates collapse
    max_depth: int = 32  # Hard cap on nested creators

    def __post_init__(self):
        if not 0.0 <= self.null_probability <= 1.0:
            raise ValueError(
                f"null_probability must be within [0, 1], got {self.null_probability}"
            )
        if self.collection_size < 0 or self.mapping_size < 0:
            raise ValueError("collection and mapping sizes must be non-negative")
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")
