import collections
import random
from typing import Any, Callable, Literal, Optional, Union

import pytest

from arbitrater import InstanceCreationError, InstanceCreator, UnsupportedTypeError
from arbitrater.synthesizer import ValueSynthesizer
from tests.models import (
    Circle,
    Color,
    Containers,
    Drawing,
    Loose,
    Palette,
    Point,
    Square,
    Tagged,
    UntypedList,
    UserId,
    WithCallback,
)


@pytest.fixture
def synthesizer(rng):
    return ValueSynthesizer(InstanceCreator(Point, rng=rng))


def test_collection_shapes(rng):
    containers = InstanceCreator(Containers, rng=rng).create_instance()

    assert isinstance(containers.numbers, list) and len(containers.numbers) == 2
    assert isinstance(containers.unique, set) and 1 <= len(containers.unique) <= 2
    assert isinstance(containers.frozen, frozenset) and 1 <= len(containers.frozen) <= 2
    assert isinstance(containers.queue, collections.deque) and len(containers.queue) == 2
    assert isinstance(containers.variadic, tuple) and len(containers.variadic) == 2
    assert isinstance(containers.sequence, list) and len(containers.sequence) == 2
    assert isinstance(containers.maybe_numbers, list) and len(containers.maybe_numbers) == 2


def test_mapping_shapes(rng):
    containers = InstanceCreator(Containers, rng=rng).create_instance()

    assert isinstance(containers.mapping, dict)
    assert isinstance(containers.ordered, collections.OrderedDict)
    assert isinstance(containers.abstract_mapping, dict)
    for mapping in (containers.mapping, containers.ordered, containers.abstract_mapping):
        assert 1 <= len(mapping) <= 10


def test_fixed_tuple(rng):
    containers = InstanceCreator(Containers, rng=rng).create_instance()

    number, text = containers.pair
    assert isinstance(number, int)
    assert isinstance(text, str)


def test_duplicate_keys_and_elements_collapse():
    creator = InstanceCreator(Containers).with_generators({str: lambda: "k", int: lambda: 1})
    containers = creator.create_instance()

    assert containers.mapping == {"k": 1}
    assert containers.unique == {1}
    assert containers.frozen == frozenset({"k"})
    assert containers.numbers == [1, 1]


def test_collection_and_mapping_sizes_are_configurable(rng):
    creator = InstanceCreator(Containers, rng=rng).with_settings(
        collection_size=5, mapping_size=0
    )
    containers = creator.create_instance()

    assert len(containers.numbers) == 5
    assert len(containers.variadic) == 5
    assert containers.mapping == {}


def test_enum_and_literal_cover_all_variants():
    creator = InstanceCreator(Palette, rng=random.Random(11))
    palettes = creator.create_instances(60)

    assert {p.primary for p in palettes} == set(Color)
    assert {p.mode for p in palettes} == {"light", "dark"}


def test_union_members_are_all_reachable():
    creator = InstanceCreator(Drawing, rng=random.Random(2))
    drawings = creator.create_instances(40)

    assert {type(d.anything) for d in drawings} == {Circle, Square}
    assert {type(d.id_or_name) for d in drawings} == {int, str}


def test_new_type_and_annotated(rng):
    tagged = InstanceCreator(Tagged, rng=rng).create_instance()

    assert isinstance(tagged.user, int)
    assert isinstance(tagged.count, int)
    assert isinstance(tagged.maybe_count, int)


def test_new_type_generator_takes_precedence(rng):
    creator = InstanceCreator(Tagged, rng=rng).register_generator(UserId, lambda: UserId(7))

    assert creator.create_instance().user == 7


def test_registered_generator_wins_over_structure(synthesizer):
    creator = InstanceCreator(Drawing).register_generator(list[int], lambda: [42])

    assert ValueSynthesizer(creator).random_value(list[int]) == [42]
    assert len(synthesizer.random_value(list[int])) == 2


def test_random_value_for_plain_hints(synthesizer):
    assert isinstance(synthesizer.random_value(int), int)
    assert isinstance(synthesizer.random_value(Point), Point)
    assert synthesizer.random_value(None) is None
    assert synthesizer.random_value(Literal[3]) == 3
    assert isinstance(synthesizer.random_value(Optional[float]), float)
    assert isinstance(synthesizer.random_value(Union[Color, bool]), (Color, bool))


def test_nulls_only_for_nullable_hints(rng):
    creator = InstanceCreator(Point, rng=rng).with_settings(
        generate_nulls=True, null_probability=1.0
    )
    synthesizer = ValueSynthesizer(creator)

    assert synthesizer.random_value(Optional[int]) is None
    assert synthesizer.random_value(int | None) is None
    assert isinstance(synthesizer.random_value(int), int)
    assert synthesizer.random_value(list[Optional[int]]) == [None, None]


@pytest.mark.parametrize("hint", [Any, list, dict, Callable[[int], int]])
def test_unsupported_hints(synthesizer, hint):
    with pytest.raises(UnsupportedTypeError):
        synthesizer.random_value(hint)


@pytest.mark.parametrize("model", [Loose, WithCallback, UntypedList])
def test_unsupported_fields_fail_creation(model):
    with pytest.raises(InstanceCreationError) as excinfo:
        InstanceCreator(model).create_instance()

    assert isinstance(excinfo.value.__cause__, UnsupportedTypeError)
    assert model.__name__ in str(excinfo.value)
