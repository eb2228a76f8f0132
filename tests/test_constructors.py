from typing import Optional

import pytest

from arbitrater.constructors import MISSING, CanonicalConstructor, declares_constructor
from tests.models import (
    Account,
    Box,
    Coordinates,
    EnglishGreeter,
    Marker,
    Person,
    Plain,
    Point,
    Salted,
    Temperature,
    Untyped,
    Vehicle,
    WithDefaults,
)


def names(constructor):
    return [p.name for p in constructor.parameters]


def test_declares_constructor():
    assert declares_constructor(Point)
    assert declares_constructor(Vehicle)
    assert declares_constructor(EnglishGreeter)
    assert not declares_constructor(Plain)
    assert not declares_constructor(Marker)


@pytest.mark.parametrize("target", [Plain, Marker, Optional[int], "Point"])
def test_no_constructor(target):
    assert CanonicalConstructor.of(target) is None


def test_dataclass_parameters():
    constructor = CanonicalConstructor.of(Person)

    assert names(constructor) == [
        "name", "age", "nickname", "tags", "scores", "labels", "home"
    ]
    assert constructor.find("home").annotation is Point
    assert constructor.find("nickname").annotation == Optional[str]
    assert constructor.find("tags").annotation == list[str]


def test_defaults_are_flagged():
    constructor = CanonicalConstructor.of(WithDefaults)

    assert [p.has_default for p in constructor.parameters] == [False, True, True]


def test_var_args_are_skipped():
    assert names(CanonicalConstructor.of(Account)) == ["owner", "balance", "opened"]


def test_positional_only_flags():
    constructor = CanonicalConstructor.of(Temperature)

    assert [p.positional_only for p in constructor.parameters] == [True, True, False]
    assert constructor.find("degrees").annotation is float


def test_init_var_is_a_parameter():
    constructor = CanonicalConstructor.of(Salted)

    assert names(constructor) == ["secret", "salt"]
    assert constructor.find("salt").annotation is int


def test_unannotated_parameter():
    assert CanonicalConstructor.of(Untyped).find("value").annotation is MISSING


def test_namedtuple_parameters():
    constructor = CanonicalConstructor.of(Coordinates)

    assert names(constructor) == ["latitude", "longitude"]
    assert constructor.find("latitude").annotation is float


def test_abstract_class_constructor():
    assert names(CanonicalConstructor.of(Vehicle)) == ["wheels"]


def test_generic_arguments_are_substituted():
    constructor = CanonicalConstructor.of(Box[int])

    assert constructor.target_class is Box
    assert constructor.find("item").annotation is int
    assert constructor.find("items").annotation == list[int]


def test_find_unknown_parameter():
    assert CanonicalConstructor.of(Point).find("z") is None


def test_invoke_routes_positional_only_arguments():
    constructor = CanonicalConstructor.of(Temperature)

    temperature = constructor.invoke({"degrees": 21.5, "precise": True})

    assert temperature.degrees == 21.5
    assert temperature.unit == "C"
    assert temperature.precise is True


def test_invoke_keyword_arguments():
    assert CanonicalConstructor.of(Point).invoke({"y": 2, "x": 1}) == Point(1, 2)


def test_repr():
    assert repr(CanonicalConstructor.of(Point)) == "CanonicalConstructor(Point(x, y))"
