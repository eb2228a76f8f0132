import random

import pytest

from arbitrater import DefaultConfiguration, TypeUniverse


@pytest.fixture(autouse=True)
def reset_default_configuration():
    yield
    DefaultConfiguration.reset()


@pytest.fixture
def rng():
    return random.Random(0)


@pytest.fixture
def universe():
    # a private index so registrations don't leak into other tests
    index = TypeUniverse()
    index.scan()
    return index
