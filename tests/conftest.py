import random
from os import path

import pytest

RESOURCES = path.join(path.dirname(__file__), "resources")


def random_sequence(length: int, seed: str, alphabet: str = "ACGT") -> str:
    rand = random.Random(seed)
    return "".join(rand.choice(alphabet) for _ in range(length))

@pytest.fixture
def synthetic_reference() -> str:
    return random_sequence(3000, "synthetic-reference")

@pytest.fixture
def resources_path() -> str:
    return RESOURCES

@pytest.fixture
def sequence_factory():
    return random_sequence
