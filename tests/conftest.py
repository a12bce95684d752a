from __future__ import annotations

from collections.abc import Iterator

import pytest

from delve.util import rng


@pytest.fixture(autouse=True)
def seeded_rng_streams() -> Iterator[None]:
    """Give the shared RNG streams a fixed seed for every test."""
    rng.init(1234)
    yield
    rng.init(None)
