from __future__ import annotations

import logging
import random
import string

import pytest

from ibancheck.utils import logging_setup

_ALNUM = string.digits + string.ascii_uppercase + string.ascii_lowercase


def random_alnum(length: int, rng: random.Random | None = None) -> str:
    rng = rng or random.Random()
    return "".join(rng.choice(_ALNUM) for _ in range(length))


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1307)


@pytest.fixture
def random_string(rng):
    """Random alphanumeric string of the given length (mixed case)."""
    return lambda length: random_alnum(length, rng)


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    configured = logging_setup._ROOT_CONFIGURED
    yield
    for h in root.handlers:
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    logging_setup._ROOT_CONFIGURED = configured
