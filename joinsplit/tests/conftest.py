from __future__ import annotations

import os

import pytest

from joinsplit.config import get_config
from joinsplit.validator import JoinSplitValidator

from .builder import IDENTITY, KnownSetup, make_setup


@pytest.fixture(scope="session")
def known_setup() -> KnownSetup:
    return make_setup()


@pytest.fixture(scope="session")
def validator(known_setup: KnownSetup) -> JoinSplitValidator:
    return JoinSplitValidator(IDENTITY, known_setup.crs)


@pytest.fixture
def clean_config(monkeypatch: pytest.MonkeyPatch):
    """Drop JOINSPLIT_* env vars and the cached config around a test."""
    for key in list(os.environ):
        if key.startswith("JOINSPLIT_") and key != "JOINSPLIT_TEST_LOG":
            monkeypatch.delenv(key, raising=False)
    get_config.cache_clear()
    yield monkeypatch
    get_config.cache_clear()
