from __future__ import annotations

import pytest
from helpers import FakeEngine

from compass.config import builtin_rule_set


@pytest.fixture()
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture(autouse=True)
def _reset_builtin_rule_cache() -> None:
    builtin_rule_set.cache_clear()
