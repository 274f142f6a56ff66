"""
Pytest configuration and shared fixtures.

Provides pinned clocks and scripted random sources for deterministic id
generation, and isolates every test from the user's config, env vars and
the process-wide default generator.
"""

from datetime import datetime, timezone

import pytest

from fleetid.core.config import clear_cache
from fleetid.core.ids import api
from fleetid.core.ids.models import Identifier

# 2024-01-15T10:30:00.123Z
MOCK_TIME_MS = 1705314600123
MOCK_DATETIME = datetime(2024, 1, 15, 10, 30, 0, 123000, tzinfo=timezone.utc)


# ==============================================================================
# Clock / Random Helpers
# ==============================================================================


class FixedClock:
    """Clock that always reports the same millisecond."""

    def __init__(self, ms: int = MOCK_TIME_MS):
        self.ms = ms
        self.calls = 0

    def now_ms(self) -> int:
        self.calls += 1
        return self.ms


class ListClock:
    """Clock that walks through a list of timestamps, then repeats the last."""

    def __init__(self, values: list[int]):
        self.values = list(values)
        self.calls = 0

    def now_ms(self) -> int:
        index = min(self.calls, len(self.values) - 1)
        self.calls += 1
        return self.values[index]


class ScriptedRandom:
    """Random source returning scripted draws, then counting upwards."""

    def __init__(self, draws: list[int]):
        self.draws = list(draws)
        self.calls = 0
        self._fallback = 0

    def randbelow(self, upper: int) -> int:
        self.calls += 1
        if self.draws:
            return self.draws.pop(0)
        value = self._fallback % upper
        self._fallback += 1
        return value


def make_identifier(
    text: str = "TEST2401151030001230007005",
    node: int = 7,
    exponent: int = 5,
) -> Identifier:
    """Helper to build an Identifier without going through a generator."""
    return Identifier(text=text, node=node, exponent=exponent, generated_at=MOCK_DATETIME)


# ==============================================================================
# Isolation Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_fleetid(tmp_path, monkeypatch):
    """
    Keep tests away from real config files, FLEETID_* env vars and state
    left behind in the process-wide generator by earlier tests.
    """
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for name in (
        "FLEETID_NODE",
        "FLEETID_MAX_IDS_PER_MS",
        "FLEETID_MAX_ATTEMPTS",
        "FLEETID_TIMEZONE",
    ):
        monkeypatch.delenv(name, raising=False)

    clear_cache()
    api.reset()
    yield project
    clear_cache()
    api.reset()


@pytest.fixture
def mock_time_ms():
    """Epoch milliseconds for 2024-01-15T10:30:00.123Z."""
    return MOCK_TIME_MS


@pytest.fixture
def mock_datetime():
    """The instant behind mock_time_ms as an aware UTC datetime."""
    return MOCK_DATETIME


@pytest.fixture
def fixed_clock():
    """Clock pinned to 2024-01-15T10:30:00.123Z."""
    return FixedClock()


@pytest.fixture
def list_clock():
    """Factory for clocks that walk through a list of timestamps."""
    return ListClock


@pytest.fixture
def scripted_random():
    """Factory for random sources with scripted draws."""
    return ScriptedRandom


@pytest.fixture
def identifier_factory():
    """Factory for Identifier instances."""
    return make_identifier
