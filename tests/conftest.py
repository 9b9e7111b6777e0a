import time
from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.rules.loader import load_rules
from src.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class MockClock:
    """Settable clock; local time is the zone of `now`."""

    def __init__(self, now: datetime) -> None:
        self._now = now

    def now_utc(self) -> datetime:
        return self._now.astimezone(UTC)

    def now_local(self) -> datetime:
        return self._now

    def set_now(self, now: datetime) -> None:
        self._now = now

    def advance(self, delta: timedelta) -> None:
        self._now = self._now + delta


@pytest.fixture
def rules() -> Rules:
    """REAL rules from the project root."""
    rules_path = PROJECT_ROOT / "rules.yaml"
    if not rules_path.exists():
        raise FileNotFoundError(f"Rules not found at {rules_path}")
    return load_rules(rules_path)


@pytest.fixture
def clock() -> MockClock:
    return MockClock(datetime(2024, 6, 15, 14, 30, tzinfo=UTC))


@pytest.fixture
def clock_at() -> Callable[[datetime], MockClock]:
    """Factory for a MockClock fixed at a given instant."""
    return MockClock


@pytest.fixture
def london_local_time(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run with the process-local zone set to UK time (GMT in winter, BST in summer)."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "GMT0BST,M3.5.0/1,M10.5.0")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Temporary SQLite database with all migrations applied."""
    path = str(tmp_path / "analytics.db")
    SQLiteMigrator(path, str(PROJECT_ROOT / "migrations")).run_migrations()
    return path
