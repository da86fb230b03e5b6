import asyncio
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from glpi_dashboard.config import Settings
from glpi_dashboard.main import create_app
from glpi_dashboard.schemas.ticket import TicketRecord
from glpi_dashboard.services.dashboard_service import DashboardService
from glpi_dashboard.services.goals_service import GoalsStore

NOW = datetime(2026, 3, 16, 10, 0, 0)


class FakeClock:
    """Controllable replacement for the wall clock."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class FakeTicketStore:
    """In-memory ticket store with the same query semantics as the SQL view."""

    def __init__(self, tickets: list[TicketRecord] | None = None):
        self.tickets = list(tickets or [])
        self.range_calls: list[tuple[datetime, datetime]] = []
        self.overdue_calls: list[tuple[datetime, tuple[int, ...]]] = []
        self.fail_on_range: set[datetime] = set()
        self.fail_all_ranges = False
        self.fail_overdue = False
        self.gate: asyncio.Event | None = None

    async def fetch_created_between(self, start: datetime, end: datetime) -> list[TicketRecord]:
        self.range_calls.append((start, end))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_all_ranges or start in self.fail_on_range:
            raise ConnectionError("ticket store unavailable")
        return [t for t in self.tickets if start <= t.date_creation <= end]

    async def fetch_overdue_deadlines(self, now: datetime, excluded_status_ids) -> list[datetime]:
        excluded = tuple(excluded_status_ids)
        self.overdue_calls.append((now, excluded))
        if self.fail_overdue:
            raise ConnectionError("ticket store unavailable")
        return sorted(
            t.sla_time_limit
            for t in self.tickets
            if t.status_id not in excluded
            and t.sla_time_limit is not None
            and t.sla_time_limit < now
        )


class FakeAlarm:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.triggered = 0
        self.stopped = False

    def trigger(self) -> None:
        self.triggered += 1
        if self.fail:
            raise RuntimeError("playback blocked")

    async def stop(self) -> None:
        self.stopped = True


def _ticket(ticket_id: int = 1, **overrides) -> TicketRecord:
    base = {
        "id": ticket_id,
        "name": f"Ticket {ticket_id}",
        "date_creation": datetime(2026, 3, 10, 9, 30),
        "status_id": 2,
        "status_label": "Processing (assigned)",
        "priority_id": 3,
        "priority_label": "Medium",
        "category_name": "Hardware",
        "location_name": "Head Office",
        "department_name": "Finance",
        "time_to_resolve": 0,
        "is_sla_violated": False,
        "count_cless_one_hour": False,
    }
    base.update(overrides)
    return TicketRecord(**base)


@pytest.fixture
def make_ticket():
    """Factory building a ticket with sensible defaults; keyword arguments override fields."""
    counter = iter(range(1, 100000))

    def factory(**overrides) -> TicketRecord:
        ticket_id = overrides.pop("id", None) or next(counter)
        return _ticket(ticket_id, **overrides)

    return factory


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> FakeTicketStore:
    return FakeTicketStore()


@pytest.fixture
def alarm() -> FakeAlarm:
    return FakeAlarm()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(goals_path=tmp_path / "goals.json", alarm_enabled=False)


@pytest.fixture
def goals_store(test_settings: Settings) -> GoalsStore:
    return GoalsStore(test_settings.goals_path)


@pytest.fixture
def dashboard(
    store: FakeTicketStore,
    goals_store: GoalsStore,
    alarm: FakeAlarm,
    test_settings: Settings,
    clock: FakeClock,
) -> DashboardService:
    return DashboardService(store, goals_store, alarm, config=test_settings, clock=clock)


@pytest.fixture
def app(dashboard: DashboardService) -> FastAPI:
    return create_app(dashboard)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to an app that uses the in-memory dashboard.

    The lifespan does not run, so the timers stay stopped.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
