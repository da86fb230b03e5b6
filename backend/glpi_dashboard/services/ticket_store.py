from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from glpi_dashboard.models.dashboard_ticket import DashboardTicket
from glpi_dashboard.schemas.ticket import TicketRecord


class TicketStore(Protocol):
    async def fetch_created_between(self, start: datetime, end: datetime) -> list[TicketRecord]:
        ...

    async def fetch_overdue_deadlines(
        self, now: datetime, excluded_status_ids: Iterable[int]
    ) -> list[datetime]:
        ...


def created_between_query(start: datetime, end: datetime) -> Select:
    """Tickets whose creation timestamp falls within [start, end]."""
    return select(DashboardTicket).where(
        DashboardTicket.date_creation >= start,
        DashboardTicket.date_creation <= end,
    )


def overdue_deadlines_query(now: datetime, excluded_status_ids: Iterable[int]) -> Select:
    """Deadlines of open tickets already past ``now``, oldest first."""
    return (
        select(DashboardTicket.sla_time_limit)
        .where(
            DashboardTicket.status_id.not_in(list(excluded_status_ids)),
            DashboardTicket.sla_time_limit < now,
        )
        .order_by(DashboardTicket.sla_time_limit.asc())
    )


class SqlTicketStore:
    """Ticket store backed by the ``dashboard_tickets`` view."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def fetch_created_between(self, start: datetime, end: datetime) -> list[TicketRecord]:
        async with self._session_factory() as db:
            result = await db.execute(created_between_query(start, end))
            return [TicketRecord.model_validate(row) for row in result.scalars().all()]

    async def fetch_overdue_deadlines(
        self, now: datetime, excluded_status_ids: Iterable[int]
    ) -> list[datetime]:
        async with self._session_factory() as db:
            result = await db.execute(overdue_deadlines_query(now, excluded_status_ids))
            return [deadline for deadline in result.scalars().all() if deadline is not None]
