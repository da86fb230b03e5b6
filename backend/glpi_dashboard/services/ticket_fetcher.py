import asyncio
import logging
from dataclasses import dataclass

from glpi_dashboard.errors import FetchError
from glpi_dashboard.schemas.ticket import TicketRecord
from glpi_dashboard.services.period_service import ResolvedPeriods
from glpi_dashboard.services.ticket_store import TicketStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeriodTickets:
    current: list[TicketRecord]
    previous: list[TicketRecord]


async def fetch_period_tickets(store: TicketStore, periods: ResolvedPeriods) -> PeriodTickets:
    """Read the current and comparison windows concurrently.

    Either both result sets are returned or FetchError is raised; a partial
    pair never reaches the caller.
    """
    current_req = store.fetch_created_between(*periods.current.bounds())
    previous_req = store.fetch_created_between(*periods.comparison.bounds())

    results = await asyncio.gather(current_req, previous_req, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise FetchError(f"Ticket fetch failed: {result}") from result

    current, previous = results
    logger.debug(
        "Fetched %d current tickets (%s..%s) and %d comparison tickets (%s..%s)",
        len(current),
        periods.current.start,
        periods.current.end,
        len(previous),
        periods.comparison.start,
        periods.comparison.end,
    )
    return PeriodTickets(current=current, previous=previous)
