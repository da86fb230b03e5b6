import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from glpi_dashboard.schemas.dashboard import OverdueState
from glpi_dashboard.services.ticket_store import TicketStore
from glpi_dashboard.services.time_utils import format_distance, local_now

logger = logging.getLogger(__name__)


class OverdueMonitor:
    """Live count of open tickets past their SLA deadline.

    Not tied to the dashboard date filter: every poll looks at all open
    tickets as of now.
    """

    def __init__(
        self,
        store: TicketStore,
        closed_status_ids: Iterable[int],
        clock: Callable[[], datetime] = local_now,
    ):
        self._store = store
        self._closed_status_ids = tuple(closed_status_ids)
        self._clock = clock
        self.state = OverdueState()

    async def refresh(self) -> OverdueState:
        """Poll the store. On failure the previous state is kept."""
        now = self._clock()
        try:
            deadlines = await self._store.fetch_overdue_deadlines(now, self._closed_status_ids)
        except Exception as exc:
            logger.warning("Overdue poll failed, keeping previous state: %s", exc)
            return self.state

        if deadlines:
            oldest = deadlines[0]
            self.state = OverdueState(
                count=len(deadlines),
                oldest_deadline=oldest,
                oldest_overdue_age=format_distance(oldest, now),
                checked_at=now,
            )
        else:
            self.state = OverdueState(count=0, checked_at=now)
        return self.state
