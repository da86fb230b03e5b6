import asyncio
import logging
from collections.abc import Callable, Coroutine
from datetime import date, datetime, timedelta

from glpi_dashboard.config import Settings, settings
from glpi_dashboard.errors import DashboardError, FetchError
from glpi_dashboard.schemas.dashboard import AggregationSnapshot, AlertNotice, DateRange
from glpi_dashboard.schemas.goals import Goals, GoalsUpdate
from glpi_dashboard.schemas.ticket import TicketRecord
from glpi_dashboard.services.aggregation_service import build_snapshot
from glpi_dashboard.services.alarm import Alarm
from glpi_dashboard.services.alert_service import AlertEngine
from glpi_dashboard.services.goals_service import GoalsStore
from glpi_dashboard.services.overdue_service import OverdueMonitor
from glpi_dashboard.services.period_service import resolve_periods
from glpi_dashboard.services.refresh_service import RefreshCountdown
from glpi_dashboard.services.ticket_fetcher import fetch_period_tickets
from glpi_dashboard.services.ticket_store import TicketStore
from glpi_dashboard.services.time_utils import local_now
from glpi_dashboard.tasks.periodic import PeriodicTask

logger = logging.getLogger(__name__)


class DashboardService:
    """Live dashboard state and the three timers that keep it fresh.

    - countdown (1s): refetches the filtered periods when it reaches zero
    - overdue poll: counts overdue open tickets, ignoring the date filter
    - alert check: evaluates the alert rules against the latest data
    """

    def __init__(
        self,
        store: TicketStore,
        goals: GoalsStore,
        alarm: Alarm,
        *,
        config: Settings = settings,
        clock: Callable[[], datetime] = local_now,
    ):
        self._store = store
        self._goals = goals
        self._alarm = alarm
        self._clock = clock

        today = clock().date()
        self.date_range = DateRange(
            start=(today - timedelta(days=config.default_range_days)).isoformat(),
            end=today.isoformat(),
        )
        self.loading = False
        self.snapshot: AggregationSnapshot | None = None
        self.last_refreshed_at: datetime | None = None
        self.tickets: list[TicketRecord] = []
        self.previous_tickets: list[TicketRecord] = []

        self.countdown = RefreshCountdown(config.refresh_interval_seconds)
        self.overdue = OverdueMonitor(store, config.closed_status_ids, clock=clock)
        self.alerts = AlertEngine(
            alarm,
            closed_status_ids=config.closed_status_ids,
            overdue_threshold=config.excessive_overdue_threshold,
            overdue_cooldown=timedelta(seconds=config.excessive_overdue_cooldown_seconds),
            near_breach_cooldown=timedelta(seconds=config.near_breach_cooldown_seconds),
            near_breach_window=timedelta(seconds=config.near_breach_window_seconds),
            display_for=timedelta(seconds=config.alert_display_seconds),
        )

        self._timers = [
            PeriodicTask("refresh-countdown", 1, self.countdown_tick),
            PeriodicTask(
                "overdue-poll", config.overdue_poll_seconds, self.overdue.refresh, run_immediately=True
            ),
            PeriodicTask("alert-check", config.alert_check_seconds, self.check_alerts),
        ]
        self._background: set[asyncio.Task] = set()
        self._generation = 0
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        self._closed = False
        for timer in self._timers:
            timer.start()
        self._spawn(self._refresh_in_background())

    async def stop(self) -> None:
        self._closed = True
        for timer in self._timers:
            await timer.stop()
        await self._alarm.stop()

    @property
    def running(self) -> bool:
        return any(timer.running for timer in self._timers)

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    # ------------------------------------------------------------------
    # Ticket data
    # ------------------------------------------------------------------

    async def set_date_range(self, start: str | date, end: str | date) -> AggregationSnapshot | None:
        """Change the filter, restart the countdown and refetch.

        Invalid dates raise ValidationError before anything changes.
        """
        periods = resolve_periods(start, end)
        self.date_range = DateRange(
            start=periods.current.start.isoformat(), end=periods.current.end.isoformat()
        )
        self.countdown.reset()
        return await self.refresh()

    async def refresh(self) -> AggregationSnapshot | None:
        """Fetch both periods and rebuild the snapshot.

        Raises FetchError when either read fails; the previous snapshot stays
        in place. Results of a refresh that was superseded by a newer one, or
        that completes after stop(), are dropped.
        """
        self._generation += 1
        generation = self._generation
        self.loading = True
        try:
            periods = resolve_periods(self.date_range.start, self.date_range.end)
            result = await fetch_period_tickets(self._store, periods)
        except FetchError:
            logger.error("Error fetching tickets", exc_info=True)
            raise
        finally:
            if generation == self._generation:
                self.loading = False

        if self._closed or generation != self._generation:
            logger.debug("Discarding stale ticket fetch")
            return None

        self.tickets = result.current
        self.previous_tickets = result.previous
        self.last_refreshed_at = self._clock()
        self._rebuild_snapshot()
        return self.snapshot

    async def _refresh_in_background(self) -> None:
        try:
            await self.refresh()
        except DashboardError as exc:
            logger.warning("Background refresh skipped: %s", exc.message)

    def _rebuild_snapshot(self) -> None:
        self.snapshot = build_snapshot(self.tickets, self.previous_tickets, self._goals.get())

    # ------------------------------------------------------------------
    # Timer callbacks
    # ------------------------------------------------------------------

    async def countdown_tick(self) -> None:
        if self.countdown.tick():
            self._spawn(self._refresh_in_background())

    async def check_alerts(self) -> AlertNotice | None:
        return self.alerts.evaluate(self._clock(), self.overdue.state.count, self.tickets)

    # ------------------------------------------------------------------
    # Goals and alerts
    # ------------------------------------------------------------------

    def get_goals(self) -> Goals:
        return self._goals.get()

    def update_goals(self, data: GoalsUpdate) -> Goals:
        goals = self._goals.update(data)
        if self.last_refreshed_at is not None:
            self._rebuild_snapshot()
        return goals

    def visible_alert(self) -> AlertNotice | None:
        return self.alerts.visible_alert(self._clock())

    def dismiss_alert(self) -> None:
        self.alerts.dismiss()
