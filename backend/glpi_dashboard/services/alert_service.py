import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from glpi_dashboard.models.base import AlertRule, AlertSeverity
from glpi_dashboard.schemas.dashboard import AlertNotice
from glpi_dashboard.schemas.ticket import TicketRecord
from glpi_dashboard.services.alarm import Alarm
from glpi_dashboard.services.time_utils import as_local

logger = logging.getLogger(__name__)


def near_breach_tickets(
    tickets: Iterable[TicketRecord],
    now: datetime,
    window: timedelta,
    closed_status_ids: Iterable[int],
) -> list[TicketRecord]:
    """Open tickets whose SLA deadline falls within (now, now + window]."""
    closed = set(closed_status_ids)
    limit = now + window
    return [
        t for t in tickets
        if t.date_solved is None
        and t.status_id not in closed
        and t.sla_time_limit is not None
        and now < as_local(t.sla_time_limit) <= limit
    ]


class AlertEngine:
    """Evaluates the overdue and near-breach rules once per tick.

    Each rule has its own cooldown. At most one notice is visible at a time;
    a newly fired rule replaces it.
    """

    def __init__(
        self,
        alarm: Alarm,
        *,
        closed_status_ids: Iterable[int] = (5, 6),
        overdue_threshold: int = 5,
        overdue_cooldown: timedelta = timedelta(minutes=30),
        near_breach_cooldown: timedelta = timedelta(minutes=20),
        near_breach_window: timedelta = timedelta(hours=2),
        display_for: timedelta = timedelta(seconds=4),
    ):
        self._alarm = alarm
        self._closed_status_ids = tuple(closed_status_ids)
        self.overdue_threshold = overdue_threshold
        self.near_breach_window = near_breach_window
        self.display_for = display_for
        self.cooldowns: dict[AlertRule, timedelta] = {
            AlertRule.excessive_overdue: overdue_cooldown,
            AlertRule.near_breach: near_breach_cooldown,
        }
        self.last_fired: dict[AlertRule, datetime] = {}
        self.current: AlertNotice | None = None

    def _cooled_down(self, rule: AlertRule, now: datetime) -> bool:
        last = self.last_fired.get(rule)
        return last is None or now - last >= self.cooldowns[rule]

    def evaluate(
        self, now: datetime, overdue_count: int, tickets: Sequence[TicketRecord]
    ) -> AlertNotice | None:
        """Run one tick. Returns the notice raised in this tick, if any."""
        if overdue_count > self.overdue_threshold and self._cooled_down(AlertRule.excessive_overdue, now):
            return self._fire(
                AlertRule.excessive_overdue,
                now,
                title="CRITICAL ALERT",
                message=(
                    f"Excessive number of overdue tickets ({overdue_count}). "
                    "Immediate action required!"
                ),
                severity=AlertSeverity.error,
            )

        near = near_breach_tickets(tickets, now, self.near_breach_window, self._closed_status_ids)
        if near and self._cooled_down(AlertRule.near_breach, now):
            hours = int(self.near_breach_window.total_seconds() // 3600)
            return self._fire(
                AlertRule.near_breach,
                now,
                title="WARNING: SLA DEADLINE APPROACHING",
                message=f"{len(near)} tickets are about to breach SLA ({hours}h). Check the queue!",
                severity=AlertSeverity.warning,
            )
        return None

    def _fire(
        self, rule: AlertRule, now: datetime, *, title: str, message: str, severity: AlertSeverity
    ) -> AlertNotice:
        notice = AlertNotice(
            rule=rule,
            title=title,
            message=message,
            severity=severity,
            raised_at=now,
            expires_at=now + self.display_for,
        )
        self.current = notice
        self.last_fired[rule] = now
        logger.warning("%s: %s", title, message)
        try:
            self._alarm.trigger()
        except Exception as exc:
            logger.warning("Could not play alarm for %s: %s", rule.value, exc)
        return notice

    def visible_alert(self, now: datetime) -> AlertNotice | None:
        if self.current is not None and now < self.current.expires_at:
            return self.current
        return None

    def dismiss(self) -> None:
        self.current = None
