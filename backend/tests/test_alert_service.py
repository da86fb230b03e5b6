from datetime import timedelta

import pytest

from glpi_dashboard.models.base import AlertRule, AlertSeverity
from glpi_dashboard.services.alert_service import AlertEngine, near_breach_tickets
from tests.conftest import NOW, FakeAlarm

TWO_HOURS = timedelta(hours=2)


@pytest.fixture
def engine(alarm) -> AlertEngine:
    return AlertEngine(alarm)


# ---------------------------------------------------------------------------
# Rule A: excessive overdue
# ---------------------------------------------------------------------------


def test_excessive_overdue_fires(engine, alarm):
    notice = engine.evaluate(NOW, overdue_count=6, tickets=[])
    assert notice is not None
    assert notice.rule == AlertRule.excessive_overdue
    assert notice.severity == AlertSeverity.error
    assert "(6)" in notice.message
    assert engine.last_fired[AlertRule.excessive_overdue] == NOW
    assert alarm.triggered == 1


def test_excessive_overdue_needs_more_than_threshold(engine, alarm):
    assert engine.evaluate(NOW, overdue_count=5, tickets=[]) is None
    assert alarm.triggered == 0


def test_excessive_overdue_cooldown(engine, alarm):
    """Fires once, stays quiet for 30 minutes of ticks, then fires exactly once more."""
    fired_at = []
    for minute in range(0, 62):
        now = NOW + timedelta(minutes=minute)
        if engine.evaluate(now, overdue_count=9, tickets=[]) is not None:
            fired_at.append(minute)
    assert fired_at == [0, 30, 60]
    assert alarm.triggered == 3


def test_excessive_overdue_takes_priority(engine, make_ticket):
    """When rule A fires, near-breach is not evaluated in the same tick."""
    soon = make_ticket(sla_time_limit=NOW + timedelta(minutes=30))
    notice = engine.evaluate(NOW, overdue_count=10, tickets=[soon])
    assert notice.rule == AlertRule.excessive_overdue
    assert AlertRule.near_breach not in engine.last_fired

    # Next tick: A is cooling down, so B gets its turn
    notice = engine.evaluate(NOW + timedelta(minutes=1), overdue_count=10, tickets=[soon])
    assert notice.rule == AlertRule.near_breach


# ---------------------------------------------------------------------------
# Rule B: near breach
# ---------------------------------------------------------------------------


def test_near_breach_window_bounds(make_ticket):
    tickets = [
        make_ticket(id=1, sla_time_limit=NOW),
        make_ticket(id=2, sla_time_limit=NOW + timedelta(seconds=1)),
        make_ticket(id=3, sla_time_limit=NOW + TWO_HOURS),
        make_ticket(id=4, sla_time_limit=NOW + TWO_HOURS + timedelta(seconds=1)),
        make_ticket(id=5, sla_time_limit=NOW - timedelta(hours=1)),
        make_ticket(id=6, sla_time_limit=None),
    ]
    near = near_breach_tickets(tickets, NOW, TWO_HOURS, (5, 6))
    assert [t.id for t in near] == [2, 3]


def test_near_breach_excludes_solved_even_with_stale_status(make_ticket):
    tickets = [
        make_ticket(id=1, status_id=2, date_solved=NOW - timedelta(minutes=5),
                    sla_time_limit=NOW + timedelta(hours=1)),
        make_ticket(id=2, status_id=5, sla_time_limit=NOW + timedelta(hours=1)),
        make_ticket(id=3, status_id=6, sla_time_limit=NOW + timedelta(hours=1)),
        make_ticket(id=4, status_id=4, sla_time_limit=NOW + timedelta(hours=1)),
    ]
    near = near_breach_tickets(tickets, NOW, TWO_HOURS, (5, 6))
    assert [t.id for t in near] == [4]


def test_near_breach_fires_with_cooldown(engine, make_ticket):
    tickets = [
        make_ticket(sla_time_limit=NOW + timedelta(minutes=90)),
        make_ticket(sla_time_limit=NOW + timedelta(minutes=100)),
    ]
    notice = engine.evaluate(NOW, overdue_count=0, tickets=tickets)
    assert notice.rule == AlertRule.near_breach
    assert notice.severity == AlertSeverity.warning
    assert notice.message.startswith("2 tickets")

    assert engine.evaluate(NOW + timedelta(minutes=19), overdue_count=0, tickets=tickets) is None
    assert engine.evaluate(NOW + timedelta(minutes=20), overdue_count=0, tickets=tickets) is not None


def test_cooldowns_are_independent(engine, make_ticket):
    soon = make_ticket(sla_time_limit=NOW + timedelta(hours=1))
    engine.evaluate(NOW, overdue_count=0, tickets=[soon])
    notice = engine.evaluate(NOW + timedelta(minutes=1), overdue_count=7, tickets=[soon])
    assert notice.rule == AlertRule.excessive_overdue


def test_nothing_to_report(engine, alarm):
    assert engine.evaluate(NOW, overdue_count=0, tickets=[]) is None
    assert engine.current is None
    assert alarm.triggered == 0


# ---------------------------------------------------------------------------
# Notice visibility and alarm
# ---------------------------------------------------------------------------


def test_notice_auto_dismisses_after_four_seconds(engine):
    engine.evaluate(NOW, overdue_count=6, tickets=[])
    assert engine.visible_alert(NOW + timedelta(seconds=3)) is not None
    assert engine.visible_alert(NOW + timedelta(seconds=4)) is None


def test_new_notice_replaces_visible_one(engine, make_ticket):
    soon = make_ticket(sla_time_limit=NOW + timedelta(hours=1))
    engine.evaluate(NOW, overdue_count=0, tickets=[soon])
    engine.evaluate(NOW + timedelta(seconds=1), overdue_count=6, tickets=[soon])
    visible = engine.visible_alert(NOW + timedelta(seconds=2))
    assert visible.rule == AlertRule.excessive_overdue


def test_dismiss_keeps_cooldown(engine):
    engine.evaluate(NOW, overdue_count=6, tickets=[])
    engine.dismiss()
    assert engine.visible_alert(NOW) is None
    assert engine.evaluate(NOW + timedelta(minutes=1), overdue_count=6, tickets=[]) is None


def test_alarm_failure_does_not_block_alert(make_ticket):
    broken = FakeAlarm(fail=True)
    engine = AlertEngine(broken)

    notice = engine.evaluate(NOW, overdue_count=6, tickets=[])

    assert broken.triggered == 1
    assert notice is not None
    assert engine.visible_alert(NOW) == notice
    assert engine.last_fired[AlertRule.excessive_overdue] == NOW
