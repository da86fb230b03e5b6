"""Dashboard KPIs computed from the current and comparison ticket sets.

Everything here is a pure function of its arguments. Percentage labels are
pre-formatted as ``"<name> (<pct>%)"`` because the dashboard renders them
as-is; every entry also carries the raw ``share``.
"""

from collections.abc import Iterable, Sequence

from glpi_dashboard.schemas.dashboard import (
    AggregationSnapshot,
    GoalEvaluation,
    NamedValue,
    PriorityResolution,
    TrendPoint,
)
from glpi_dashboard.schemas.goals import Goals
from glpi_dashboard.schemas.ticket import TicketRecord

RESOLVED_LABELS = ("Solved", "Closed")
UNCATEGORIZED = "uncategorized"
UNKNOWN = "unknown"
TOP_LIMIT = 10


def _share(count: int, total: int) -> float:
    return count / total * 100 if total > 0 else 0.0


def _pct_label(name: str, count: int, total: int) -> str:
    return f"{name} ({_share(count, total):.1f}%)"


def _count_by(values: Iterable[str]) -> dict[str, int]:
    # dict keeps first-seen order, which decides ties after a stable sort
    counts: dict[str, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return counts


def _ranked(counts: dict[str, int], limit: int | None = None) -> list[tuple[str, int]]:
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit] if limit is not None else ranked


# ---------------------------------------------------------------------------
# Scalar KPIs
# ---------------------------------------------------------------------------


def growth_rate(current_total: int, previous_total: int) -> float:
    """Period-over-period growth in percent, 0 when there is no baseline."""
    if previous_total == 0:
        return 0.0
    return (current_total - previous_total) / previous_total * 100


def growth_label(growth: float) -> str:
    sign = "+" if growth > 0 else ""
    return f"{sign}{growth:.1f}% vs previous month"


def fcr_rate(first_contact: int, resolved: int) -> str:
    """First contact resolution rate. Returns the literal ``"0"`` without resolved tickets."""
    if resolved == 0:
        return "0"
    return f"{first_contact / resolved * 100:.1f}"


def sla_compliance_rate(total: int, violated: int) -> str | int:
    """SLA compliance as a one-decimal string, or the number 0 when there are no tickets."""
    if total == 0:
        return 0
    return f"{(total - violated) / total * 100:.1f}"


# ---------------------------------------------------------------------------
# Grouped views
# ---------------------------------------------------------------------------


def status_breakdown(tickets: Sequence[TicketRecord]) -> list[NamedValue]:
    total = len(tickets)
    counts = _count_by(t.status_label for t in tickets)
    return [
        NamedValue(name=_pct_label(name, count, total), value=count, share=_share(count, total))
        for name, count in counts.items()
    ]


def resolution_by_priority(tickets: Sequence[TicketRecord]) -> list[PriorityResolution]:
    """Mean resolution hours per priority.

    The mean only uses tickets with a positive ``time_to_resolve`` while the
    volume share counts every ticket of the bucket.
    """
    total = len(tickets)
    buckets: dict[str, dict[str, int]] = {}
    for ticket in tickets:
        bucket = buckets.setdefault(ticket.priority_label, {"seconds": 0, "resolved": 0, "count": 0})
        if ticket.time_to_resolve > 0:
            bucket["seconds"] += ticket.time_to_resolve
            bucket["resolved"] += 1
        bucket["count"] += 1

    result = []
    for label, bucket in buckets.items():
        hours = 0.0
        if bucket["resolved"] > 0:
            hours = round(bucket["seconds"] / bucket["resolved"] / 3600, 1)
        result.append(
            PriorityResolution(
                name=_pct_label(label, bucket["count"], total),
                hours=hours,
                count=bucket["count"],
                share=_share(bucket["count"], total),
            )
        )
    return result


def blended_resolution_hours(by_priority: Sequence[PriorityResolution]) -> float:
    """Unweighted mean of the per-priority averages."""
    return round(sum(p.hours for p in by_priority) / (len(by_priority) or 1), 1)


def top_categories(tickets: Sequence[TicketRecord], limit: int = TOP_LIMIT) -> list[NamedValue]:
    total = len(tickets)
    counts = _count_by(t.category_name or UNCATEGORIZED for t in tickets)
    return [
        NamedValue(name=name, value=count, share=_share(count, total))
        for name, count in _ranked(counts, limit)
    ]


def top_departments(tickets: Sequence[TicketRecord], limit: int = TOP_LIMIT) -> list[NamedValue]:
    total = len(tickets)
    counts = _count_by(t.department_name or UNKNOWN for t in tickets)
    return [
        NamedValue(name=_pct_label(name, count, total), value=count, share=_share(count, total))
        for name, count in _ranked(counts, limit)
    ]


def by_location(tickets: Sequence[TicketRecord]) -> list[NamedValue]:
    total = len(tickets)
    counts = _count_by(t.location_name or UNKNOWN for t in tickets)
    return [
        NamedValue(name=_pct_label(name, count, total), value=count, share=_share(count, total))
        for name, count in _ranked(counts)
    ]


def daily_trend(tickets: Sequence[TicketRecord]) -> list[TrendPoint]:
    counts = _count_by(t.date_creation.date().isoformat() for t in tickets)
    return [TrendPoint(date=day, count=counts[day]) for day in sorted(counts)]


def evaluate_goals(sla_pct: float, fcr_pct: float, avg_hours: float, goals: Goals) -> GoalEvaluation:
    # Higher is better for percentages, lower is better for time
    return GoalEvaluation(
        sla_met=sla_pct >= goals.sla,
        fcr_met=fcr_pct >= goals.fcr,
        time_met=avg_hours <= goals.time,
    )


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


def build_snapshot(
    current: Sequence[TicketRecord],
    previous: Sequence[TicketRecord],
    goals: Goals,
) -> AggregationSnapshot:
    total = len(current)
    previous_total = len(previous)
    growth = growth_rate(total, previous_total)

    resolved = [t for t in current if t.status_label in RESOLVED_LABELS]
    first_contact = sum(1 for t in resolved if t.count_cless_one_hour)
    fcr = fcr_rate(first_contact, len(resolved))

    violated = sum(1 for t in current if t.is_sla_violated)
    sla = sla_compliance_rate(total, violated)

    by_priority = resolution_by_priority(current)
    avg_hours = blended_resolution_hours(by_priority)

    return AggregationSnapshot(
        total_tickets=total,
        previous_total_tickets=previous_total,
        ticket_growth=growth,
        ticket_trend_label=growth_label(growth),
        by_status=status_breakdown(current),
        fcr_rate=fcr,
        fcr_pct=float(fcr),
        sla_compliance_rate=sla,
        sla_compliance_pct=float(sla),
        avg_resolution_by_priority=by_priority,
        avg_resolution_hours=avg_hours,
        top_categories=top_categories(current),
        top_departments=top_departments(current),
        by_location=by_location(current),
        daily_trend=daily_trend(current),
        goals=evaluate_goals(float(sla), float(fcr), avg_hours, goals),
    )
