from datetime import datetime

from pydantic import BaseModel

from glpi_dashboard.models.base import AlertRule, AlertSeverity


class NamedValue(BaseModel):
    name: str
    value: int
    share: float


class PriorityResolution(BaseModel):
    name: str
    hours: float
    count: int
    share: float


class TrendPoint(BaseModel):
    date: str
    count: int


class GoalEvaluation(BaseModel):
    sla_met: bool
    fcr_met: bool
    time_met: bool


class AggregationSnapshot(BaseModel):
    total_tickets: int
    previous_total_tickets: int
    ticket_growth: float
    ticket_trend_label: str
    by_status: list[NamedValue]
    fcr_rate: str
    fcr_pct: float
    sla_compliance_rate: str | int
    sla_compliance_pct: float
    avg_resolution_by_priority: list[PriorityResolution]
    avg_resolution_hours: float
    top_categories: list[NamedValue]
    top_departments: list[NamedValue]
    by_location: list[NamedValue]
    daily_trend: list[TrendPoint]
    goals: GoalEvaluation


class OverdueState(BaseModel):
    count: int = 0
    oldest_deadline: datetime | None = None
    oldest_overdue_age: str = ""
    checked_at: datetime | None = None

    @property
    def message(self) -> str:
        if self.count == 0:
            return "All tickets within SLA"
        return f"The oldest ticket has been overdue for {self.oldest_overdue_age}"


class OverdueResponse(BaseModel):
    count: int
    oldest_deadline: datetime | None
    oldest_overdue_age: str
    message: str
    checked_at: datetime | None


class AlertNotice(BaseModel):
    rule: AlertRule
    title: str
    message: str
    severity: AlertSeverity
    raised_at: datetime
    expires_at: datetime


class DateRange(BaseModel):
    start: str
    end: str


class DashboardState(BaseModel):
    date_range: DateRange
    loading: bool
    refresh_in: str
    last_refreshed_at: datetime | None
    snapshot: AggregationSnapshot | None
    overdue: OverdueResponse
    alert: AlertNotice | None
