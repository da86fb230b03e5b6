from glpi_dashboard.models.base import AlertRule, AlertSeverity, Base, TicketStatus
from glpi_dashboard.models.dashboard_ticket import DashboardTicket

__all__ = [
    "AlertRule",
    "AlertSeverity",
    "Base",
    "DashboardTicket",
    "TicketStatus",
]
