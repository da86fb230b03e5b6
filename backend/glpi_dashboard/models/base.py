import enum

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class TicketStatus(int, enum.Enum):
    """GLPI ticket status ids."""

    new = 1
    assigned = 2
    planned = 3
    waiting = 4
    solved = 5
    closed = 6


class AlertRule(str, enum.Enum):
    excessive_overdue = "excessive_overdue"
    near_breach = "near_breach"


class AlertSeverity(str, enum.Enum):
    warning = "warning"
    error = "error"
