from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from glpi_dashboard.models.base import Base


class DashboardTicket(Base):
    """Read-only mapping of the ``dashboard_tickets`` view exported from GLPI.

    Timestamps are mapped without timezone and are used exactly as the view
    returns them.
    """

    __tablename__ = "dashboard_tickets"
    __table_args__ = (
        Index("ix_dashboard_tickets_date_creation", "date_creation"),
        Index("ix_dashboard_tickets_sla_time_limit", "sla_time_limit"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    date_creation: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    date_solved: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    date_closed: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    status_id: Mapped[int] = mapped_column(Integer, nullable=False)
    status_label: Mapped[str] = mapped_column(String, nullable=False)
    priority_id: Mapped[int] = mapped_column(Integer, nullable=False)
    priority_label: Mapped[str] = mapped_column(String, nullable=False)
    category_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    location_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    department_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    time_to_resolve: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    slas_id_ttr: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_sla_violated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Solved with at most one follow-up (first contact resolution)
    count_cless_one_hour: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sla_time_limit: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
