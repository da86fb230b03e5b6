from fastapi import Request

from glpi_dashboard.services.dashboard_service import DashboardService


def get_dashboard(request: Request) -> DashboardService:
    """The dashboard instance owned by the running application."""
    return request.app.state.dashboard
