from fastapi import APIRouter, Depends

from glpi_dashboard.api.dependencies import get_dashboard
from glpi_dashboard.schemas.goals import Goals, GoalsUpdate
from glpi_dashboard.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("", response_model=Goals)
async def get_goals(dashboard: DashboardService = Depends(get_dashboard)):
    """Current SLA, FCR and resolution time goals."""
    return dashboard.get_goals()


@router.patch("", response_model=Goals)
async def update_goals(data: GoalsUpdate, dashboard: DashboardService = Depends(get_dashboard)):
    """Update one or more goals. Saved immediately."""
    return dashboard.update_goals(data)
