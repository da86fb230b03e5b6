from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from glpi_dashboard.api.dependencies import get_dashboard
from glpi_dashboard.database import get_db
from glpi_dashboard.schemas.dashboard import (
    AggregationSnapshot,
    AlertNotice,
    DashboardState,
    DateRange,
    OverdueResponse,
    OverdueState,
)
from glpi_dashboard.services import ranking_service
from glpi_dashboard.services.dashboard_service import DashboardService
from glpi_dashboard.services.period_service import resolve_periods

router = APIRouter()


def _overdue_response(state: OverdueState) -> OverdueResponse:
    return OverdueResponse(
        count=state.count,
        oldest_deadline=state.oldest_deadline,
        oldest_overdue_age=state.oldest_overdue_age,
        message=state.message,
        checked_at=state.checked_at,
    )


def _state(dashboard: DashboardService) -> DashboardState:
    return DashboardState(
        date_range=dashboard.date_range,
        loading=dashboard.loading,
        refresh_in=dashboard.countdown.display(),
        last_refreshed_at=dashboard.last_refreshed_at,
        snapshot=dashboard.snapshot,
        overdue=_overdue_response(dashboard.overdue.state),
        alert=dashboard.visible_alert(),
    )


@router.get("", response_model=DashboardState)
async def get_dashboard_state(dashboard: DashboardService = Depends(get_dashboard)):
    """Current snapshot, overdue counter, visible alert and refresh countdown."""
    return _state(dashboard)


@router.put("/range", response_model=DashboardState)
async def set_date_range(data: DateRange, dashboard: DashboardService = Depends(get_dashboard)):
    """Change the date filter and refetch. Invalid dates return 422 and change nothing."""
    await dashboard.set_date_range(data.start, data.end)
    return _state(dashboard)


@router.post("/refresh", response_model=AggregationSnapshot | None)
async def refresh(dashboard: DashboardService = Depends(get_dashboard)):
    """Refetch the current filter immediately."""
    return await dashboard.refresh()


@router.get("/overdue", response_model=OverdueResponse)
async def get_overdue(dashboard: DashboardService = Depends(get_dashboard)):
    return _overdue_response(dashboard.overdue.state)


@router.get("/alert", response_model=AlertNotice | None)
async def get_alert(dashboard: DashboardService = Depends(get_dashboard)):
    return dashboard.visible_alert()


@router.delete("/alert", status_code=status.HTTP_204_NO_CONTENT)
async def dismiss_alert(dashboard: DashboardService = Depends(get_dashboard)):
    dashboard.dismiss_alert()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/ranking", response_model=list[dict])
async def get_technician_ranking(
    start: date = Query(...),
    end: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Technician ranking for the given days, as computed by the database."""
    periods = resolve_periods(start, end)
    return await ranking_service.fetch_technician_ranking(db, periods.current)
