import contextlib
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from glpi_dashboard.api.routes import dashboard, goals
from glpi_dashboard.config import settings
from glpi_dashboard.database import async_session
from glpi_dashboard.errors import DashboardError
from glpi_dashboard.schemas.goals import Goals
from glpi_dashboard.services.alarm import AlarmPlayer
from glpi_dashboard.services.dashboard_service import DashboardService
from glpi_dashboard.services.goals_service import GoalsStore
from glpi_dashboard.services.ticket_store import SqlTicketStore


def build_dashboard() -> DashboardService:
    goals_store = GoalsStore(
        settings.goals_path,
        defaults=Goals(
            sla=settings.default_sla_goal,
            fcr=settings.default_fcr_goal,
            time=settings.default_time_goal,
        ),
    )
    alarm = AlarmPlayer(duration=settings.alarm_duration_seconds, enabled=settings.alarm_enabled)
    return DashboardService(SqlTicketStore(async_session), goals_store, alarm)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    await app.state.dashboard.start()
    try:
        yield
    finally:
        await app.state.dashboard.stop()


async def dashboard_error_handler(request: Request, exc: DashboardError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app(dashboard_service: DashboardService | None = None) -> FastAPI:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    app = FastAPI(title="GLPI Dashboard", version="0.1.0", lifespan=lifespan)
    app.state.dashboard = dashboard_service or build_dashboard()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DashboardError, dashboard_error_handler)

    @app.get("/api/v1/health")
    async def health_check():
        return {"status": "ok", "timers_running": app.state.dashboard.running}

    app.include_router(dashboard.router, prefix="/api/v1/dashboard", tags=["dashboard"])
    app.include_router(goals.router, prefix="/api/v1/goals", tags=["goals"])

    return app


app = create_app()
