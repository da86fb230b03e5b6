import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from glpi_dashboard.errors import FetchError
from glpi_dashboard.services.period_service import DateWindow

logger = logging.getLogger(__name__)

RANKING_QUERY = text("SELECT * FROM get_technician_ranking(:start_date, :end_date)")


async def fetch_technician_ranking(db: AsyncSession, window: DateWindow) -> list[dict]:
    """Technician ranking computed by the database function, returned row by row.

    Raises FetchError when the database call fails.
    """
    start, end = window.bounds()
    try:
        result = await db.execute(
            RANKING_QUERY,
            {"start_date": start, "end_date": end},
        )
    except SQLAlchemyError as exc:
        logger.error("Error fetching technician ranking", exc_info=True)
        raise FetchError(f"Technician ranking failed: {exc}") from exc
    return [dict(row._mapping) for row in result.all()]
