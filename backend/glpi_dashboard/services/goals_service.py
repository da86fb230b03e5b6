import logging
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from glpi_dashboard.schemas.goals import Goals, GoalsUpdate

logger = logging.getLogger(__name__)


class GoalsStore:
    """Dashboard goals kept in a local JSON file.

    Read lazily on first access, written back on every update.
    """

    def __init__(self, path: Path, defaults: Goals | None = None):
        self.path = Path(path)
        self._defaults = defaults or Goals()
        self._goals: Goals | None = None

    def _load(self) -> Goals:
        if not self.path.exists():
            return self._defaults.model_copy()
        try:
            return Goals.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, PydanticValidationError) as exc:
            logger.error("Error reading goals from %s, using defaults: %s", self.path, exc)
            return self._defaults.model_copy()

    def get(self) -> Goals:
        if self._goals is None:
            self._goals = self._load()
        return self._goals

    def update(self, data: GoalsUpdate) -> Goals:
        changes = data.model_dump(exclude_none=True)
        goals = self.get().model_copy(update=changes)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(goals.model_dump_json(), encoding="utf-8")
        self._goals = goals
        logger.info("Goals updated: %s", changes)
        return goals
