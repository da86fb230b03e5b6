import asyncio
import logging
import sys
from typing import Protocol, TextIO

logger = logging.getLogger(__name__)

BELL = "\a"


class Alarm(Protocol):
    def trigger(self) -> None:
        ...

    async def stop(self) -> None:
        ...


class AlarmPlayer:
    """Rings the terminal bell in a loop for a fixed window, then stops.

    A new trigger while ringing restarts the window.
    """

    def __init__(
        self,
        duration: float = 4.0,
        interval: float = 1.0,
        stream: TextIO | None = None,
        enabled: bool = True,
    ):
        self.duration = duration
        self.interval = interval
        self.enabled = enabled
        self._stream = stream or sys.stdout
        self._task: asyncio.Task | None = None

    @property
    def playing(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self) -> None:
        if not self.enabled:
            return
        if self.playing:
            self._task.cancel()
        self._task = asyncio.get_running_loop().create_task(self._play(), name="alarm")

    async def _play(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.duration
        try:
            while loop.time() < deadline:
                self._stream.write(BELL)
                self._stream.flush()
                await asyncio.sleep(min(self.interval, deadline - loop.time()))
        except (OSError, ValueError) as exc:
            logger.warning("Alarm playback failed: %s", exc)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
