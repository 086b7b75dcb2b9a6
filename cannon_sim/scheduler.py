"""
Frame Scheduler
===============
Single owner of the per-frame loop. Controllers register once; each
`tick(now_ms)` calls them in registration order (physics before camera),
so no controller reads another's output before it is produced in the same
frame. `close()` deregisters everything; later ticks mutate nothing.
"""

import logging
import time
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class ManualClock:
    """Synthetic millisecond clock for recording and tests."""

    def __init__(self, start_ms: float = 0.0):
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> float:
        self.now_ms += ms
        return self.now_ms


class FrameScheduler:
    """Calls `tick(now_ms)` on each registered controller once per frame."""

    def __init__(self, clock: Callable[[], float] = monotonic_ms):
        self.clock = clock
        self._controllers: List = []
        self._closed = False
        self.frame_count = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def register(self, controller) -> None:
        if self._closed:
            raise RuntimeError("cannot register on a closed scheduler")
        self._controllers.append(controller)

    def unregister(self, controller) -> None:
        self._controllers.remove(controller)

    def tick(self, now_ms: Optional[float] = None) -> bool:
        """Advance one frame. Returns False when the scheduler is closed."""
        if self._closed:
            logger.debug("tick ignored: scheduler closed")
            return False
        if now_ms is None:
            now_ms = self.clock()
        for controller in list(self._controllers):
            controller.tick(now_ms)
        self.frame_count += 1
        return True

    def run(self, until: Callable[[], bool], fps: float = 60.0,
            max_frames: Optional[int] = None) -> int:
        """
        Drive frames from the clock until `until()` is true, the scheduler is
        closed or `max_frames` is reached. Returns the number of frames run.
        """
        frame_s = 1.0 / fps
        frames = 0
        while not self._closed and not until():
            if max_frames is not None and frames >= max_frames:
                break
            self.tick()
            frames += 1
            time.sleep(frame_s)
        return frames

    def close(self) -> None:
        """Deregister all controllers; in-progress work is abandoned."""
        if self._closed:
            return
        logger.info("Scheduler closed after %d frames (%d controllers released)",
                    self.frame_count, len(self._controllers))
        self._controllers.clear()
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
