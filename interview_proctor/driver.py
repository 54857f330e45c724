"""
Monitoring Driver - Feeds frames into the engine at a fixed cadence
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Iterable, List, Optional, Union

from .config import settings
from .detectors import PerceptionAdapter
from .engine import ProctoringEngine
from .events import ViolationEvent

logger = logging.getLogger(__name__)

FrameSource = Union[Iterable[Any], AsyncIterator[Any]]


async def _frames(source: FrameSource) -> AsyncIterator[Any]:
    if hasattr(source, "__aiter__"):
        async for frame in source:
            yield frame
    else:
        for frame in source:
            yield frame


async def monitor_loop(
    engine: ProctoringEngine,
    adapter: PerceptionAdapter,
    frames: FrameSource,
    interval_seconds: Optional[float] = None,
    stop_event: Optional[asyncio.Event] = None
) -> List[ViolationEvent]:
    """
    Analyze frames one per tick while the engine has an active session.

    Calls are strictly sequential. The loop stops when the frame source is
    exhausted, the stop event is set, or the session has been ended.

    The tick interval defaults to settings.ANALYSIS_INTERVAL_SECONDS.

    Returns:
        All events emitted during the loop
    """
    if interval_seconds is None:
        interval_seconds = settings.ANALYSIS_INTERVAL_SECONDS

    emitted: List[ViolationEvent] = []
    ticks = 0

    async for frame in _frames(frames):
        if stop_event is not None and stop_event.is_set():
            break
        if not engine.is_active:
            logger.info("Engine is idle, stopping monitor loop")
            break

        signal = adapter.collect(frame)
        events = engine.analyze_frame(signal)
        emitted.extend(events)
        ticks += 1

        if interval_seconds > 0:
            await asyncio.sleep(interval_seconds)

    logger.info(f"Monitor loop finished after {ticks} ticks, {len(emitted)} events")
    return emitted
