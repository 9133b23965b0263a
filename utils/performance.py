"""Performance profiling utilities."""
from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Generator, List, Optional

from utils.logging import logger


@dataclass
class Timing:
    name: str
    duration: float
    metadata: dict = field(default_factory=dict)


@contextmanager
def track_time(name: str, sink: Optional[List[Timing]] = None, **metadata) -> Generator[Timing, None, None]:
    """Context manager to track execution time.

    Timings go into `sink` (a per-call list) so concurrent comparisons never
    share state.
    """
    timing = Timing(name=name, duration=0, metadata=metadata)
    start = time.perf_counter()
    try:
        yield timing
    finally:
        timing.duration = time.perf_counter() - start
        if sink is not None:
            sink.append(timing)
        logger.debug("Timing: %s took %.3f seconds", name, timing.duration)


def timings_to_dict(timings: List[Timing]) -> Dict[str, float]:
    """Stage name -> seconds, plus a "total" key."""
    result = {timing.name: round(timing.duration, 6) for timing in timings}
    result["total"] = round(sum(timing.duration for timing in timings), 6)
    return result

