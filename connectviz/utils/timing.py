"""Context manager for timing and logging render steps."""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from connectviz.config.constants import RenderStep
from connectviz.infrastructure.logging.logger import StructuredLogger


class StepContext:
    """Mutable context for a timed render step."""

    def __init__(self) -> None:
        self.state: dict[str, Any] = {}

    def record(self, **state: Any) -> None:
        self.state.update(state)


@contextmanager
def timed_step(step: RenderStep, logger: StructuredLogger) -> Iterator[StepContext]:
    """Time a render step and log it with whatever state the body recorded.

    Nothing is logged when the body raises; callers log failures themselves.
    """
    ctx = StepContext()
    start = time.perf_counter()
    yield ctx
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.log_step(step.value, ctx.state, duration_ms=elapsed_ms)
