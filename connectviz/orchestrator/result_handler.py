"""Async fetch/load cycle of a visualization.

Every call shows the loader, awaits the query result and hands it to the
visualization's ``load_data``. Every failure ends up in the loader's error
state; only unexpected errors raised while loading propagate as well. Calls
are numbered: when a newer call was started before an older one settles, the
older response is dropped so the latest request always wins.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from connectviz.config.constants import RenderStep
from connectviz.errors import DatasetError, FetchFailure, MalformedMetadata
from connectviz.infrastructure.logging.logger import StructuredLogger
from connectviz.services.visualization import Visualization
from connectviz.utils.timing import timed_step

logger = logging.getLogger(__name__)

LoadData = Callable[[Any, bool], None]


class ResultHandler:
    """Runs display cycles for one visualization."""

    def __init__(self, structured_logger: StructuredLogger | None = None):
        self._generation = 0
        self._log = structured_logger or StructuredLogger(__name__)

    @property
    def generation(self) -> int:
        """Number of the most recently started call."""
        return self._generation

    def _is_current(self, generation: int, visualization: Visualization) -> bool:
        if visualization.destroyed:
            logger.debug(f"Dropping result #{generation}: visualization destroyed")
            return False
        if generation != self._generation:
            logger.debug(
                f"Dropping stale result #{generation} (latest is #{self._generation})"
            )
            return False
        return True

    async def _fetch(self, results: Awaitable[Any], generation: int) -> Any:
        with timed_step(RenderStep.FETCH, self._log) as step:
            step.record(generation=generation)
            try:
                return await results
            except Exception as e:
                raise FetchFailure(f"Query failed: {e}") from e

    async def handle_result(
        self,
        results: Awaitable[Any],
        visualization: Visualization,
        load_data: LoadData,
        re_render: bool = True,
    ) -> bool:
        """Await ``results`` and load them into ``visualization``.

        Args:
            results: Awaitable resolving to QueryResults (or a mapping).
            visualization: Owner of the loader; checked for destruction
                before anything is loaded.
            load_data: Called with the resolved results and ``re_render``.
            re_render: Whether this load replaces a previous one.

        Returns:
            True when the data was loaded, False when the call failed or its
            response was dropped.
        """
        self._generation += 1
        generation = self._generation
        visualization.loader.show()

        try:
            payload = await self._fetch(results, generation)
        except FetchFailure as e:
            if not self._is_current(generation, visualization):
                return False
            self._log.log_error(RenderStep.FETCH.value, e, {"generation": generation})
            visualization.loader.show_error(e)
            return False

        if not self._is_current(generation, visualization):
            return False

        try:
            load_data(payload, re_render)
        except (DatasetError, MalformedMetadata) as e:
            self._log.log_error(RenderStep.LOAD.value, e, {"generation": generation})
            visualization.loader.show_error(e)
            return False
        except Exception as e:
            # Programming errors still propagate, but never leave the loader spinning.
            self._log.log_error(RenderStep.LOAD.value, e, {"generation": generation})
            visualization.loader.show_error(e)
            raise

        visualization.loader.hide()
        return True
