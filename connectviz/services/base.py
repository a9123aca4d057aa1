"""Lifecycle and formatting policy shared by charts and tables."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from functools import partial
from typing import Any, ClassVar

from connectviz.config.constants import ChartState, CssClass
from connectviz.config.options import ChartOptions, resolve_options
from connectviz.config.settings import Settings, get_settings
from connectviz.errors import ChartDestroyedError
from connectviz.infrastructure.dom.dom import (
    Destroyable,
    Element,
    create_element,
    create_title,
    get_destroyer,
    get_element,
)
from connectviz.infrastructure.dom.loader import Loader
from connectviz.infrastructure.logging.logger import StructuredLogger
from connectviz.orchestrator.result_handler import ResultHandler
from connectviz.services.dataset.builder import DatasetFormatters, as_query_results
from connectviz.services.dataset.models import QueryMetadata, QueryResults
from connectviz.services.formatting.formatters import (
    format_date,
    get_timezone,
    resolve_interval_pattern,
)

logger = logging.getLogger(__name__)


class BaseVisualization(ABC):
    """Owns the options, scaffold, loader and result handler of one visualization."""

    css_class: ClassVar[CssClass]

    def __init__(
        self,
        target: "str | Element",
        options: ChartOptions | Mapping[str, Any] | None = None,
        *,
        settings: Settings | None = None,
        root: Element | None = None,
    ):
        self.settings = settings or get_settings()
        self.options = resolve_options(options, settings=self.settings)
        self.target_element = get_element(target, root)
        self.loader = Loader(self.target_element)
        self.state = ChartState.UNINITIALIZED
        self._log = StructuredLogger(type(self).__module__)
        self._result_handler = ResultHandler(self._log)
        self._container: Element | None = None
        self._title_element: Element | None = None
        self._result_element: Element | None = None
        self._destroy_dom: Callable[[], None] | None = None

    @property
    def destroyed(self) -> bool:
        return self.state is ChartState.DESTROYED

    @property
    def container(self) -> Element | None:
        return self._container

    @property
    def title_element(self) -> Element | None:
        return self._title_element

    @property
    def result_element(self) -> Element | None:
        return self._result_element

    async def display_data(self, results: Awaitable[Any], re_render: bool = True) -> bool:
        """Render the scaffold if needed, then await ``results`` and load them.

        Raises:
            ChartDestroyedError: the visualization was destroyed.
        """
        if self.destroyed:
            raise ChartDestroyedError(f"{type(self).__name__} has been destroyed")
        self.render()
        return await self._result_handler.handle_result(
            results, self, self.load_data, re_render
        )

    def render(self) -> None:
        """Create the scaffold once: container > title + result element."""
        if self.state is not ChartState.UNINITIALIZED:
            return
        container = create_element("div", CssClass.VIZ.value, self.css_class.value)
        title = create_title(self.options.title)
        result = create_element("div", CssClass.RESULT.value)
        container.append_child(title)
        container.append_child(result)
        self.target_element.append_child(container)

        self._container = container
        self._title_element = title
        self._result_element = result
        self._destroy_dom = get_destroyer(container, self._render_result(result))
        self.state = ChartState.RENDERED
        logger.debug(f"Rendered {type(self).__name__} scaffold")

    def destroy(self) -> None:
        """Tear down the scaffold. Terminal; later results are dropped."""
        if self.destroyed:
            return
        if self._destroy_dom is not None:
            self._destroy_dom()
        self.loader.hide()
        self.loader.detach()
        self.state = ChartState.DESTROYED
        logger.debug(f"Destroyed {type(self).__name__}")

    @abstractmethod
    def _render_result(self, result_element: Element) -> Destroyable | None:
        """Populate the result element; return what must be destroyed with it."""

    def load_data(self, results: Any, re_render: bool = True) -> None:
        """Load one result set. Dataset and metadata errors propagate.

        Loading into a destroyed visualization does nothing.
        """
        if self.destroyed:
            logger.debug(f"Ignoring load into destroyed {type(self).__name__}")
            return
        self.render()
        self._load(as_query_results(results), re_render)

    @abstractmethod
    def _load(self, results: QueryResults, re_render: bool) -> None:
        """Turn validated results into the rendered result element."""

    # Formatting policy -------------------------------------------------

    def _select_label(self, select: str) -> str:
        return self.options.field(select).label or select

    def _format_field(self, name: str, value: Any) -> Any:
        formatter = self.options.field(name).value_formatter
        return formatter(value) if formatter else value

    def _format_group_value(self, group_by_name: str, group_value: Any) -> Any:
        return self._format_field(group_by_name, group_value)

    def _dataset_formatters(self) -> DatasetFormatters:
        return DatasetFormatters(
            select_label_formatter=self._select_label,
            group_value_formatter=self._format_group_value,
        )

    def _interval_formatter(self, metadata: QueryMetadata) -> Callable[[Any], Any] | None:
        """Formatter of interval buckets, or None when results are not bucketed.

        The date pattern and timezone are resolved here so a missing format
        entry or an unknown timezone fails before anything is drawn.
        """
        if metadata.interval is None:
            return None
        intervals = self.options.intervals
        if intervals.value_formatter is not None:
            return intervals.value_formatter
        pattern = resolve_interval_pattern(metadata.interval, intervals.formats)
        timezone = self.options.timezone or metadata.timezone
        get_timezone(timezone)
        return partial(format_date, timezone=timezone, pattern=pattern)
