"""Chart visualization: drives a chart engine from query results."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from connectviz.config.constants import X_KEY, AxisType, ChartState, CssClass, RenderStep
from connectviz.config.options import ChartOptions
from connectviz.config.settings import Settings
from connectviz.infrastructure.dom.dom import Element
from connectviz.infrastructure.engine.plotly_engine import PlotlyEngine
from connectviz.services.base import BaseVisualization
from connectviz.services.chart.engine import ChartEngine, EngineChart, EngineConfig, LoadPayload
from connectviz.services.chart.palette import get_swatch
from connectviz.services.dataset.builder import ChartDataset, build_dataset
from connectviz.services.dataset.models import QueryMetadata, QueryResults
from connectviz.services.formatting.formatters import identity
from connectviz.utils.timing import timed_step

logger = logging.getLogger(__name__)


def default_legend_visibility(metadata: QueryMetadata) -> bool:
    """Legend is shown for several selects, or for grouped interval results."""
    has_multiple_selects = len(metadata.selects) > 1
    is_grouped_interval = bool(metadata.groups) and metadata.interval is not None
    return has_multiple_selects or is_grouped_interval


def _empty_payload() -> LoadPayload:
    return {"json": [], "keys": {"x": X_KEY, "value": []}, "colors": {}, "names": {}}


class Chart(BaseVisualization):
    """A chart bound to one target element.

    Usage:
        chart = Chart("#sales", {"chart": {"type": "line"}}, root=page)
        await chart.display_data(fetch_results())
    """

    css_class = CssClass.CHART

    def __init__(
        self,
        target: "str | Element",
        options: ChartOptions | Mapping[str, Any] | None = None,
        *,
        engine: ChartEngine | None = None,
        settings: Settings | None = None,
        root: Element | None = None,
    ):
        super().__init__(target, options, settings=settings, root=root)
        self._engine = engine or PlotlyEngine()
        self._engine_chart: EngineChart | None = None
        self._current_dataset: ChartDataset | None = None

    @property
    def engine_chart(self) -> EngineChart | None:
        return self._engine_chart

    @property
    def current_dataset(self) -> ChartDataset | None:
        return self._current_dataset

    def recalculate_size(self) -> None:
        """Ask the engine to re-measure and redraw."""
        if self._engine_chart is not None and not self.destroyed:
            self._engine_chart.flush()

    def clear(self) -> None:
        """Unload the data but keep the scaffold."""
        if self._engine_chart is None or self.destroyed:
            return
        self._engine_chart.load(_empty_payload())
        self._current_dataset = None
        self.state = ChartState.RENDERED

    # Rendering ---------------------------------------------------------

    def _render_result(self, result_element: Element) -> EngineChart:
        chart_options = self.options.chart
        y_axis = chart_options.y_axis
        config = EngineConfig(
            bindto=result_element,
            height=chart_options.height,
            width=chart_options.width,
            padding=chart_options.padding,
            data_type=chart_options.type,
            color=self._modify_color,
            color_pattern=get_swatch(
                chart_options.colors, default=self.settings.chart_color_palette
            ),
            axis_y_tick_format=None if y_axis.value_formatter is identity else y_axis.value_formatter,
            bar_zerobased=y_axis.start_at_zero,
            area_zerobased=y_axis.start_at_zero,
            tooltip_value_format=self._tooltip_value,
        )
        self._engine_chart = self._engine.generate(config)
        return self._engine_chart

    def _load(self, results: QueryResults, re_render: bool) -> None:
        """Build a dataset from ``results`` and load it into the engine.

        The dataset and axis formatter are built before the engine config is
        touched, so a failing load leaves the previous data in place.
        """
        engine_chart = self._engine_chart
        metadata = results.metadata

        with timed_step(RenderStep.BUILD_DATASET, self._log) as step:
            dataset = build_dataset(results, self._dataset_formatters())
            step.record(variant=dataset.variant.value, series=len(dataset.get_labels()))
        x_format = self._interval_formatter(metadata)

        rows = dataset.get_data()
        labels = dataset.get_labels()
        show_legend = self.options.chart.show_legend
        config = engine_chart.config

        with timed_step(RenderStep.LOAD, self._log) as step:
            config.transition_duration = self._transition_duration(re_render)
            config.legend_show = (
                default_legend_visibility(metadata) if show_legend is None else show_legend
            )
            if x_format is not None:
                config.axis_x_type = AxisType.TIMESERIES
                config.axis_x_tick_format = x_format
                config.axis_x_categories = []
            else:
                config.axis_x_type = AxisType.CATEGORY
                config.axis_x_tick_format = None
                config.axis_x_categories = [row[X_KEY] for row in rows]

            self._current_dataset = dataset
            swatch = get_swatch(config.color_pattern, len(labels))
            engine_chart.load(
                {
                    "json": rows,
                    "keys": {"x": X_KEY, "value": labels},
                    "colors": dict(zip(labels, swatch)),
                    "names": dataset.get_captions(),
                }
            )
            step.record(rows=len(rows), series=len(labels), legend=config.legend_show)

        self.state = ChartState.LOADED

    def _transition_duration(self, re_render: bool) -> int | None:
        has_data = bool(self._engine_chart.data())
        use_transition = has_data and (self.options.transition_on_reload or not re_render)
        return self.settings.transition_duration_ms if use_transition else None

    # Engine callbacks --------------------------------------------------

    def _format_value_for_label(self, label: str, value: Any) -> Any:
        select = self._current_dataset.get_select(label) if self._current_dataset else None
        if select is None:
            return value
        return self._format_field(select, value)

    def _tooltip_value(self, value: Any, ratio: Any, label: str, index: int) -> Any:
        return self._format_value_for_label(label, value)

    def _modify_color(self, current_color: str, datum: Any) -> str:
        """Engine color callback: apply the user's color modifier.

        A series datum carrying ``values`` is described by the list of its
        points' contexts, any other datum by its own context.
        """
        dataset = self._current_dataset
        if dataset is None:
            return current_color
        values = datum.get("values") if isinstance(datum, Mapping) else getattr(datum, "values", None)
        if isinstance(values, Sequence) and not isinstance(values, str) and values:
            contexts: Any = [c for c in (dataset.get_context(v) for v in values) if c is not None]
        else:
            contexts = dataset.get_context(datum)
        if not contexts:
            return current_color
        modified = self.options.chart.color_modifier(current_color, contexts)
        return current_color if modified is None else modified
