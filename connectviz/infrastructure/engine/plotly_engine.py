"""Plotly implementation of the chart engine contract."""

import logging
from typing import Any

import plotly.graph_objects as go

from connectviz.config.constants import AxisType, ChartType
from connectviz.services.chart.engine import (
    DataPoint,
    EngineConfig,
    LoadPayload,
    SeriesDatum,
)
from connectviz.services.chart.palette import color_for_series

logger = logging.getLogger(__name__)

_SCATTER_STYLES: dict[ChartType, dict[str, Any]] = {
    ChartType.LINE: {"mode": "lines+markers"},
    ChartType.SPLINE: {"mode": "lines+markers", "line_shape": "spline"},
    ChartType.AREA: {"mode": "lines", "fill": "tozeroy"},
    ChartType.AREA_SPLINE: {"mode": "lines", "fill": "tozeroy", "line_shape": "spline"},
}

_AREA_TYPES = frozenset({ChartType.AREA, ChartType.AREA_SPLINE})

_Y_TICK_COUNT = 5


def _apply_styling(fig: go.Figure, config: EngineConfig) -> None:
    """Apply shared styling and the size/legend/transition settings of ``config``."""
    padding = config.padding or {}
    fig.update_layout(
        template="plotly_white",
        hovermode="x unified",
        font={"family": "Inter, Arial, sans-serif", "size": 14},
        margin={
            "l": padding.get("left", 60),
            "r": padding.get("right", 30),
            "t": padding.get("top", 30),
            "b": padding.get("bottom", 50),
        },
        height=config.height,
        width=config.width,
        showlegend=config.legend_show,
        transition={"duration": config.transition_duration or 0},
    )
    fig.update_xaxes(showgrid=True, gridcolor="rgba(0,0,0,0.05)", showspikes=True, spikemode="across")
    fig.update_yaxes(showgrid=True, gridcolor="rgba(0,0,0,0.05)", zeroline=False)


def _numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _y_ticks(values: list[float], zero_based: bool) -> list[float]:
    low, high = min(values), max(values)
    if zero_based:
        low, high = min(low, 0), max(high, 0)
    if low == high:
        return [low]
    step = (high - low) / (_Y_TICK_COUNT - 1)
    return [low + step * i for i in range(_Y_TICK_COUNT)]


class PlotlyChart:
    """An engine instance rendering into a plotly Figure."""

    def __init__(self, config: EngineConfig):
        self.config = config
        self.figure = go.Figure()
        self._series: list[str] = []
        self._destroyed = False
        _apply_styling(self.figure, config)

    def load(self, payload: LoadPayload) -> None:
        if self._destroyed:
            raise RuntimeError("Cannot load data into a destroyed chart")
        rows = payload.get("json", [])
        keys = payload.get("keys") or {"x": "x", "value": []}
        labels = list(keys["value"])
        colors = payload.get("colors") or {}
        names = payload.get("names") or {}
        xs = [row.get(keys["x"]) for row in rows]

        if self.config.data_type is ChartType.PIE:
            traces = [self._pie_trace(rows, labels, colors, names)] if labels else []
        else:
            traces = [
                self._series_trace(label, index, rows, xs, colors, names)
                for index, label in enumerate(labels)
            ]

        self.figure = go.Figure(data=traces)
        _apply_styling(self.figure, self.config)
        self._apply_axes(xs, rows, labels)
        self._series = labels
        logger.debug("Loaded %d rows into %d plotly traces", len(rows), len(traces))

    def data(self) -> list[str]:
        return list(self._series)

    def flush(self) -> None:
        _apply_styling(self.figure, self.config)

    def destroy(self) -> None:
        self._destroyed = True
        self._series = []
        self.figure = go.Figure()

    def to_html(self) -> str:
        return self.figure.to_html(full_html=False, include_plotlyjs="cdn")

    # Traces ------------------------------------------------------------

    def _base_color(self, label: str, index: int, colors: dict[str, str]) -> str | None:
        if label in colors:
            return colors[label]
        pattern = self.config.color_pattern
        return color_for_series(index, pattern) if pattern else None

    def _color(self, base: str | None, datum: Any) -> str | None:
        if self.config.color is None or base is None:
            return base
        return self.config.color(base, datum)

    def _tooltip(self, point: DataPoint) -> str:
        formatter = self.config.tooltip_value_format
        value = formatter(point.value, None, point.id, point.index) if formatter else point.value
        return "" if value is None else str(value)

    def _series_trace(
        self,
        label: str,
        index: int,
        rows: list[dict[str, Any]],
        xs: list[Any],
        colors: dict[str, str],
        names: dict[str, str],
    ) -> go.Bar | go.Scatter:
        ys = [row.get(label) for row in rows]
        points = tuple(
            DataPoint(id=label, value=y, index=i, x=x) for i, (x, y) in enumerate(zip(xs, ys))
        )
        base = self._base_color(label, index, colors)
        common: dict[str, Any] = {
            "name": names.get(label, label),
            "x": xs,
            "y": ys,
            "customdata": [self._tooltip(point) for point in points],
            "hovertemplate": "%{customdata}<extra>%{fullData.name}</extra>",
        }
        point_colors = [self._color(base, point) for point in points]
        if self.config.data_type is ChartType.BAR:
            return go.Bar(marker_color=point_colors, **common)
        series_color = self._color(base, SeriesDatum(id=label, values=points))
        return go.Scatter(
            line_color=series_color,
            marker_color=point_colors,
            **_SCATTER_STYLES[self.config.data_type],
            **common,
        )

    def _pie_trace(
        self,
        rows: list[dict[str, Any]],
        labels: list[str],
        colors: dict[str, str],
        names: dict[str, str],
    ) -> go.Pie:
        values = [
            sum(row.get(label) for row in rows if _numeric(row.get(label))) for label in labels
        ]
        slice_colors = [
            self._color(self._base_color(label, index, colors), SeriesDatum(id=label))
            for index, label in enumerate(labels)
        ]
        return go.Pie(
            labels=[names.get(label, label) for label in labels],
            values=values,
            marker_colors=slice_colors,
            sort=False,
        )

    # Axes --------------------------------------------------------------

    def _apply_axes(self, xs: list[Any], rows: list[dict[str, Any]], labels: list[str]) -> None:
        config = self.config
        if config.data_type is ChartType.PIE:
            return

        if config.axis_x_type is AxisType.TIMESERIES:
            tick_format = config.axis_x_tick_format
            ticktext = [str(tick_format(x)) if tick_format else str(x) for x in xs]
            self.figure.update_xaxes(type="date", tickmode="array", tickvals=xs, ticktext=ticktext)
        else:
            categories = list(config.axis_x_categories) or xs
            self.figure.update_xaxes(
                type="category", categoryorder="array", categoryarray=categories
            )

        zero_based = bool(
            (config.data_type is ChartType.BAR and config.bar_zerobased)
            or (config.data_type in _AREA_TYPES and config.area_zerobased)
        )
        if zero_based:
            self.figure.update_yaxes(rangemode="tozero")

        values = [row.get(label) for row in rows for label in labels]
        values = [value for value in values if _numeric(value)]
        if config.axis_y_tick_format is not None and values:
            ticks = _y_ticks(values, zero_based)
            self.figure.update_yaxes(
                tickmode="array",
                tickvals=ticks,
                ticktext=[str(config.axis_y_tick_format(tick)) for tick in ticks],
            )


class PlotlyEngine:
    """ChartEngine producing PlotlyChart instances."""

    def generate(self, config: EngineConfig) -> PlotlyChart:
        chart = PlotlyChart(config)
        if config.bindto is not None and hasattr(config.bindto, "content"):
            config.bindto.content = chart
        return chart
