"""Contract between the chart controller and a charting engine.

The engine is an external collaborator: the controller hands it an
EngineConfig once (``generate``) and a LoadPayload per result set
(``load``). The EngineConfig stays mutable so the controller can update axis,
legend and transition settings between loads, mirroring how the engine's own
internal configuration is driven.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol, TypedDict

from connectviz.config.constants import AxisType, ChartType


class LoadKeys(TypedDict):
    x: str
    value: list[str]


class LoadPayload(TypedDict, total=False):
    """Data handed to ``EngineChart.load``."""

    json: list[dict[str, Any]]
    keys: LoadKeys
    colors: dict[str, str]
    names: dict[str, str]


@dataclass(frozen=True)
class DataPoint:
    """One value of one series, as passed back to color/tooltip callbacks."""

    id: str
    value: Any
    index: int
    x: Any = None


@dataclass(frozen=True)
class SeriesDatum:
    """A whole series (legend entry, stacked group) passed to the color callback."""

    id: str
    values: tuple[DataPoint, ...] = ()


ColorCallback = Callable[[str, Any], str]
TooltipFormatter = Callable[[Any, Any, str, int], Any]


@dataclass
class EngineConfig:
    """Render-time configuration of an engine instance."""

    bindto: Any = None
    height: int | None = None
    width: int | None = None
    padding: dict[str, int] | None = None
    data_type: ChartType = ChartType.BAR
    color: ColorCallback | None = None
    color_pattern: list[str] = field(default_factory=list)
    axis_x_type: AxisType = AxisType.CATEGORY
    axis_x_tick_format: Callable[[Any], Any] | None = None
    axis_x_categories: list[Any] = field(default_factory=list)
    axis_y_tick_format: Callable[[Any], Any] | None = None
    bar_zerobased: bool | None = None
    area_zerobased: bool | None = None
    tooltip_value_format: TooltipFormatter | None = None
    transition_duration: int | None = None
    legend_show: bool = False


class EngineChart(Protocol):
    """An engine instance bound to one scaffold element."""

    config: EngineConfig

    def load(self, payload: LoadPayload) -> None: ...

    def data(self) -> list[Any]: ...

    def flush(self) -> None: ...

    def destroy(self) -> None: ...


class ChartEngine(Protocol):
    """Factory for engine instances."""

    def generate(self, config: EngineConfig) -> EngineChart: ...
