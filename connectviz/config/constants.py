"""
Constants, enums, and static values.
"""

from enum import Enum

# Row key holding the bucket/category value of a chart row.
X_KEY = "_x"

# Joins select and group values into a series label.
LABEL_SEPARATOR = "."

DEFAULT_COLOR_PALETTE: tuple[str, ...] = (
    "#1f77b4",
    "#ff7f0e",
    "#2ca02c",
    "#d62728",
    "#9467bd",
    "#8c564b",
    "#e377c2",
    "#7f7f7f",
    "#bcbd22",
    "#17becf",
)

DEFAULT_INTERVAL_FORMATS: dict[str, str] = {
    "minute": "HH:mm",
    "hour": "HH:mm",
    "day": "DD MMM",
    "week": "DD MMM",
    "month": "MMM YYYY",
    "quarter": "MMM YYYY",
    "year": "YYYY",
}


class ChartType(str, Enum):
    """Chart renderers understood by the engine."""

    BAR = "bar"
    LINE = "line"
    SPLINE = "spline"
    AREA = "area"
    AREA_SPLINE = "area-spline"
    PIE = "pie"


class AxisType(str, Enum):
    """X-axis types."""

    CATEGORY = "category"
    TIMESERIES = "timeseries"


class ChartState(str, Enum):
    """Lifecycle of a visualization."""

    UNINITIALIZED = "uninitialized"
    RENDERED = "rendered"
    LOADED = "loaded"
    DESTROYED = "destroyed"


class LoaderState(str, Enum):
    """States of the loading indicator."""

    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


class RenderStep(str, Enum):
    """Timed steps of a display cycle."""

    FETCH = "fetch"
    BUILD_DATASET = "build_dataset"
    LOAD = "load"


class CssClass(str, Enum):
    """Class names applied to the scaffold elements."""

    VIZ = "connect-viz"
    CHART = "connect-chart"
    TABLE = "connect-table"
    RESULT = "connect-viz-result"
    TITLE = "connect-viz-title"
    LOADER = "connect-viz-loader"
    LOADING = "connect-viz-loading"
    ERROR = "connect-viz-error"
    ERROR_MESSAGE = "connect-viz-error-message"
