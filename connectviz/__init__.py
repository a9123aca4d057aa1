"""connectviz: charts and tables for analytics query results."""

from connectviz.config.options import ChartOptions, resolve_options
from connectviz.config.settings import Settings, get_settings
from connectviz.errors import (
    ChartDestroyedError,
    DatasetError,
    FetchFailure,
    InvalidOptions,
    LabelCollision,
    MalformedMetadata,
    MalformedResults,
    MissingSelect,
    VizError,
)
from connectviz.infrastructure.dom.dom import Element
from connectviz.infrastructure.logging.logger import setup_logging
from connectviz.services.chart.controller import Chart
from connectviz.services.dataset.builder import build_dataset
from connectviz.services.dataset.models import QueryMetadata, QueryResults
from connectviz.services.formatting.formatters import format_date, value_formatter
from connectviz.services.table.table import Table

__version__ = "0.1.0"

__all__ = [
    "Chart",
    "ChartDestroyedError",
    "ChartOptions",
    "DatasetError",
    "Element",
    "FetchFailure",
    "InvalidOptions",
    "LabelCollision",
    "MalformedMetadata",
    "MalformedResults",
    "MissingSelect",
    "QueryMetadata",
    "QueryResults",
    "Settings",
    "Table",
    "VizError",
    "build_dataset",
    "format_date",
    "get_settings",
    "resolve_options",
    "setup_logging",
    "value_formatter",
]
