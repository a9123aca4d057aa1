"""Query results to chart rows."""

from connectviz.services.dataset.builder import (
    ChartDataset,
    DatasetFormatters,
    DatasetVariant,
    GroupedIntervalDataset,
    StandardDataset,
    build_dataset,
)
from connectviz.services.dataset.models import QueryMetadata, QueryResults, SeriesContext

__all__ = [
    "ChartDataset",
    "DatasetFormatters",
    "DatasetVariant",
    "GroupedIntervalDataset",
    "QueryMetadata",
    "QueryResults",
    "SeriesContext",
    "StandardDataset",
    "build_dataset",
]
