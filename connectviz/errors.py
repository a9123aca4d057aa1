"""
Exception types raised while turning query results into charts and tables.

Hierarchy:
- VizError: base for every error raised by connectviz.
  - MalformedMetadata: interval/timezone metadata that cannot be formatted.
  - DatasetError: data-integrity failures while building a dataset.
    - MissingSelect, LabelCollision, MalformedResults.
  - FetchFailure: the awaited query-result fetch failed.
  - ChartDestroyedError: a destroyed visualization was asked to display data.
  - InvalidOptions: user options failed validation.

Notes:
    Dataset and metadata errors abort a single load; the visualization that
    raised them stays usable. ChartDestroyedError and InvalidOptions are
    programming errors and are never recovered.
"""

from __future__ import annotations

__all__ = [
    "VizError",
    "MalformedMetadata",
    "DatasetError",
    "MissingSelect",
    "LabelCollision",
    "MalformedResults",
    "FetchFailure",
    "ChartDestroyedError",
    "InvalidOptions",
]


class VizError(Exception):
    """Base class for connectviz errors."""


class MalformedMetadata(VizError, ValueError):
    """Interval granularity without a format entry, or an unknown timezone."""


class DatasetError(VizError, ValueError):
    """A query result could not be converted into a dataset."""


class MissingSelect(DatasetError):
    """A result row references a select that metadata does not declare."""


class LabelCollision(DatasetError):
    """Two distinct (select, group value) pairs produced the same series label."""


class MalformedResults(DatasetError):
    """Interval results without a usable bucket value."""


class FetchFailure(VizError):
    """The query-result awaitable raised.

    The original exception is kept as ``__cause__``.
    """


class ChartDestroyedError(VizError, RuntimeError):
    """display_data() called on a destroyed visualization."""


class InvalidOptions(VizError, ValueError):
    """User options rejected by the options schema (e.g. unsupported chart type)."""
