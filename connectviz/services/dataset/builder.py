"""Dataset builders -- convert query results into chart rows.

Two variants share one interface:

- StandardDataset: ungrouped results (with or without interval) and grouped
  results without an interval. One row per result row, or per distinct
  bucket for interval data.
- GroupedIntervalDataset: grouped, interval-bucketed results. Rows are pivoted
  by bucket and every row carries the union of all series labels observed
  across the whole result set, with None for absent values.

Series labels are built from raw select names and group values only, so
relabeling through field options never changes a series identity.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from pydantic import ValidationError

from connectviz.config.constants import LABEL_SEPARATOR, X_KEY
from connectviz.errors import LabelCollision, MalformedResults, MissingSelect
from connectviz.services.dataset.models import QueryMetadata, QueryResults, SeriesContext
from connectviz.services.formatting.formatters import parse_bucket

logger = logging.getLogger(__name__)

ChartRow = dict[str, Any]
Record = tuple[datetime | None, dict[str, Any]]
GroupKey = tuple[tuple[str, Any], ...]

_ENVELOPE_KEYS = frozenset({"interval", "results"})

_ESCAPE = "\\"
_TYPE_TAG = "!"


class DatasetVariant(str, Enum):
    """Dataset shapes, decided from result metadata."""

    STANDARD = "standard"
    GROUPED_INTERVAL = "grouped_interval"

    @classmethod
    def for_metadata(cls, metadata: QueryMetadata) -> "DatasetVariant":
        if metadata.interval is not None and metadata.groups:
            return cls.GROUPED_INTERVAL
        return cls.STANDARD


def _default_select_label(select: str) -> str:
    return select


def _default_group_value(group_by_name: str, group_value: Any) -> Any:
    return group_value


@dataclass(frozen=True)
class DatasetFormatters:
    """Label formatters injected by the visualization."""

    select_label_formatter: Callable[[str], Any] = _default_select_label
    group_value_formatter: Callable[[str, Any], Any] = _default_group_value


def _escape(text: str) -> str:
    for char in (_ESCAPE, LABEL_SEPARATOR, _TYPE_TAG):
        text = text.replace(char, _ESCAPE + char)
    return text


def _label_part(value: Any) -> str:
    # Strings are escaped; anything else is tagged with its type, so 1 and "1"
    # (or None and "None") stay distinct.
    if isinstance(value, str):
        return _escape(value)
    return _TYPE_TAG + _escape(f"{type(value).__name__}:{value}")


def series_label(select: str, groups: GroupKey) -> str:
    """Stable series key: the select, followed by its group values.

    An ungrouped label is the select name. Grouped labels keep plain names
    readable (``sellPriceTotal.cash``); separators inside names or values are
    escaped and non-string values are type-tagged, so every
    (select, group values) pair maps to its own label.
    """
    if not groups:
        return select
    parts = [_escape(select), *(_label_part(value) for _, value in groups)]
    return LABEL_SEPARATOR.join(parts)


def _combo_id(groups: GroupKey) -> tuple[str, ...]:
    """Identity of a group combination, consistent with its series labels."""
    return tuple(_label_part(value) for _, value in groups)


def _point_label(point: Any) -> str | None:
    if isinstance(point, str):
        return point
    if isinstance(point, Mapping):
        return point.get("id")
    return getattr(point, "id", None)


class ChartDataset(ABC):
    """Rows, series labels and the label -> context index of one result set."""

    variant: ClassVar[DatasetVariant]

    def __init__(self, results: QueryResults, formatters: DatasetFormatters | None = None):
        self._metadata = results.metadata
        self._formatters = formatters or DatasetFormatters()
        self._rows: list[ChartRow] = []
        self._labels: list[str] = []
        self._contexts: dict[str, SeriesContext] = {}
        self._captions: dict[str, str] = {}
        self._records: list[Record] = []
        self._build(results.results)
        if self._metadata.interval is not None:
            self._records.sort(key=lambda record: record[0])

    @abstractmethod
    def _build(self, results: Sequence[Mapping[str, Any]]) -> None:
        """Populate rows and labels."""

    # Public API ------------------------------------------------------

    @property
    def metadata(self) -> QueryMetadata:
        return self._metadata

    def get_data(self) -> list[ChartRow]:
        return [dict(row) for row in self._rows]

    def get_labels(self) -> list[str]:
        return list(self._labels)

    def get_captions(self) -> dict[str, str]:
        return dict(self._captions)

    def get_caption(self, label: str) -> str:
        return self._captions.get(label, label)

    def get_select(self, label: str) -> str | None:
        context = self._contexts.get(label)
        return context.select if context else None

    def get_context(self, point: Any) -> SeriesContext | None:
        """Context of a label, an engine data point, or a mapping with an ``id``."""
        label = _point_label(point)
        if label is None:
            return None
        return self._contexts.get(label)

    def get_records(self) -> list[Record]:
        """Validated result rows, each paired with its bucket (None without interval).

        Interval records are in chronological order; a bucket with no rows
        yields one empty record.
        """
        return [(bucket, dict(row)) for bucket, row in self._records]

    # Shared helpers ----------------------------------------------------

    def _check_row(self, row: Mapping[str, Any], allowed: frozenset[str] = frozenset()) -> None:
        if not isinstance(row, Mapping):
            raise MalformedResults(f"Result rows must be mappings, got {type(row).__name__}")
        declared = set(self._metadata.selects) | set(self._metadata.groups) | allowed
        for key in row:
            if key not in declared:
                raise MissingSelect(
                    f"Result row references '{key}', which is not a declared select or group"
                )

    def _group_key(self, row: Mapping[str, Any]) -> GroupKey:
        return tuple((name, row.get(name)) for name in self._metadata.groups)

    def _bucket(self, row: Mapping[str, Any]) -> datetime:
        interval = row.get("interval")
        if interval is None:
            raise MalformedResults("Interval results must carry an 'interval' bucket")
        start = interval.get("start") if isinstance(interval, Mapping) else interval
        try:
            return parse_bucket(start)
        except (TypeError, ValueError) as e:
            raise MalformedResults(f"Invalid interval bucket {start!r}") from e

    def _inner_rows(self, row: Mapping[str, Any]) -> list[Mapping[str, Any]]:
        inner = row.get("results")
        if inner is None:
            return [{key: value for key, value in row.items() if key not in _ENVELOPE_KEYS}]
        if not isinstance(inner, (list, tuple)):
            raise MalformedResults("Interval 'results' must be a list of rows")
        for item in inner:
            self._check_row(item)
        return list(inner)

    def _record(self, bucket: datetime | None, rows: Sequence[Mapping[str, Any]]) -> None:
        self._records.extend((bucket, dict(row)) for row in rows or [{}])

    def _register_labels(self, combos: Sequence[GroupKey]) -> None:
        """Register one label per select per group combination, select-major."""
        for select in self._metadata.selects:
            for combo in combos:
                label = self._register(select, combo)
                if label not in self._labels:
                    self._labels.append(label)

    def _register(self, select: str, groups: GroupKey) -> str:
        label = series_label(select, groups)
        context = SeriesContext.for_groups(select, groups)
        existing = self._contexts.get(label)
        if existing is None:
            self._contexts[label] = context
            self._captions[label] = self._caption(context)
        elif existing != context:
            raise LabelCollision(
                f"Series label '{label}' produced by both {existing} and {context}"
            )
        return label

    def _group_caption(self, groups: GroupKey) -> str:
        formatter = self._formatters.group_value_formatter
        return " / ".join(str(formatter(name, value)) for name, value in groups)

    def _caption(self, context: SeriesContext) -> str:
        select_caption = str(self._formatters.select_label_formatter(context.select))
        if not context.groups:
            return select_caption
        group_caption = self._group_caption(context.groups)
        if len(self._metadata.selects) == 1:
            return group_caption
        return f"{select_caption} - {group_caption}"


class StandardDataset(ChartDataset):
    """One row per result row (or per distinct bucket for interval results)."""

    variant = DatasetVariant.STANDARD

    def _build(self, results: Sequence[Mapping[str, Any]]) -> None:
        if self._metadata.interval is not None:
            self._build_interval(results)
        else:
            self._build_categories(results)

    def _build_interval(self, results: Sequence[Mapping[str, Any]]) -> None:
        selects = self._metadata.selects
        buckets: dict[datetime, ChartRow] = {}
        for row in results:
            self._check_row(row, _ENVELOPE_KEYS)
            bucket = self._bucket(row)
            inner = self._inner_rows(row)
            self._record(bucket, inner)
            values = inner[0] if inner else {}
            target = buckets.setdefault(bucket, {X_KEY: bucket})
            for select in selects:
                if select in values or select not in target:
                    target[select] = values.get(select)

        self._register_labels([()])
        self._rows = [buckets[bucket] for bucket in sorted(buckets)]

    def _build_categories(self, results: Sequence[Mapping[str, Any]]) -> None:
        combos: dict[tuple[str, ...], GroupKey] = {}
        for row in results:
            self._check_row(row)
            combo = self._group_key(row)
            self._record(None, [row])
            combos.setdefault(_combo_id(combo), combo)
        self._register_labels(list(combos.values()) if self._metadata.groups else [()])

        for row in results:
            combo = self._group_key(row)
            chart_row: ChartRow = {X_KEY: self._group_caption(combo) if combo else ""}
            for select in self._metadata.selects:
                chart_row[series_label(select, combo)] = row.get(select)
            self._rows.append(chart_row)


class GroupedIntervalDataset(ChartDataset):
    """Bucket-pivoted rows over the union of all (select x group value) series."""

    variant = DatasetVariant.GROUPED_INTERVAL

    def _build(self, results: Sequence[Mapping[str, Any]]) -> None:
        combos: dict[tuple[str, ...], GroupKey] = {}
        buckets: dict[datetime, dict[str, Any]] = {}
        for row in results:
            self._check_row(row, _ENVELOPE_KEYS)
            bucket = self._bucket(row)
            inner_rows = self._inner_rows(row)
            self._record(bucket, inner_rows)
            cells = buckets.setdefault(bucket, {})
            for inner in inner_rows:
                combo = self._group_key(inner)
                combos.setdefault(_combo_id(combo), combo)
                for select in self._metadata.selects:
                    cells[series_label(select, combo)] = inner.get(select)

        # Label set is final before any row is emitted.
        self._register_labels(list(combos.values()))
        for bucket in sorted(buckets):
            cells = buckets[bucket]
            chart_row: ChartRow = {X_KEY: bucket}
            chart_row.update({label: cells.get(label) for label in self._labels})
            self._rows.append(chart_row)


_VARIANTS: dict[DatasetVariant, type[ChartDataset]] = {
    DatasetVariant.STANDARD: StandardDataset,
    DatasetVariant.GROUPED_INTERVAL: GroupedIntervalDataset,
}


def as_query_results(results: QueryResults | Mapping[str, Any]) -> QueryResults:
    """Validate a raw result mapping into QueryResults."""
    if isinstance(results, QueryResults):
        return results
    try:
        return QueryResults.model_validate(results)
    except ValidationError as e:
        raise MalformedResults(f"Invalid query results: {e}") from e


def build_dataset(
    results: QueryResults | Mapping[str, Any],
    formatters: DatasetFormatters | None = None,
) -> ChartDataset:
    """Build the dataset variant matching the shape of ``results``."""
    results = as_query_results(results)
    variant = DatasetVariant.for_metadata(results.metadata)
    dataset = _VARIANTS[variant](results, formatters)
    logger.debug(
        "Built %s dataset: %d rows, %d series",
        variant.value,
        len(dataset.get_data()),
        len(dataset.get_labels()),
    )
    return dataset
