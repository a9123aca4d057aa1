"""Query result and dataset models."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class QueryMetadata(BaseModel):
    """Shape of a query result: selects, groups and optional interval."""

    model_config = ConfigDict(frozen=True)

    selects: tuple[str, ...] = Field(..., min_length=1, description="Metric names, in series order")
    groups: tuple[str, ...] = Field(default=(), description="Group-by dimension names")
    interval: str | None = Field(None, description="Time-bucketing granularity")
    timezone: str | None = Field(None, description="IANA timezone for bucket labels")


class QueryResults(BaseModel):
    """Result of an analytics query, as returned by the query API client."""

    model_config = ConfigDict(frozen=True)

    metadata: QueryMetadata
    results: tuple[dict[str, Any], ...] = Field(default=(), description="Raw result rows")


@dataclass(frozen=True)
class SeriesContext:
    """Formatting/coloring context of one series.

    For a single group ``group_by_name``/``group_value`` are that group's name
    and value; for several groups they are tuples in metadata order.
    """

    select: str
    group_by_name: str | tuple[str, ...] | None = None
    group_value: Any = None
    groups: tuple[tuple[str, Any], ...] = ()

    @classmethod
    def for_groups(cls, select: str, groups: tuple[tuple[str, Any], ...]) -> "SeriesContext":
        if not groups:
            return cls(select=select)
        if len(groups) == 1:
            name, value = groups[0]
            return cls(select=select, group_by_name=name, group_value=value, groups=groups)
        names = tuple(name for name, _ in groups)
        values = tuple(value for _, value in groups)
        return cls(select=select, group_by_name=names, group_value=values, groups=groups)
