"""Chart options: typed schema, documented defaults and the bounded merge.

User options are plain mappings (camelCase, as in ``{"chart": {"yAxis":
{"valueFormatter": f}}}``; snake_case is accepted for recognized keys). They
are merged over the defaults along recognized branches only, then validated
into an immutable ChartOptions owned by one visualization.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from connectviz.config.constants import DEFAULT_INTERVAL_FORMATS, ChartType
from connectviz.config.settings import Settings, get_settings
from connectviz.errors import InvalidOptions
from connectviz.services.formatting.formatters import identity

logger = logging.getLogger(__name__)

ValueFormatter = Callable[[Any], Any]
ColorModifier = Callable[[str, Any], Any]


def keep_color(current_color: str, context: Any) -> str:
    """Default color modifier."""
    return current_color


class _OptionsModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class FieldOptions(_OptionsModel):
    """Display options of one select or group."""

    label: str | None = Field(None, description="Legend/column label")
    value_formatter: ValueFormatter | None = Field(None, alias="valueFormatter")


class YAxisOptions(_OptionsModel):
    """Y-axis options."""

    value_formatter: ValueFormatter = Field(identity, alias="valueFormatter")
    start_at_zero: bool | None = Field(None, alias="startAtZero")


class ChartSection(_OptionsModel):
    """Engine-facing chart options."""

    type: ChartType = ChartType.BAR
    y_axis: YAxisOptions = Field(default_factory=YAxisOptions, alias="yAxis")
    color_modifier: ColorModifier = Field(keep_color, alias="colorModifier")
    colors: list[str] | None = None
    show_legend: bool | None = Field(None, alias="showLegend")
    height: int | None = None
    width: int | None = None
    padding: dict[str, int] | None = None


class IntervalOptions(_OptionsModel):
    """Interval (x-axis bucket) formatting options."""

    formats: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_INTERVAL_FORMATS))
    value_formatter: ValueFormatter | None = Field(None, alias="valueFormatter")
    label: str | None = None


_DEFAULT_FIELD = FieldOptions()


class ChartOptions(BaseModel):
    """Normalized options of one visualization. Unknown top-level keys are kept but unused."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    title: str | None = None
    chart: ChartSection = Field(default_factory=ChartSection)
    fields: dict[str, FieldOptions] = Field(default_factory=dict)
    intervals: IntervalOptions = Field(default_factory=IntervalOptions)
    timezone: str | None = None
    transition_on_reload: bool = Field(True, alias="transitionOnReload")

    def field(self, name: str) -> FieldOptions:
        """Options of a select/group name, empty options when not configured."""
        return self.fields.get(name) or _DEFAULT_FIELD


# Recognized option tree. A dict node merges key-by-key, None is a leaf that is
# replaced wholesale, "*" matches any key.
RECOGNIZED_OPTIONS: dict[str, Any] = {
    "title": None,
    "timezone": None,
    "transitionOnReload": None,
    "chart": {
        "type": None,
        "yAxis": {"valueFormatter": None, "startAtZero": None},
        "colorModifier": None,
        "colors": None,
        "showLegend": None,
        "height": None,
        "width": None,
        "padding": None,
    },
    "fields": {"*": {"label": None, "valueFormatter": None}},
    "intervals": {
        "formats": {"*": None},
        "valueFormatter": None,
        "label": None,
    },
}


def default_options(settings: Settings | None = None) -> dict[str, Any]:
    """The documented default option table."""
    settings = settings or get_settings()
    return {
        "transitionOnReload": True,
        "fields": {},
        "intervals": {
            "formats": dict(DEFAULT_INTERVAL_FORMATS),
            "label": settings.default_interval_label,
        },
        "chart": {
            "type": ChartType.BAR.value,
            "yAxis": {"valueFormatter": identity},
            "colorModifier": keep_color,
        },
    }


# Alternate names of option keys, as used by table configurations.
_KEY_ALIASES = {"intervalOptions": "intervals"}


def _normalize_key(key: str, node: Mapping[str, Any]) -> str:
    alias = _KEY_ALIASES.get(key)
    if alias in node:
        return alias
    if "_" in key:
        camel = to_camel(key)
        if camel in node:
            return camel
    return key


def merge_options(
    base: Mapping[str, Any],
    overrides: Mapping[str, Any] | None,
    schema: Mapping[str, Any] = RECOGNIZED_OPTIONS,
) -> dict[str, Any]:
    """Merge ``overrides`` over ``base`` along the recognized option tree.

    Mappings merge key-by-key only where the schema declares a branch;
    lists, callables and unrecognized values replace what was there.
    """
    merged = dict(base)
    if not overrides:
        return merged
    for key, value in overrides.items():
        key = _normalize_key(key, schema)
        branch = schema.get(key, schema.get("*"))
        if isinstance(branch, dict) and isinstance(value, Mapping):
            current = merged.get(key)
            merged[key] = merge_options(
                current if isinstance(current, Mapping) else {}, value, branch
            )
        else:
            merged[key] = value
    return merged


def resolve_options(
    user_options: ChartOptions | Mapping[str, Any] | None = None,
    *,
    settings: Settings | None = None,
) -> ChartOptions:
    """Build the ChartOptions of one visualization.

    Raises:
        InvalidOptions: an option value fails validation (e.g. unsupported
            chart type or a non-callable formatter).
    """
    if isinstance(user_options, ChartOptions):
        return user_options
    merged = merge_options(default_options(settings), user_options)
    try:
        return ChartOptions.model_validate(merged)
    except ValidationError as e:
        logger.error("Invalid chart options: %s", e)
        raise InvalidOptions(str(e)) from e
