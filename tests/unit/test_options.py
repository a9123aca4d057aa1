"""Tests for chart options resolution."""

import pytest
from pydantic import ValidationError

from connectviz.config.constants import DEFAULT_INTERVAL_FORMATS, ChartType
from connectviz.config.options import (
    ChartOptions,
    keep_color,
    merge_options,
    resolve_options,
)
from connectviz.errors import InvalidOptions
from connectviz.services.formatting.formatters import identity, value_formatter


class TestDefaults:
    def test_documented_defaults(self, settings):
        options = resolve_options(None, settings=settings)
        assert options.chart.type is ChartType.BAR
        assert options.chart.y_axis.value_formatter is identity
        assert options.chart.color_modifier is keep_color
        assert options.transition_on_reload is True
        assert options.fields == {}
        assert options.intervals.formats == DEFAULT_INTERVAL_FORMATS
        assert options.intervals.label == settings.default_interval_label
        assert options.title is None

    def test_options_instance_is_returned_as_is(self, settings):
        options = resolve_options({"title": "Sales"}, settings=settings)
        assert resolve_options(options, settings=settings) is options

    def test_options_are_immutable(self, settings):
        options = resolve_options(None, settings=settings)
        with pytest.raises(ValidationError):
            options.title = "changed"


class TestMerge:
    def test_interval_formats_merge_key_by_key(self, settings):
        options = resolve_options({"intervals": {"formats": {"15min": "HH:mm"}}}, settings=settings)
        assert options.intervals.formats["15min"] == "HH:mm"
        assert options.intervals.formats["day"] == DEFAULT_INTERVAL_FORMATS["day"]

    def test_partial_y_axis_keeps_default_formatter(self, settings):
        options = resolve_options({"chart": {"yAxis": {"startAtZero": True}}}, settings=settings)
        assert options.chart.y_axis.start_at_zero is True
        assert options.chart.y_axis.value_formatter is identity
        assert options.chart.type is ChartType.BAR

    def test_snake_case_keys(self, settings):
        fmt = value_formatter("$,.2f")
        options = resolve_options(
            {
                "transition_on_reload": False,
                "chart": {"y_axis": {"start_at_zero": True, "value_formatter": fmt}},
            },
            settings=settings,
        )
        assert options.transition_on_reload is False
        assert options.chart.y_axis.start_at_zero is True
        assert options.chart.y_axis.value_formatter is fmt

    def test_lists_replace_wholesale(self):
        merged = merge_options(
            {"chart": {"colors": ["#aaaaaa", "#bbbbbb", "#cccccc"]}},
            {"chart": {"colors": ["#000000"]}},
        )
        assert merged["chart"]["colors"] == ["#000000"]

    def test_field_options_merge(self):
        fmt = value_formatter(",.0f")
        merged = merge_options(
            {"fields": {"sellPriceTotal": {"label": "Sales"}}},
            {"fields": {"sellPriceTotal": {"valueFormatter": fmt}}},
        )
        assert merged["fields"]["sellPriceTotal"] == {"label": "Sales", "valueFormatter": fmt}

    def test_interval_options_alias(self, settings):
        options = resolve_options({"intervalOptions": {"label": "Time"}}, settings=settings)
        assert options.intervals.label == "Time"
        assert options.intervals.formats == DEFAULT_INTERVAL_FORMATS
        assert "intervalOptions" not in options.model_extra

    def test_unrecognized_mapping_replaces(self):
        merged = merge_options({"legacy": {"a": 1}}, {"legacy": {"b": 2}})
        assert merged["legacy"] == {"b": 2}

    def test_base_is_not_mutated(self):
        base = {"intervals": {"formats": {"day": "DD"}}}
        merge_options(base, {"intervals": {"formats": {"hour": "HH"}}})
        assert base == {"intervals": {"formats": {"day": "DD"}}}

    def test_unknown_top_level_key_is_kept(self, settings):
        options = resolve_options({"legacy": {"x": 1}}, settings=settings)
        assert options.model_extra["legacy"] == {"x": 1}


class TestFields:
    def test_field_lookup(self, settings):
        options = resolve_options(
            {"fields": {"sellPriceTotal": {"label": "Sales"}}}, settings=settings
        )
        assert options.field("sellPriceTotal").label == "Sales"
        assert options.field("unknown").label is None
        assert options.field("unknown").value_formatter is None


class TestInvalidOptions:
    def test_unsupported_chart_type(self, settings):
        with pytest.raises(InvalidOptions):
            resolve_options({"chart": {"type": "donut"}}, settings=settings)

    def test_non_callable_formatter(self, settings):
        with pytest.raises(InvalidOptions):
            resolve_options({"chart": {"yAxis": {"valueFormatter": "$,.2f"}}}, settings=settings)

    @pytest.mark.parametrize("chart_type", ["bar", "line", "spline", "area", "area-spline", "pie"])
    def test_supported_chart_types(self, chart_type, settings):
        options = resolve_options({"chart": {"type": chart_type}}, settings=settings)
        assert isinstance(options, ChartOptions)
        assert options.chart.type.value == chart_type
