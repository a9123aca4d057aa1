"""Tests for the table visualization."""

import pytest

from connectviz.config.constants import ChartState, CssClass
from connectviz.errors import ChartDestroyedError, MalformedResults, MissingSelect
from connectviz.services.formatting.formatters import value_formatter
from connectviz.services.table.table import Table, TableModel


async def _resolve(value):
    return value


def _cell_texts(element, tag):
    return [el.text for el in element.iter() if el.tag == tag]


@pytest.mark.asyncio
async def test_grouped_table(target, settings, sales_by_payment):
    options = {
        "fields": {
            "paymentType": {"label": "Payment"},
            "sellPriceTotal": {"label": "Sales", "valueFormatter": value_formatter("$,.0f")},
        }
    }
    table = Table(target, options, settings=settings)

    assert await table.display_data(_resolve(sales_by_payment)) is True

    assert table.model == TableModel(
        headings=("Payment", "Sales"),
        rows=(("cash", "$100"), ("card", "$250")),
    )
    assert table.container.has_class(CssClass.TABLE.value)
    rendered = table.result_element.children[0]
    assert rendered.tag == "table"
    assert _cell_texts(rendered, "th") == ["Payment", "Sales"]
    assert _cell_texts(rendered, "td") == ["cash", "$100", "card", "$250"]


@pytest.mark.asyncio
async def test_interval_column_first(target, settings, sales_over_time):
    table = Table(target, settings=settings)
    await table.display_data(_resolve(sales_over_time))

    assert table.model.headings == ("Interval", "sellPriceTotal", "costPriceTotal")
    assert table.model.rows == (("00:00", "20", "8"), ("00:01", "10", "5"))


@pytest.mark.asyncio
async def test_interval_label_option(target, settings, sales_over_time):
    table = Table(target, {"intervals": {"label": "Time"}}, settings=settings)
    await table.display_data(_resolve(sales_over_time))
    assert table.model.headings[0] == "Time"


@pytest.mark.asyncio
async def test_interval_options_label(target, settings, sales_over_time):
    table = Table(target, {"intervalOptions": {"label": "Time"}}, settings=settings)
    await table.display_data(_resolve(sales_over_time))
    assert table.model.headings[0] == "Time"

@pytest.mark.asyncio
async def test_grouped_interval_rows(target, settings, sales_by_payment_over_time):
    table = Table(target, {"intervals": {"formats": {"15min": "HH:mm"}}}, settings=settings)
    await table.display_data(_resolve(sales_by_payment_over_time))

    assert table.model.headings == ("Interval", "paymentType", "sellPriceTotal")
    assert table.model.rows == (
        ("09:00", "cash", "10"),
        ("09:15", "card", "7"),
        ("09:15", "cash", "3"),
    )


@pytest.mark.asyncio
async def test_missing_values_are_blank(target, settings):
    results = {"metadata": {"selects": ["a", "b"]}, "results": [{"a": 1}]}
    table = Table(target, settings=settings)
    await table.display_data(_resolve(results))
    assert table.model.rows == (("1", ""),)


@pytest.mark.asyncio
async def test_dataset_errors_show_on_loader(target, settings, sales_by_payment):
    sales_by_payment["results"].append({"bogus": 1})
    table = Table(target, settings=settings)

    assert await table.display_data(_resolve(sales_by_payment)) is False
    assert isinstance(table.loader.error, MissingSelect)
    assert table.model is None


@pytest.mark.asyncio
async def test_clear_and_destroy(target, settings, sales_by_payment):
    table = Table(target, settings=settings)
    await table.display_data(_resolve(sales_by_payment))

    table.clear()
    assert table.result_element.children == []
    assert table.state is ChartState.RENDERED

    table.destroy()
    assert table.container not in target.children
    with pytest.raises(ChartDestroyedError):
        await table.display_data(_resolve(sales_by_payment))

    table.load_data(sales_by_payment)
    assert table.model is None
    assert table.container not in target.children
    assert table.state is ChartState.DESTROYED


@pytest.mark.asyncio
async def test_empty_bucket_gives_blank_row(target, settings):
    results = {
        "metadata": {"selects": ["s"], "interval": "day", "timezone": "UTC"},
        "results": [
            {"interval": {"start": "2020-01-02T00:00:00Z"}, "results": [{"s": 4}]},
            {"interval": {"start": "2020-01-01T00:00:00Z"}, "results": []},
        ],
    }
    table = Table(target, {"intervals": {"formats": {"day": "YYYY-MM-DD"}}}, settings=settings)
    await table.display_data(_resolve(results))
    assert table.model.rows == (("2020-01-01", ""), ("2020-01-02", "4"))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "row",
    [
        {"results": [{"s": 1}]},
        {"interval": {"start": "not-a-date"}, "results": [{"s": 1}]},
        {"interval": {"start": "2020-01-01T00:00:00Z"}, "results": "s"},
    ],
)
async def test_malformed_interval_rows_show_on_loader(target, settings, row):
    results = {"metadata": {"selects": ["s"], "interval": "day"}, "results": [row]}
    table = Table(target, settings=settings)

    assert await table.display_data(_resolve(results)) is False
    assert isinstance(table.loader.error, MalformedResults)
    assert table.model is None
