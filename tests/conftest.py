"""Pytest configuration and fixtures."""

from typing import Any

import pytest

from connectviz.config.settings import Settings
from connectviz.infrastructure.dom.dom import Element
from connectviz.services.chart.engine import EngineConfig, LoadPayload


class FakeEngineChart:
    """Engine instance that records what the controller sends it."""

    def __init__(self, config: EngineConfig):
        self.config = config
        self.loads: list[LoadPayload] = []
        self.flushes = 0
        self.destroyed = False

    def load(self, payload: LoadPayload) -> None:
        self.loads.append(payload)

    def data(self) -> list[Any]:
        if not self.loads:
            return []
        return list(self.loads[-1]["keys"]["value"])

    def flush(self) -> None:
        self.flushes += 1

    def destroy(self) -> None:
        self.destroyed = True


class FakeEngine:
    def __init__(self) -> None:
        self.charts: list[FakeEngineChart] = []

    def generate(self, config: EngineConfig) -> FakeEngineChart:
        chart = FakeEngineChart(config)
        self.charts.append(chart)
        return chart


@pytest.fixture
def settings():
    """Provide settings fixture."""
    return Settings(_env_file=None)


@pytest.fixture
def engine():
    """Provide a recording chart engine."""
    return FakeEngine()


@pytest.fixture
def page():
    """A page root holding a single ``#chart`` target."""
    root = Element(tag="body")
    root.append_child(Element(tag="div", id="chart"))
    return root


@pytest.fixture
def target(page):
    return page.find_by_id("chart")


# ==========================================
#  Query results
# ==========================================


@pytest.fixture
def sales_by_payment():
    """Grouped, no interval."""
    return {
        "metadata": {
            "selects": ["sellPriceTotal"],
            "groups": ["paymentType"],
            "interval": None,
            "timezone": None,
        },
        "results": [
            {"paymentType": "cash", "sellPriceTotal": 100},
            {"paymentType": "card", "sellPriceTotal": 250},
        ],
    }


@pytest.fixture
def sales_totals():
    """Ungrouped, no interval, two selects."""
    return {
        "metadata": {"selects": ["sellPriceTotal", "costPriceTotal"], "groups": []},
        "results": [{"sellPriceTotal": 1234.5, "costPriceTotal": 600}],
    }


@pytest.fixture
def sales_over_time():
    """Ungrouped, minute interval, two selects (buckets out of order)."""
    return {
        "metadata": {
            "selects": ["sellPriceTotal", "costPriceTotal"],
            "groups": [],
            "interval": "minute",
            "timezone": None,
        },
        "results": [
            {
                "interval": {"start": "2020-01-01T00:01:00Z", "end": "2020-01-01T00:02:00Z"},
                "results": [{"sellPriceTotal": 10, "costPriceTotal": 5}],
            },
            {
                "interval": {"start": "2020-01-01T00:00:00Z", "end": "2020-01-01T00:01:00Z"},
                "results": [{"sellPriceTotal": 20, "costPriceTotal": 8}],
            },
        ],
    }


@pytest.fixture
def sales_by_payment_over_time():
    """Grouped, 15-minute interval in Tokyo."""
    return {
        "metadata": {
            "selects": ["sellPriceTotal"],
            "groups": ["paymentType"],
            "interval": "15min",
            "timezone": "Asia/Tokyo",
        },
        "results": [
            {
                "interval": {"start": "2020-01-01T00:00:00Z", "end": "2020-01-01T00:15:00Z"},
                "results": [{"paymentType": "cash", "sellPriceTotal": 10}],
            },
            {
                "interval": {"start": "2020-01-01T00:15:00Z", "end": "2020-01-01T00:30:00Z"},
                "results": [
                    {"paymentType": "card", "sellPriceTotal": 7},
                    {"paymentType": "cash", "sellPriceTotal": 3},
                ],
            },
        ],
    }
