"""Tests for the async result handler."""

import asyncio
import logging
from unittest.mock import Mock

import pytest

from connectviz.config.constants import CssClass, LoaderState
from connectviz.errors import FetchFailure, MissingSelect
from connectviz.infrastructure.dom.dom import Element
from connectviz.infrastructure.dom.loader import Loader
from connectviz.orchestrator.result_handler import ResultHandler


class _Visualization:
    def __init__(self) -> None:
        self.target = Element(id="viz")
        self.loader = Loader(self.target)
        self.destroyed = False
        self.loaded: list[tuple[object, bool]] = []

    def load_data(self, results, re_render=True):
        self.loaded.append((results, re_render))


# ----------------------------------------------------------------
# helpers
# ----------------------------------------------------------------


async def _resolve(value):
    return value


async def _fail(error):
    raise error


async def _wait_then(gate: asyncio.Event, value=None, error=None):
    await gate.wait()
    if error is not None:
        raise error
    return value


# ----------------------------------------------------------------
# tests
# ----------------------------------------------------------------


@pytest.mark.asyncio
async def test_loads_results_and_hides_loader():
    viz = _Visualization()
    handler = ResultHandler()

    assert await handler.handle_result(_resolve("results"), viz, viz.load_data) is True

    assert viz.loaded == [("results", True)]
    assert viz.loader.state is LoaderState.IDLE
    assert not viz.target.has_class(CssClass.LOADING.value)


@pytest.mark.asyncio
async def test_passes_re_render_flag():
    viz = _Visualization()
    load_data = Mock()

    await ResultHandler().handle_result(_resolve("results"), viz, load_data, re_render=False)

    load_data.assert_called_once_with("results", False)


@pytest.mark.asyncio
async def test_fetch_failure_shows_error():
    viz = _Visualization()
    cause = RuntimeError("connection reset")

    assert await ResultHandler().handle_result(_fail(cause), viz, viz.load_data) is False

    assert viz.loaded == []
    assert viz.loader.state is LoaderState.ERROR
    assert isinstance(viz.loader.error, FetchFailure)
    assert viz.loader.error.__cause__ is cause
    assert viz.target.has_class(CssClass.ERROR.value)


@pytest.mark.asyncio
async def test_dataset_error_shows_error():
    viz = _Visualization()
    load_data = Mock(side_effect=MissingSelect("bogus"))

    assert await ResultHandler().handle_result(_resolve("results"), viz, load_data) is False

    assert viz.loader.state is LoaderState.ERROR
    assert isinstance(viz.loader.error, MissingSelect)


@pytest.mark.asyncio
async def test_programming_errors_propagate():
    viz = _Visualization()
    load_data = Mock(side_effect=TypeError("bad callback"))

    with pytest.raises(TypeError):
        await ResultHandler().handle_result(_resolve("results"), viz, load_data)

    assert viz.loader.state is LoaderState.ERROR
    assert isinstance(viz.loader.error, TypeError)
    assert viz.target.has_class(CssClass.ERROR.value)


@pytest.mark.asyncio
async def test_stale_response_is_dropped():
    viz = _Visualization()
    handler = ResultHandler()
    gate = asyncio.Event()

    first = asyncio.create_task(
        handler.handle_result(_wait_then(gate, value="old"), viz, viz.load_data)
    )
    await asyncio.sleep(0)
    assert await handler.handle_result(_resolve("new"), viz, viz.load_data) is True

    gate.set()
    assert await first is False
    assert viz.loaded == [("new", True)]
    assert handler.generation == 2


@pytest.mark.asyncio
async def test_stale_failure_does_not_overwrite_loader():
    viz = _Visualization()
    handler = ResultHandler()
    gate = asyncio.Event()

    first = asyncio.create_task(
        handler.handle_result(
            _wait_then(gate, error=RuntimeError("late")), viz, viz.load_data
        )
    )
    await asyncio.sleep(0)
    await handler.handle_result(_resolve("new"), viz, viz.load_data)

    gate.set()
    assert await first is False
    assert viz.loader.state is LoaderState.IDLE
    assert viz.loader.error is None


@pytest.mark.asyncio
async def test_result_for_destroyed_visualization_is_dropped():
    viz = _Visualization()
    handler = ResultHandler()
    gate = asyncio.Event()

    pending = asyncio.create_task(
        handler.handle_result(_wait_then(gate, value="late"), viz, viz.load_data)
    )
    await asyncio.sleep(0)
    viz.destroyed = True
    gate.set()

    assert await pending is False
    assert viz.loaded == []


@pytest.mark.asyncio
async def test_fetch_step_is_logged(caplog):
    viz = _Visualization()
    with caplog.at_level(logging.DEBUG, logger="connectviz.orchestrator.result_handler"):
        await ResultHandler().handle_result(_resolve("results"), viz, viz.load_data)
    assert any('"step": "fetch"' in record.getMessage() for record in caplog.records)
