"""Table visualization: query results as a header + body element table."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from connectviz.config.constants import ChartState, CssClass, RenderStep
from connectviz.config.options import ChartOptions
from connectviz.config.settings import Settings
from connectviz.infrastructure.dom.dom import Element, create_element
from connectviz.services.base import BaseVisualization
from connectviz.services.dataset.builder import ChartDataset, build_dataset
from connectviz.services.dataset.models import QueryResults
from connectviz.utils.timing import timed_step

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableModel:
    """Column headings and rows of display strings."""

    headings: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]


def _display(value: Any) -> str:
    return "" if value is None else str(value)


class Table(BaseVisualization):
    """A table bound to one target element.

    Columns: the interval (when results are bucketed), then the groups, then
    the selects, each headed by its field label.
    """

    css_class = CssClass.TABLE

    def __init__(
        self,
        target: "str | Element",
        options: ChartOptions | Mapping[str, Any] | None = None,
        *,
        settings: Settings | None = None,
        root: Element | None = None,
    ):
        super().__init__(target, options, settings=settings, root=root)
        self._model: TableModel | None = None

    @property
    def model(self) -> TableModel | None:
        return self._model

    def clear(self) -> None:
        if self._result_element is None or self.destroyed:
            return
        self._result_element.children.clear()
        self._model = None
        self.state = ChartState.RENDERED

    def _render_result(self, result_element: Element) -> None:
        return None

    def _load(self, results: QueryResults, re_render: bool) -> None:
        with timed_step(RenderStep.BUILD_DATASET, self._log) as step:
            dataset = build_dataset(results, self._dataset_formatters())
            model = self.build_model(dataset)
            step.record(rows=len(model.rows), columns=len(model.headings))

        with timed_step(RenderStep.LOAD, self._log):
            self._result_element.children.clear()
            self._result_element.append_child(self._render_model(model))
        self._model = model
        self.state = ChartState.LOADED

    def build_model(self, dataset: ChartDataset) -> TableModel:
        metadata = dataset.metadata
        interval_formatter = self._interval_formatter(metadata)

        headings: list[str] = []
        if interval_formatter is not None:
            headings.append(self.options.intervals.label or self.settings.default_interval_label)
        headings.extend(self._select_label(group) for group in metadata.groups)
        headings.extend(self._select_label(select) for select in metadata.selects)

        rows: list[tuple[str, ...]] = []
        for bucket, row in dataset.get_records():
            cells = self._cells(row, metadata.groups, metadata.selects)
            if interval_formatter is not None:
                cells = (_display(interval_formatter(bucket)), *cells)
            rows.append(cells)
        return TableModel(headings=tuple(headings), rows=tuple(rows))

    def _cells(
        self, row: Mapping[str, Any], groups: tuple[str, ...], selects: tuple[str, ...]
    ) -> tuple[str, ...]:
        cells = [_display(self._format_field(group, row.get(group))) for group in groups]
        cells.extend(_display(self._format_field(select, row.get(select))) for select in selects)
        return tuple(cells)

    def _render_model(self, model: TableModel) -> Element:
        table = create_element("table")
        head = table.append_child(create_element("thead"))
        header_row = head.append_child(create_element("tr"))
        for heading in model.headings:
            header_row.append_child(create_element("th", text=heading))
        body = table.append_child(create_element("tbody"))
        for row in model.rows:
            tr = body.append_child(create_element("tr"))
            for cell in row:
                tr.append_child(create_element("td", text=cell))
        return table
