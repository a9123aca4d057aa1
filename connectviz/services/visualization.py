"""Shared surface of charts and tables, as seen by the result handler."""

from typing import Any, Protocol

from connectviz.infrastructure.dom.loader import Loader


class Visualization(Protocol):
    """A renderable visualization owning a loader and a destroyed flag."""

    loader: Loader

    @property
    def destroyed(self) -> bool: ...

    def load_data(self, results: Any, re_render: bool = True) -> None: ...

    def destroy(self) -> None: ...
