"""Minimal element tree used as the rendering scaffold.

Visualizations only need to create a container, a title, a result element
and later remove them again; this module models exactly that so the
scaffold can be inspected (and embedded by a host page) without a browser.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from html import escape
from typing import Any, Protocol

from connectviz.config.constants import CssClass


@dataclass(eq=False)
class Element:
    """A node of the scaffold tree."""

    tag: str = "div"
    classes: list[str] = field(default_factory=list)
    text: str | None = None
    id: str | None = None
    hidden: bool = False
    children: list["Element"] = field(default_factory=list)
    parent: "Element | None" = None
    content: Any = None  # engine output bound to this element (e.g. a figure)

    def append_child(self, child: "Element") -> "Element":
        if child.parent is not None:
            child.parent.remove_child(child)
        child.parent = self
        self.children.append(child)
        return child

    def remove_child(self, child: "Element") -> None:
        self.children.remove(child)
        child.parent = None

    def remove(self) -> None:
        if self.parent is not None:
            self.parent.remove_child(self)

    def add_class(self, *names: str) -> None:
        for name in names:
            if name not in self.classes:
                self.classes.append(name)

    def remove_class(self, *names: str) -> None:
        self.classes = [c for c in self.classes if c not in names]

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def iter(self) -> Iterator["Element"]:
        yield self
        for child in self.children:
            yield from child.iter()

    def find_by_class(self, name: str) -> "Element | None":
        return next((el for el in self.iter() if el.has_class(name)), None)

    def find_by_id(self, element_id: str) -> "Element | None":
        return next((el for el in self.iter() if el.id == element_id), None)

    def to_html(self) -> str:
        attrs = ""
        if self.id:
            attrs += f' id="{escape(self.id)}"'
        if self.classes:
            attrs += f' class="{escape(" ".join(self.classes))}"'
        if self.hidden:
            attrs += " hidden"
        inner = escape(self.text) if self.text else ""
        if self.content is not None and hasattr(self.content, "to_html"):
            inner += self.content.to_html()
        inner += "".join(child.to_html() for child in self.children)
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"


class Destroyable(Protocol):
    def destroy(self) -> None: ...


def get_element(target: "str | Element", root: Element | None = None) -> Element:
    """Resolve a render target: an Element, or ``"#id"``/``"id"`` searched under ``root``."""
    if isinstance(target, Element):
        return target
    if isinstance(target, str) and root is not None:
        found = root.find_by_id(target.lstrip("#"))
        if found is not None:
            return found
    raise ValueError(f"Render target not found: {target!r}")


def create_element(tag: str, *classes: str, text: str | None = None) -> Element:
    return Element(tag=tag, classes=list(classes), text=text)


def create_title(title: str | None) -> Element:
    """Title element; hidden when the title is empty."""
    element = create_element("span", CssClass.TITLE.value, text=title or None)
    element.hidden = not title
    return element


def get_destroyer(container: Element, engine_chart: Destroyable | None = None) -> Callable[[], None]:
    """Return a callable that tears down the engine instance and removes ``container``."""

    def destroy() -> None:
        if engine_chart is not None:
            engine_chart.destroy()
        container.remove()
        container.children.clear()

    return destroy
