"""In-memory scaffold elements and the loading indicator."""

from connectviz.infrastructure.dom.dom import Element, create_element, create_title, get_element
from connectviz.infrastructure.dom.loader import Loader

__all__ = ["Element", "Loader", "create_element", "create_title", "get_element"]
