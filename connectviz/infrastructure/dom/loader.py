"""Loading indicator attached to a visualization's target element."""

import logging

from connectviz.config.constants import CssClass, LoaderState
from connectviz.infrastructure.dom.dom import Element, create_element

logger = logging.getLogger(__name__)


class Loader:
    """Toggles loading / error state classes on the target element."""

    def __init__(self, target: Element):
        self._target = target
        self._element = create_element("div", CssClass.LOADER.value)
        self._element.hidden = True
        self._message = create_element("span", CssClass.ERROR_MESSAGE.value)
        self._element.append_child(self._message)
        self.state = LoaderState.IDLE
        self.error: Exception | None = None

    @property
    def element(self) -> Element:
        return self._element

    def attach(self) -> None:
        if self._element.parent is not self._target:
            self._target.append_child(self._element)

    def detach(self) -> None:
        self._element.remove()

    def show(self) -> None:
        self.attach()
        self.state = LoaderState.LOADING
        self.error = None
        self._message.text = None
        self._element.hidden = False
        self._target.remove_class(CssClass.ERROR.value)
        self._target.add_class(CssClass.LOADING.value)

    def hide(self) -> None:
        self.state = LoaderState.IDLE
        self._element.hidden = True
        self._target.remove_class(CssClass.LOADING.value, CssClass.ERROR.value)

    def show_error(self, error: Exception) -> None:
        self.attach()
        self.state = LoaderState.ERROR
        self.error = error
        self._message.text = str(error)
        self._element.hidden = False
        self._target.remove_class(CssClass.LOADING.value)
        self._target.add_class(CssClass.ERROR.value)
        logger.debug("Loader showing error: %s", error)
