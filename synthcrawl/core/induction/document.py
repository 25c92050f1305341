"""Document parser capability consumed by the induction core.

The core only talks to markup through ``DocumentParser``. ``SoupParser`` is the
default implementation, backed by BeautifulSoup and soupsieve.
"""

from typing import Any, Protocol

import soupsieve
from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from synthcrawl.utils.exceptions import MalformedMarkupError, SelectorError


class DocumentParser(Protocol):
    """Capabilities the induction core needs from a markup parser."""

    def parse(self, text: str) -> Any:
        """Parse page text into a document tree."""
        ...

    def select(self, node: Any, selector: str) -> list[Any]:
        """Elements under ``node`` matching ``selector``, in document order."""
        ...

    def text_of(self, element: Any) -> str:
        """Whitespace-normalized text content of an element."""
        ...

    def all_elements(self, node: Any) -> list[Any]:
        """The node itself (when it is an element) followed by its descendants."""
        ...

    def parent_of(self, element: Any) -> Any | None:
        """Parent element, or None for the top-level element."""
        ...

    def step_of(self, element: Any, with_classes: bool = True) -> str:
        """A single selector step that describes ``element``."""
        ...


class SoupParser:
    """``DocumentParser`` backed by BeautifulSoup."""

    def __init__(self, features: str = "html.parser") -> None:
        """
        Initialize the parser.

        Args:
            features: BeautifulSoup tree builder (html.parser, lxml, html5lib)
        """
        self.features = features

    def parse(self, text: str) -> BeautifulSoup:
        try:
            return BeautifulSoup(text, self.features)
        except ParserRejectedMarkup as e:
            raise MalformedMarkupError(str(e)) from e

    def select(self, node: Tag, selector: str) -> list[Tag]:
        try:
            return list(node.select(selector))
        except soupsieve.SelectorSyntaxError as e:
            raise SelectorError(selector, str(e)) from e

    def text_of(self, element: Tag) -> str:
        return " ".join(element.get_text(" ").split())

    def all_elements(self, node: Tag) -> list[Tag]:
        elements = [] if isinstance(node, BeautifulSoup) else [node]
        elements.extend(node.find_all(True))
        return elements

    def parent_of(self, element: Tag) -> Tag | None:
        parent = element.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            return None
        return parent

    def step_of(self, element: Tag, with_classes: bool = True) -> str:
        step = soupsieve.escape(element.name)
        if with_classes:
            classes = sorted({cls for cls in element.get("class") or [] if cls})
            step += "".join(f".{soupsieve.escape(cls)}" for cls in classes)
        return step
