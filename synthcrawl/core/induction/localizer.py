"""Node localization - find elements holding known attribute values."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog

from synthcrawl.core.induction.document import DocumentParser
from synthcrawl.core.induction.similarity import DEFAULT_THRESHOLD, matched_knowledge
from synthcrawl.utils.exceptions import MalformedMarkupError

logger = structlog.get_logger(__name__)


@dataclass
class LocatedPage:
    """Matched elements of one page, alongside the tree they belong to."""

    document: Any
    nodes: dict[str, list[Any]] = field(default_factory=dict)


def find_attribute_nodes(
    elements: Iterable[Any],
    knowledge: Iterable[str],
    parser: DocumentParser,
    threshold: float = DEFAULT_THRESHOLD,
) -> list[Any]:
    """
    Keep the elements whose text resembles a known value.

    Args:
        elements: Candidate elements in document order
        knowledge: Known values for one attribute
        parser: Parser that produced the elements
        threshold: Similarity threshold passed to ``matched_knowledge``

    Returns:
        Matching elements, in the order given
    """
    knowledge = list(knowledge)
    matches = []
    for element in elements:
        text = parser.text_of(element)
        if text and matched_knowledge(text, knowledge, threshold):
            matches.append(element)
    return matches


def reach(a: Any, b: Any, parser: DocumentParser) -> bool:
    """True iff ``b`` is ``a`` or one of its descendants."""
    return any(element is b for element in parser.all_elements(a))


def innermost(nodes: list[Any], parser: DocumentParser) -> list[Any]:
    """Drop nodes that merely enclose another matched node."""
    return [
        node
        for node in nodes
        if not any(other is not node and reach(node, other, parser) for other in nodes)
    ]


def in_head(element: Any, parser: DocumentParser) -> bool:
    """True iff ``element`` is ``<head>`` or sits inside it."""
    current = element
    while current is not None:
        if parser.step_of(current, with_classes=False) == "head":
            return True
        current = parser.parent_of(current)
    return False


def find_nodes_in_page(
    pages: Mapping[str, str | None],
    attr_knowledge: Mapping[str, Iterable[str]],
    parser: DocumentParser,
    threshold: float = DEFAULT_THRESHOLD,
) -> dict[str, LocatedPage]:
    """
    Locate known values in every page.

    Args:
        pages: URL -> raw markup (None for pages without text)
        attr_knowledge: Known values per attribute
        parser: Document parser
        threshold: Similarity threshold

    Returns:
        URL -> located page, whose ``nodes`` maps each attribute to the
        elements outside ``<head>`` that hold one of its known values
    """
    located: dict[str, LocatedPage] = {}
    for url, text in pages.items():
        if text is None:
            continue
        try:
            document = parser.parse(text)
        except MalformedMarkupError as e:
            logger.warning("malformed_markup", url=url, error=str(e))
            continue

        # <head> is metadata, never a value holder
        elements = [el for el in parser.all_elements(document) if not in_head(el, parser)]
        page = LocatedPage(document=document)
        for attr, knowledge in attr_knowledge.items():
            page.nodes[attr] = find_attribute_nodes(elements, knowledge, parser, threshold)
        located[url] = page

        logger.debug(
            "nodes_located",
            url=url,
            matches={attr: len(nodes) for attr, nodes in page.nodes.items()},
        )
    return located
