"""Derive selector fragments from located nodes.

For one (container, attribute) pair, every located node yields candidate
fragments built from its ancestor chain inside the container's scope. A
candidate is accepted when its composed path selects every located node on
every page. Accepted candidates are ranked by:

1. fewest steps
2. fewest extraneous elements selected across pages
3. class-qualified steps before bare tag steps
4. lexicographically smallest string
"""

from collections.abc import Iterable
from typing import Any

import structlog

from synthcrawl.core.induction.document import DocumentParser
from synthcrawl.core.induction.localizer import LocatedPage, innermost, reach
from synthcrawl.core.induction.models import Extractor
from synthcrawl.core.induction.selectors import build_selector
from synthcrawl.utils.exceptions import SelectorError

logger = structlog.get_logger(__name__)


def _scopes(document: Any, container: str, parser: DocumentParser) -> list[Any]:
    if not container:
        return [document]
    try:
        return parser.select(document, container)
    except SelectorError as e:
        logger.warning("container_rejected", container=container, error=str(e))
        return []


def _chain(node: Any, scope: Any, parser: DocumentParser) -> list[Any]:
    """Ancestors of ``node`` below ``scope``, outermost first, ending at ``node``."""
    chain = []
    current = node
    while current is not None and current is not scope:
        chain.append(current)
        current = parser.parent_of(current)
    chain.reverse()
    return chain


def candidate_fragments(
    node: Any, scope: Any, parser: DocumentParser, rooted: bool
) -> dict[str, tuple[int, int]]:
    """
    Candidate attribute expressions reaching ``node`` from ``scope``.

    Args:
        node: Located element
        scope: Container element, or the document for the root container
        parser: Document parser
        rooted: True for the root container, where any suffix of the chain is
            a valid selector; otherwise the chain must start right below
            ``scope`` to compose with the child combinator

    Returns:
        Expression -> (step count, 0 for class-qualified / 1 for bare tags)
    """
    chain = _chain(node, scope, parser)
    if not chain:
        return {}
    lengths = range(1, len(chain) + 1) if rooted else [len(chain)]

    candidates: dict[str, tuple[int, int]] = {}
    for bare, with_classes in ((0, True), (1, False)):
        steps = [parser.step_of(element, with_classes) for element in chain]
        for length in lengths:
            expr = " > ".join(steps[-length:])
            candidates[expr] = min(candidates.get(expr, (length, bare)), (length, bare))
    return candidates


def derive_fragment(
    attribute: str,
    container: str,
    pages: Iterable[LocatedPage],
    parser: DocumentParser,
) -> str | None:
    """
    Derive the fragment for ``attribute`` under ``container``.

    Returns:
        The best accepted expression, or None when the located nodes cannot
        be reached by a single expression
    """
    evidence = []
    candidates: dict[str, tuple[int, int]] = {}

    for page in pages:
        nodes = innermost(page.nodes.get(attribute, []), parser)
        if not nodes:
            continue
        scopes = _scopes(page.document, container, parser)
        in_scope = []
        for node in nodes:
            owners = [scope for scope in scopes if reach(scope, node, parser)]
            if not owners:
                continue
            in_scope.append(node)
            for scope in owners:
                for expr, rank in candidate_fragments(node, scope, parser, not container).items():
                    candidates[expr] = min(candidates.get(expr, rank), rank)
        if in_scope:
            evidence.append((page.document, in_scope))

    if not evidence:
        return None

    accepted = []
    for expr, (steps, bare) in candidates.items():
        path = build_selector(attribute, container, expr)[attribute]
        extraneous = 0
        for document, nodes in evidence:
            try:
                selected = parser.select(document, path)
            except SelectorError:
                break
            selected_ids = {id(element) for element in selected}
            if not all(id(node) in selected_ids for node in nodes):
                break
            extraneous += len(selected) - len(nodes)
        else:
            accepted.append((steps, extraneous, bare, expr))

    if not accepted:
        logger.info(
            "fragment_not_derived",
            attribute=attribute,
            container=container,
            candidates=len(candidates),
        )
        return None

    fragment = min(accepted)[3]
    logger.info(
        "fragment_derived",
        attribute=attribute,
        container=container,
        fragment=fragment,
        accepted=len(accepted),
    )
    return fragment


def refine_extractor(
    extractor: Extractor, located: dict[str, LocatedPage], parser: DocumentParser
) -> Extractor:
    """
    Build the next snapshot of ``extractor``.

    Learned fragments are kept as they are; every undefined (or empty)
    fragment is replaced by a derived one when the located nodes allow it.
    """
    pages = list(located.values())
    refined: Extractor = {}
    for container, attr_extractor in extractor.items():
        refined[container] = {}
        for attr, expr in attr_extractor.items():
            if expr:
                refined[container][attr] = expr
                continue
            fragment = derive_fragment(attr, container, pages, parser)
            refined[container][attr] = expr if fragment is None else fragment
    return refined
