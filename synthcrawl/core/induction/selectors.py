"""Compile (container, attribute) fragments into selector paths."""

from collections.abc import Mapping

from synthcrawl.core.induction.models import AttributeExtractor, Extractor


def build_selector(attribute: str, container: str, attr_expr: str) -> dict[str, str]:
    """
    Compose a container expression and an attribute expression.

    An empty container is the document root, so the attribute expression is
    used as is. Otherwise the attribute is scoped as a child of the container.

    Example:
        ```python
        build_selector("price", "div.product", "span.price")
        # Returns: {"price": "div.product > span.price"}
        ```
    """
    if not container:
        return {attribute: attr_expr}
    return {attribute: f"{container} > {attr_expr}"}


def drop_undefined_attribute_extractors(
    attr_extractor: Mapping[str, str | None],
) -> AttributeExtractor:
    """Keep only the attributes that already have a learned expression."""
    return {attr: expr for attr, expr in attr_extractor.items() if expr is not None}


def build_selectors(extractor: Extractor) -> dict[str, set[str]]:
    """
    Compile every defined fragment of an extractor.

    Fragments for the same attribute under different containers are competing
    hypotheses; all of them are kept as candidate paths.

    Returns:
        Mapping of attribute to the set of candidate selector paths
    """
    selectors: dict[str, set[str]] = {}
    for container, attr_extractor in extractor.items():
        for attr, attr_expr in drop_undefined_attribute_extractors(attr_extractor).items():
            for name, path in build_selector(attr, container, attr_expr).items():
                selectors.setdefault(name, set()).add(path)
    return selectors
