"""Completeness predicates over the extractor shape."""

from synthcrawl.core.induction.models import ROOT_CONTAINER, Extractor


def is_empty_extractor(extractor: Extractor) -> bool:
    """True iff the only container is the root and nothing has been learned."""
    return set(extractor) == {ROOT_CONTAINER} and all(
        expr is None for expr in extractor[ROOT_CONTAINER].values()
    )


def is_incomplete(extractor: Extractor) -> bool:
    """True iff some attribute, under some container, lacks a usable fragment."""
    if not extractor:
        return True
    return bool(missing_fragments(extractor))


def missing_fragments(extractor: Extractor) -> list[tuple[str, str]]:
    """(container, attribute) pairs without a defined non-empty fragment."""
    return sorted(
        (container, attr)
        for container, attr_extractor in extractor.items()
        for attr, expr in attr_extractor.items()
        if not expr
    )
