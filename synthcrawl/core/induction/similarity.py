"""Fuzzy text matching used to relocate known values in new markup."""

from collections.abc import Iterable

DEFAULT_THRESHOLD = 0.5


def tokenize(text: str) -> frozenset[str]:
    """Split text into a set of case-folded, whitespace-separated tokens."""
    return frozenset(text.casefold().split())


def similarity(a: str, b: str) -> float:
    """
    Jaccard similarity between the token sets of two strings.

    Args:
        a: First text
        b: Second text

    Returns:
        |A ∩ B| / |A ∪ B| in [0, 1]; two texts without tokens score 1.0
    """
    tokens_a = tokenize(a)
    tokens_b = tokenize(b)
    union = tokens_a | tokens_b
    if not union:
        return 1.0
    return len(tokens_a & tokens_b) / len(union)


def matched_knowledge(
    text: str, knowledge: Iterable[str], threshold: float = DEFAULT_THRESHOLD
) -> list[str]:
    """
    Return the known values that are similar enough to ``text``.

    Args:
        text: Text found in a page
        knowledge: Known values for a single attribute
        threshold: Minimum similarity for a member to count as a match

    Returns:
        Members of ``knowledge`` with similarity >= threshold
    """
    return [value for value in knowledge if similarity(text, value) >= threshold]
