"""Structural difference over nested maps and sets.

Every value compared here is described by an explicit shape instead of being
inspected at runtime:

- ``Scalar``: compared with ``==``
- ``SetOf``: a set of scalars, compared member-wise
- ``MapOf``: a mapping whose values all share one shape
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Scalar:
    """Leaf value."""


@dataclass(frozen=True)
class SetOf:
    """Set of scalars."""


@dataclass(frozen=True)
class MapOf:
    """Mapping whose values have shape ``values``."""

    values: "Shape"


Shape = Scalar | SetOf | MapOf

KNOWLEDGE = MapOf(SetOf())
EXTRACTOR = MapOf(MapOf(Scalar()))
SITE_EXTRACTORS = MapOf(EXTRACTOR)


def _difference(a: Any, b: Any, shape: Shape) -> tuple[bool, Any]:
    """Return (differs, part of ``a`` not present in ``b``)."""
    if isinstance(shape, MapOf):
        part = {}
        for key, value in a.items():
            if key not in b:
                part[key] = value
                continue
            differs, sub = _difference(value, b[key], shape.values)
            if differs:
                part[key] = sub
        return bool(part), part

    if isinstance(shape, SetOf):
        part = set(a) - set(b)
        return bool(part), part

    return a != b, a


def structural_difference(a: Any, b: Any, shape: Shape) -> Any:
    """
    Substructure of ``a`` that is absent or different in ``b``.

    Args:
        a: Value to inspect
        b: Reference value
        shape: Shape shared by ``a`` and ``b``

    Returns:
        For maps, the keys of ``a`` that need (re)work relative to ``b``; for
        sets, ``a - b``; for scalars, ``a`` itself or None when equal

    Example:
        ```python
        structural_difference(
            {"shop": {"": {"price": "span.price", "title": "h1"}}},
            {"shop": {"": {"price": "span.price", "title": None}}},
            SITE_EXTRACTORS,
        )
        # Returns: {"shop": {"": {"title": "h1"}}}
        ```
    """
    differs, part = _difference(a, b, shape)
    if isinstance(shape, Scalar) and not differs:
        return None
    return part


def differs(a: Any, b: Any, shape: Shape) -> bool:
    """True when ``a`` and ``b`` differ in either direction."""
    return _difference(a, b, shape)[0] or _difference(b, a, shape)[0]


def knowledge_differs(knowledge_a: Any, knowledge_b: Any) -> bool:
    return differs(knowledge_a, knowledge_b, KNOWLEDGE)


def extractors_differ(site_extractors_a: Any, site_extractors_b: Any) -> bool:
    return differs(site_extractors_a, site_extractors_b, SITE_EXTRACTORS)


def extractor_changed(previous: Any, current: Any) -> bool:
    """Per-site comparison of two snapshots of one extractor."""
    return differs(previous, current, EXTRACTOR)


def crawled(extractor: Any, crawled_set: Iterable[Any], shape: Shape = EXTRACTOR) -> bool:
    """True iff ``extractor`` is structurally present in ``crawled_set``."""
    return any(not differs(extractor, seen, shape) for seen in crawled_set)
