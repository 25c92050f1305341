"""Data model for wrapper induction: sites, extractors and knowledge."""

from collections.abc import Iterable, Mapping
from typing import Any, Pattern

from pydantic import BaseModel, ConfigDict, Field, StrictStr, TypeAdapter, ValidationError

from synthcrawl.utils.exceptions import (
    InvalidExtractorError,
    InvalidKnowledgeError,
    InvalidSiteError,
)

# Attribute -> learned selector fragment, None while not yet learned
AttributeExtractor = dict[str, str | None]
# Container expression ("" is the document root) -> attribute fragments
Extractor = dict[str, AttributeExtractor]
# Site id -> current hypothesis
SiteExtractor = dict[str, Extractor]
# Attribute -> known values
Knowledge = dict[str, set[str]]

ROOT_CONTAINER = ""

_EXTRACTOR_ADAPTER = TypeAdapter(dict[StrictStr, dict[StrictStr, StrictStr | None]])
_SITE_EXTRACTOR_ADAPTER = TypeAdapter(
    dict[StrictStr, dict[StrictStr, dict[StrictStr, StrictStr | None]]]
)
_KNOWLEDGE_ADAPTER = TypeAdapter(dict[StrictStr, frozenset[StrictStr]])


class Site(BaseModel):
    """A site descriptor: URL pattern plus already-fetched pages."""

    model_config = ConfigDict(frozen=True)

    url_pattern: Pattern[str]
    pages: dict[StrictStr, StrictStr | None] = Field(default_factory=dict)


def validate_site(value: Site | Mapping[str, Any]) -> Site:
    """Validate a site descriptor, compiling string patterns."""
    if isinstance(value, Site):
        return value
    try:
        return Site.model_validate(value)
    except ValidationError as e:
        raise InvalidSiteError(f"Invalid site descriptor: {e}") from e


def validate_sites(sites: Mapping[str, Site | Mapping[str, Any]]) -> dict[str, Site]:
    """Validate every site descriptor keyed by site id."""
    validated = {}
    for site_id, site in sites.items():
        if not isinstance(site_id, str):
            raise InvalidSiteError(f"Site id must be a string, got {site_id!r}")
        validated[site_id] = validate_site(site)
    return validated


def validate_extractor(extractor: Any) -> Extractor:
    """
    Reject extractors whose containers or fragments are not strings.

    Raises:
        InvalidExtractorError: If a container key, attribute key or fragment
            has the wrong type
    """
    try:
        return _EXTRACTOR_ADAPTER.validate_python(extractor, strict=True)
    except ValidationError as e:
        raise InvalidExtractorError(f"Invalid extractor: {e}") from e


def validate_site_extractors(site_extractors: Any) -> SiteExtractor:
    """Validate a site id -> extractor mapping (see ``validate_extractor``)."""
    try:
        return _SITE_EXTRACTOR_ADAPTER.validate_python(site_extractors, strict=True)
    except ValidationError as e:
        raise InvalidExtractorError(f"Invalid site extractors: {e}") from e


def validate_knowledge(knowledge: Any) -> Knowledge:
    """Validate seeded knowledge into attribute -> set of strings."""
    try:
        validated = _KNOWLEDGE_ADAPTER.validate_python(knowledge)
    except ValidationError as e:
        raise InvalidKnowledgeError(f"Invalid knowledge: {e}") from e
    return merge_knowledge(validated)


def empty_extractor(attributes: Iterable[str]) -> Extractor:
    """The "nothing learned yet" extractor for a set of attributes."""
    return {ROOT_CONTAINER: {attr: None for attr in attributes}}


def pad_extractor(extractor: Extractor, attributes: Iterable[str]) -> Extractor:
    """Copy ``extractor`` adding every missing attribute as undefined."""
    attributes = list(attributes)
    if not extractor:
        return empty_extractor(attributes)
    return {
        container: {**{attr: None for attr in attributes}, **attr_extractor}
        for container, attr_extractor in extractor.items()
    }


def merge_knowledge(*parts: Mapping[str, Iterable[str]]) -> Knowledge:
    """Union knowledge per attribute into a new mapping."""
    merged: Knowledge = {}
    for part in parts:
        for attr, values in part.items():
            merged.setdefault(attr, set()).update(values)
    return merged
