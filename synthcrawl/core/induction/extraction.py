"""Extraction engine - apply learned selectors to page markup."""

from collections.abc import Mapping
from concurrent.futures import Executor

import structlog

from synthcrawl.core.induction.diff import SITE_EXTRACTORS, structural_difference
from synthcrawl.core.induction.document import DocumentParser, SoupParser
from synthcrawl.core.induction.models import (
    Extractor,
    Knowledge,
    Site,
    SiteExtractor,
    merge_knowledge,
)
from synthcrawl.core.induction.selectors import build_selectors
from synthcrawl.utils.exceptions import MalformedMarkupError, SelectorError

logger = structlog.get_logger(__name__)


def extract(
    text: str | None, extractor: Extractor, parser: DocumentParser | None = None
) -> Knowledge | None:
    """
    Extract attribute values from one page.

    Args:
        text: Raw page markup, or None when the page is missing
        extractor: Container -> attribute fragments to evaluate
        parser: Document parser (defaults to ``SoupParser``)

    Returns:
        Mapping of attribute to the non-empty texts matched by any of its
        candidate paths, or None for a missing page
    """
    if text is None:
        return None

    parser = parser or SoupParser()
    selectors = build_selectors(extractor)

    try:
        root = parser.parse(text)
    except MalformedMarkupError as e:
        logger.warning("malformed_markup", error=str(e), attributes=sorted(selectors))
        return {attr: set() for attr in selectors}

    extracted: Knowledge = {}
    for attr, paths in selectors.items():
        values = set()
        for path in paths:
            try:
                elements = parser.select(root, path)
            except SelectorError as e:
                logger.warning("selector_rejected", attribute=attr, selector=path, error=str(e))
                continue
            values.update(parser.text_of(element) for element in elements)
        values.discard("")
        extracted[attr] = values
    return extracted


def uncrawled_extractors(
    site_extractors: SiteExtractor, crawled_extractors: SiteExtractor
) -> SiteExtractor:
    """Sites (and the parts of their extractors) not processed yet."""
    return structural_difference(site_extractors, crawled_extractors, SITE_EXTRACTORS)


def extract_knowledge(
    sites: Mapping[str, Site],
    site_extractors: SiteExtractor,
    crawled_extractors: SiteExtractor,
    parser: DocumentParser | None = None,
    executor: Executor | None = None,
) -> Knowledge:
    """
    Extract knowledge from every page of every site with unprocessed hypotheses.

    Args:
        sites: Site descriptors keyed by site id
        site_extractors: Current hypothesis per site
        crawled_extractors: Hypotheses already evaluated per site
        parser: Document parser (defaults to ``SoupParser``)
        executor: Optional pool used to extract pages concurrently

    Returns:
        Per-attribute increment; merging into global knowledge is left to the
        caller
    """
    parser = parser or SoupParser()
    uncrawled = uncrawled_extractors(site_extractors, crawled_extractors)

    jobs = []
    for site_id, extractor in uncrawled.items():
        site = sites.get(site_id)
        if site is None:
            logger.warning("unknown_site", site_id=site_id)
            continue
        jobs.extend((text, extractor) for text in site.pages.values())

    logger.debug("extracting_knowledge", sites=sorted(uncrawled), pages=len(jobs))

    if executor is None:
        results = [extract(text, extractor, parser) for text, extractor in jobs]
    else:
        futures = [executor.submit(extract, text, extractor, parser) for text, extractor in jobs]
        results = [future.result() for future in futures]

    return merge_knowledge(*(result for result in results if result is not None))
