"""Wrapper induction module for Synthcrawl.

This module learns per-site extraction rules from example pages and partial
knowledge:
- Selector composition from container and attribute fragments
- Extraction of attribute values with the current hypotheses
- Structural diffing to skip hypotheses that were already evaluated
- Fuzzy relocation of known values inside new markup
- The refinement loop that turns partial extractors into complete ones
"""

from synthcrawl.core.induction.completeness import (
    is_empty_extractor,
    is_incomplete,
    missing_fragments,
)
from synthcrawl.core.induction.diff import (
    crawled,
    extractor_changed,
    extractors_differ,
    knowledge_differs,
    structural_difference,
)
from synthcrawl.core.induction.document import DocumentParser, SoupParser
from synthcrawl.core.induction.extraction import extract, extract_knowledge
from synthcrawl.core.induction.localizer import (
    LocatedPage,
    find_attribute_nodes,
    find_nodes_in_page,
    reach,
)
from synthcrawl.core.induction.models import (
    Site,
    empty_extractor,
    merge_knowledge,
    validate_extractor,
    validate_site_extractors,
)
from synthcrawl.core.induction.orchestrator import (
    SiteOutcome,
    SynthesisConfig,
    SynthesisOrchestrator,
    SynthesisResult,
    SynthesisStatus,
)
from synthcrawl.core.induction.selectors import build_selector, build_selectors
from synthcrawl.core.induction.similarity import matched_knowledge, similarity

__all__ = [
    "DocumentParser",
    "SoupParser",
    "Site",
    "empty_extractor",
    "merge_knowledge",
    "validate_extractor",
    "validate_site_extractors",
    "build_selector",
    "build_selectors",
    "extract",
    "extract_knowledge",
    "structural_difference",
    "knowledge_differs",
    "extractors_differ",
    "extractor_changed",
    "crawled",
    "is_empty_extractor",
    "is_incomplete",
    "missing_fragments",
    "similarity",
    "matched_knowledge",
    "LocatedPage",
    "find_attribute_nodes",
    "find_nodes_in_page",
    "reach",
    "SynthesisOrchestrator",
    "SynthesisConfig",
    "SynthesisResult",
    "SynthesisStatus",
    "SiteOutcome",
]
