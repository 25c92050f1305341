"""Synthesis orchestrator - iterate extraction and refinement to a fixpoint."""

import copy
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import Executor, ThreadPoolExecutor
from contextlib import nullcontext
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from synthcrawl.config import Settings, settings
from synthcrawl.core.induction.completeness import is_incomplete, missing_fragments
from synthcrawl.core.induction.diff import extractor_changed
from synthcrawl.core.induction.document import DocumentParser, SoupParser
from synthcrawl.core.induction.extraction import extract_knowledge
from synthcrawl.core.induction.localizer import find_nodes_in_page
from synthcrawl.core.induction.models import (
    Extractor,
    Knowledge,
    Site,
    SiteExtractor,
    merge_knowledge,
    pad_extractor,
    validate_knowledge,
    validate_site_extractors,
    validate_sites,
)
from synthcrawl.core.induction.refinement import refine_extractor
from synthcrawl.utils.exceptions import InvalidExtractorError

logger = structlog.get_logger(__name__)

Checkpoint = Callable[[str, Any], None]

NO_PROGRESS = "no progress"
ITERATION_LIMIT = "iteration limit"


class SynthesisStatus(str, Enum):
    """Terminal state of a site's extractor."""

    COMPLETE = "complete"
    STALLED = "stalled"


@dataclass
class SiteOutcome:
    """Result of synthesis for a single site."""

    status: SynthesisStatus
    extractor: Extractor
    missing: list[tuple[str, str]] = field(default_factory=list)
    reason: str | None = None


@dataclass
class SynthesisResult:
    """Result of a synthesis run."""

    knowledge: Knowledge
    site_extractors: SiteExtractor
    outcomes: dict[str, SiteOutcome] = field(default_factory=dict)
    iterations: int = 0

    @property
    def complete_sites(self) -> list[str]:
        return sorted(
            site_id
            for site_id, outcome in self.outcomes.items()
            if outcome.status is SynthesisStatus.COMPLETE
        )

    @property
    def stalled_sites(self) -> list[str]:
        return sorted(
            site_id
            for site_id, outcome in self.outcomes.items()
            if outcome.status is SynthesisStatus.STALLED
        )


@dataclass
class SynthesisConfig:
    """Configuration for a synthesis run."""

    similarity_threshold: float = 0.5
    max_iterations: int = 10
    max_workers: int = 1
    parser_features: str = "html.parser"

    def __post_init__(self):
        """Reject bounds that would prevent termination or matching."""
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
        if not 0.0 < self.similarity_threshold <= 1.0:
            raise ValueError(
                f"similarity_threshold must be in (0, 1], got {self.similarity_threshold}"
            )

    @classmethod
    def from_settings(cls, source: Settings) -> "SynthesisConfig":
        return cls(
            similarity_threshold=source.similarity_threshold,
            max_iterations=source.max_iterations,
            max_workers=source.max_workers,
            parser_features=source.parser_features,
        )


class SynthesisOrchestrator:
    """Learn complete per-site extractors from pages and partial knowledge.

    Each round:
    1. Extract knowledge with the hypotheses not evaluated yet, merge it and
       record those hypotheses as crawled
    2. Stop if every site's extractor is complete
    3. Locate known values in the pages of incomplete sites and derive the
       missing fragments
    4. Stop if no incomplete site changed (fixpoint without progress)

    When the iteration bound is reached, the fragments derived in the last
    round still get one extraction pass so knowledge reflects them.

    The orchestrator exclusively owns ``attr_knowledge``, ``site_extractors``
    and ``crawled_extractors``; they are replaced between rounds, never
    mutated in place.
    """

    def __init__(
        self,
        config: SynthesisConfig | None = None,
        parser: DocumentParser | None = None,
        checkpoint: Checkpoint | None = None,
    ):
        """
        Initialize orchestrator.

        Args:
            config: Synthesis configuration (defaults to global settings)
            parser: Document parser (defaults to ``SoupParser``)
            checkpoint: Optional observability hook called with (label, value)
        """
        self.config = config or SynthesisConfig.from_settings(settings)
        self.parser = parser or SoupParser(self.config.parser_features)
        self.checkpoint = checkpoint

        self.attr_knowledge: Knowledge = {}
        self.site_extractors: SiteExtractor = {}
        self.crawled_extractors: SiteExtractor = {}

    def synthesize(
        self,
        attributes: Iterable[str],
        sites: Mapping[str, Site | Mapping[str, Any]],
        site_extractors: Mapping[str, Any] | None = None,
        knowledge: Mapping[str, Iterable[str]] | None = None,
    ) -> SynthesisResult:
        """
        Run synthesis until every site is complete or no progress is made.

        Args:
            attributes: Attributes of interest
            sites: Site descriptors keyed by site id
            site_extractors: Optional seeded extractors keyed by site id
            knowledge: Optional seeded knowledge per attribute

        Returns:
            SynthesisResult with per-site outcomes

        Raises:
            InvalidExtractorError: If a seeded extractor has the wrong shape
            InvalidSiteError: If a site descriptor is invalid
        """
        attributes = list(dict.fromkeys(attributes))
        sites = validate_sites(sites)
        seeded = validate_site_extractors(site_extractors or {})

        unknown = sorted(set(seeded) - set(sites))
        if unknown:
            raise InvalidExtractorError(f"Extractors given for unknown sites: {unknown}")

        self.attr_knowledge = validate_knowledge(knowledge or {})
        self.site_extractors = {
            site_id: pad_extractor(seeded.get(site_id, {}), attributes) for site_id in sites
        }
        self.crawled_extractors = {}

        logger.info(
            "synthesis_started",
            sites=len(sites),
            attributes=attributes,
            max_iterations=self.config.max_iterations,
        )

        pool = (
            ThreadPoolExecutor(max_workers=self.config.max_workers)
            if self.config.max_workers > 1
            else nullcontext()
        )
        with pool as executor:
            return self._run(sites, executor)

    def _run(self, sites: dict[str, Site], executor: Executor | None) -> SynthesisResult:
        reason = None
        iterations = 0

        for iteration in range(1, self.config.max_iterations + 1):
            iterations = iteration
            with structlog.contextvars.bound_contextvars(iteration=iteration):
                self._extract(sites, executor)

                incomplete = [
                    site_id
                    for site_id, extractor in self.site_extractors.items()
                    if is_incomplete(extractor)
                ]
                logger.info(
                    "synthesis_round",
                    incomplete=len(incomplete),
                    knowledge={attr: len(values) for attr, values in self.attr_knowledge.items()},
                )
                if not incomplete:
                    break

                changed = self._refine(sites, incomplete)
                if not changed:
                    reason = NO_PROGRESS
                    break
        else:
            # The last round changed fragments that were never evaluated
            reason = ITERATION_LIMIT
            with structlog.contextvars.bound_contextvars(iteration=iterations):
                self._extract(sites, executor)

        result = self._build_result(iterations, reason)
        self._checkpoint("finished", result)
        logger.info(
            "synthesis_finished",
            iterations=iterations,
            complete=result.complete_sites,
            stalled=result.stalled_sites,
        )
        return result

    def _extract(self, sites: dict[str, Site], executor: Executor | None) -> None:
        """Merge what the not yet evaluated hypotheses extract into knowledge."""
        increment = extract_knowledge(
            sites, self.site_extractors, self.crawled_extractors, self.parser, executor
        )
        self.attr_knowledge = merge_knowledge(self.attr_knowledge, increment)
        self.crawled_extractors = {**self.crawled_extractors, **self.site_extractors}
        self._checkpoint("knowledge", self.attr_knowledge)

    def _refine(self, sites: dict[str, Site], incomplete: list[str]) -> list[str]:
        """Derive missing fragments for ``incomplete`` sites; return the ones that changed."""
        next_extractors = dict(self.site_extractors)
        for site_id in incomplete:
            located = find_nodes_in_page(
                sites[site_id].pages,
                self.attr_knowledge,
                self.parser,
                self.config.similarity_threshold,
            )
            next_extractors[site_id] = refine_extractor(
                self.site_extractors[site_id], located, self.parser
            )

        changed = [
            site_id
            for site_id in incomplete
            if extractor_changed(self.site_extractors[site_id], next_extractors[site_id])
        ]
        self._checkpoint("refined", {site_id: next_extractors[site_id] for site_id in changed})

        self.site_extractors = next_extractors
        return changed

    def _build_result(self, iterations: int, reason: str | None) -> SynthesisResult:
        outcomes = {}
        for site_id, extractor in self.site_extractors.items():
            if not is_incomplete(extractor):
                outcomes[site_id] = SiteOutcome(SynthesisStatus.COMPLETE, extractor)
                continue
            missing = missing_fragments(extractor)
            logger.warning(
                "site_unsynthesizable",
                site_id=site_id,
                reason=reason,
                missing=[f"{container or '<root>'}:{attr}" for container, attr in missing],
            )
            outcomes[site_id] = SiteOutcome(
                SynthesisStatus.STALLED, extractor, missing=missing, reason=reason
            )

        return SynthesisResult(
            knowledge=self.attr_knowledge,
            site_extractors=self.site_extractors,
            outcomes=outcomes,
            iterations=iterations,
        )

    def _checkpoint(self, label: str, value: Any) -> None:
        """Report progress to the observability hook, isolated from the run."""
        logger.debug("synthesis_checkpoint", label=label)
        if self.checkpoint is None:
            return
        try:
            self.checkpoint(label, copy.deepcopy(value))
        except Exception:
            logger.warning("checkpoint_hook_failed", label=label, exc_info=True)
