# briefeval/rubrics/scorer.py
"""
Scoring engine for experiment briefs.

For every registered section, dispatches on its scoring mode:
1. PRESENCE: full marks if the section has any text
2. HEURISTIC: keyword predicate pair (see heuristics.py)
3. LLM_*: empty text short-circuits locally, otherwise one judge call

Sections are evaluated concurrently and merged in registry order once all of
them have finished. A failing section becomes a zero-score ERROR result and
never affects any other section.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Mapping, Optional, Protocol

from briefeval.errors import JudgeFailure
from briefeval.llm.schemas import BinaryVerdict, Verdict
from briefeval.rubrics import AggregateReport, ResultStatus, SectionResult, round_half_up
from briefeval.rubrics.catalog import UNVERSIONED
from briefeval.rubrics.heuristics import score_heuristic
from briefeval.rubrics.registry import SECTIONS, ScoringMode, SectionDefinition, total_max_points

logger = logging.getLogger(__name__)


class Judge(Protocol):
    async def judge(self, section_id: str, content: str) -> Verdict:
        ...


def score_presence(section: SectionDefinition, text: str) -> SectionResult:
    if text.strip():
        return SectionResult.for_section(section, score=section.max_points, rationale="Present")
    return SectionResult.for_section(
        section,
        score=0,
        rationale=section.missing_message,
        recommendation=section.missing_recommendation,
        status=ResultStatus.MISSING_CONTENT,
    )


def verdict_to_result(section: SectionDefinition, verdict: Verdict) -> SectionResult:
    """Copy a judge verdict into a SectionResult without reinterpreting it."""
    if isinstance(verdict, BinaryVerdict):
        return SectionResult.for_section(
            section,
            score=verdict.score,
            rationale=verdict.reason,
            evidence=verdict.evidence,
            recommendation=verdict.recommendation,
        )
    return SectionResult.for_section(
        section,
        score=verdict.score,
        rationale=verdict.summary,
        recommendation=verdict.recommendation,
        details=dict(verdict.details),
    )


def compute_total_percentage(total_score: float, max_score: int) -> int:
    """100 * total / max rounded half up, clamped to [0, 100]; 0 when nothing is scored."""
    if max_score <= 0:
        return 0
    pct = round_half_up(100 * total_score / max_score)
    return max(0, min(100, pct))


class ScoringEngine:
    """Evaluates a whole brief into an AggregateReport."""

    def __init__(
        self,
        judge: Judge,
        *,
        sections: Mapping[str, SectionDefinition] = SECTIONS,
        max_concurrency: int = 8,
        rubric_version: Optional[str] = None,
    ):
        self.judge = judge
        self.sections = sections
        self.max_concurrency = max_concurrency
        self.rubric_version = rubric_version or getattr(judge, "rubric_version", None) or UNVERSIONED
        # bounds in-flight judge calls across all runs sharing this engine
        self._semaphore = asyncio.Semaphore(max_concurrency)

        self._handlers: Dict[ScoringMode, Callable[[SectionDefinition, str], Awaitable[SectionResult]]] = {
            ScoringMode.PRESENCE: self._presence,
            ScoringMode.HEURISTIC: self._heuristic,
            ScoringMode.LLM_BINARY_2PT: self._judged,
            ScoringMode.LLM_RUBRIC_NPT: self._judged,
        }

    async def _presence(self, section: SectionDefinition, text: str) -> SectionResult:
        return score_presence(section, text)

    async def _heuristic(self, section: SectionDefinition, text: str) -> SectionResult:
        return score_heuristic(section, text)

    async def _judged(self, section: SectionDefinition, text: str) -> SectionResult:
        if not text.strip():
            return SectionResult.missing(section)
        async with self._semaphore:
            verdict = await self.judge.judge(section.id, text)
        return verdict_to_result(section, verdict)

    async def _evaluate_section(self, section: SectionDefinition, text: str) -> SectionResult:
        handler = self._handlers[section.scoring_mode]
        try:
            return await handler(section, text)
        except JudgeFailure as e:
            logger.warning("Judge failed for section %s: %s", section.id, e.message)
            return SectionResult.failed(section, f"Evaluation failed: {e.message}")
        except Exception as e:
            logger.exception("Unexpected error evaluating section %s", section.id)
            return SectionResult.failed(section, f"Evaluation failed: {e}")

    async def evaluate(self, document: Mapping[str, str]) -> AggregateReport:
        """
        Score every registered section of a brief.

        Args:
            document: section id -> raw text. Missing ids count as empty; ids
                not in the registry are ignored. Never mutated.

        Returns:
            AggregateReport with exactly one result per registered section
        """
        ordered = list(self.sections.values())
        results = await asyncio.gather(
            *(self._evaluate_section(s, document.get(s.id) or "") for s in ordered)
        )

        by_id = {s.id: r for s, r in zip(ordered, results)}
        total = sum(r.score for r in results)
        max_score = total_max_points(self.sections)
        report = AggregateReport(
            sections=by_id,
            total_score=total,
            max_score=max_score,
            total_percentage=compute_total_percentage(total, max_score),
            rubric_version=self.rubric_version,
        )

        if report.failed_sections:
            logger.warning("Evaluation finished with failed sections: %s", ", ".join(report.failed_sections))
        logger.info("Evaluation finished: %s/%s (%s%%)", total, max_score, report.total_percentage)
        return report
