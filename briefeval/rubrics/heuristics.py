# briefeval/rubrics/heuristics.py
"""
Keyword heuristics for sections scored without the LLM.

Each scored section owns a fixed pair of boolean predicates. Both true earns
full marks, exactly one earns half (rounded up), neither earns zero. Feedback
comes from a small set of canned messages keyed by how many predicates held.
The informational test title carries a single length check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from briefeval.features.keywords import has_cue, word_count
from briefeval.rubrics import SectionResult, round_half_up
from briefeval.rubrics.registry import SectionDefinition


TITLE_MAX_CHARS = 50
CONSIDERATIONS_MIN_WORDS = 20


@dataclass(frozen=True)
class Predicate:
    label: str
    test: Callable[[str], bool]


def _cue(label: str, cue: str) -> Predicate:
    return Predicate(label, lambda text: has_cue(text, cue))


@dataclass(frozen=True)
class HeuristicRule:
    predicates: Tuple[Predicate, ...]
    # keyed by number of predicates satisfied
    messages: Dict[int, str]
    recommendations: Dict[int, str]


HEURISTIC_RULES: Dict[str, HeuristicRule] = {
    "duration": HeuristicRule(
        predicates=(
            _cue("Timeframe", "timeframe"),
            _cue("Rationale", "rationale"),
        ),
        messages={
            2: "Clear duration with supporting rationale",
            1: "Duration needs more justification",
            0: "Duration is unclear or missing rationale",
        },
        recommendations={
            1: "State an explicit run length (e.g. 4 weeks) and explain why it is sufficient.",
            0: "State an explicit run length (e.g. 4 weeks) and explain why it is sufficient.",
        },
    ),
    "successCriteria": HeuristicRule(
        predicates=(
            _cue("Metric", "metric_change"),
            _cue("Threshold", "threshold"),
        ),
        messages={
            2: "Clear success metrics and thresholds",
            1: "Success criteria needs more specific thresholds",
            0: "Success criteria lack clear metrics or thresholds",
        },
        recommendations={
            1: "Pair the target metric change with a statistical threshold (e.g. 95% confidence).",
            0: "Name the metric expected to move and the statistical threshold for success.",
        },
    ),
    "dataRequirements": HeuristicRule(
        predicates=(
            _cue("Metrics", "tracked_data"),
            _cue("Collection", "collection"),
        ),
        messages={
            2: "Clear metrics and collection methods specified",
            1: "Data requirements need more detail",
            0: "Data requirements are unclear or incomplete",
        },
        recommendations={
            1: "List both the events or metrics to track and how they are collected.",
            0: "List the events or metrics to track and how they are collected.",
        },
    ),
    "considerations": HeuristicRule(
        predicates=(
            _cue("Risks", "risk"),
            Predicate("Detail", lambda text: word_count(text) >= CONSIDERATIONS_MIN_WORDS),
        ),
        messages={
            2: "Thorough consideration of risks and dependencies",
            1: "Considerations need more detail",
            0: "Considerations are missing or lack depth",
        },
        recommendations={
            1: "Expand on the risks, dependencies and limitations of the test.",
            0: "Describe the risks, dependencies and limitations of the test.",
        },
    ),
    "whatNext": HeuristicRule(
        predicates=(
            _cue("Success scenario", "success_path"),
            _cue("Failure scenario", "failure_path"),
        ),
        messages={
            2: "Clear plans for both success and failure scenarios",
            1: "What next section needs more scenarios",
            0: "What next section is incomplete or missing scenarios",
        },
        recommendations={
            1: "Describe the next step for both a winning and a losing result.",
            0: "Describe the next step for both a winning and a losing result.",
        },
    ),
    "testTitle": HeuristicRule(
        predicates=(
            Predicate("Length", lambda text: len(text.strip()) <= TITLE_MAX_CHARS),
        ),
        messages={
            1: "Valid test title",
            0: f"Test title exceeds {TITLE_MAX_CHARS} characters",
        },
        recommendations={
            0: f"Shorten the title to be under {TITLE_MAX_CHARS} characters",
        },
    ),
}


def band_score(max_points: int, satisfied: int, total: int = 2) -> int:
    """Map the number of satisfied predicates onto the section's scale."""
    if satisfied >= total:
        return max_points
    if satisfied > 0:
        return round_half_up(max_points / 2)
    return 0


def score_heuristic(section: SectionDefinition, text: str) -> SectionResult:
    """
    Score a HEURISTIC section from its predicates.

    Empty text short-circuits to the section's missing-content result.
    """
    if not (text or "").strip():
        return SectionResult.missing(section)

    rule = HEURISTIC_RULES[section.id]
    outcomes = [(p.label, p.test(text)) for p in rule.predicates]
    satisfied = sum(1 for _, ok in outcomes if ok)

    return SectionResult.for_section(
        section,
        score=band_score(section.max_points, satisfied, len(rule.predicates)),
        rationale=rule.messages[satisfied],
        recommendation=rule.recommendations.get(satisfied, ""),
        details={label: "met" if ok else "not met" for label, ok in outcomes},
    )
