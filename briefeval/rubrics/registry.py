# briefeval/rubrics/registry.py
"""
Section registry for experiment briefs.

Each section has:
- scoring_mode: how it is judged (presence check, keyword heuristic, LLM)
- max_points: its weight in the aggregate total (0 = informational only)
- header_variants: the title lines that open the section in a document
- criteria: per-criterion point split, for multi-criterion LLM rubrics

Canonical scale: 3x10 presence + 4x10 rubric + 9x2 two-point sections = 88.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from briefeval.errors import ValidationError


class ScoringMode(str, Enum):
    PRESENCE = "presence"
    HEURISTIC = "heuristic"
    LLM_BINARY_2PT = "llm_binary_2pt"
    LLM_RUBRIC_NPT = "llm_rubric_npt"

    @property
    def uses_judge(self) -> bool:
        return self in (ScoringMode.LLM_BINARY_2PT, ScoringMode.LLM_RUBRIC_NPT)


class SectionGroup(str, Enum):
    """Presentation grouping only; has no effect on scoring."""
    PROBLEM_SPACE = "problem_space"
    SOLUTION_SPACE = "solution_space"


@dataclass(frozen=True)
class Criterion:
    key: str
    label: str
    points: int


@dataclass(frozen=True)
class SectionDefinition:
    """Complete, immutable definition of one brief section."""
    id: str
    display_name: str
    group: SectionGroup
    scoring_mode: ScoringMode
    max_points: int
    header_variants: Tuple[str, ...]
    criteria: Tuple[Criterion, ...] = field(default_factory=tuple)
    # Feedback used when the section text is empty
    missing_message: str = "Missing"
    missing_recommendation: str = ""

    @property
    def is_scored(self) -> bool:
        return self.max_points > 0


# =============================================================================
# SECTION DEFINITIONS (registry order == presentation order)
# =============================================================================

_DEFINITIONS: List[SectionDefinition] = [
    # Problem space
    SectionDefinition(
        id="outcome",
        display_name="Outcome",
        group=SectionGroup.PROBLEM_SPACE,
        scoring_mode=ScoringMode.PRESENCE,
        max_points=10,
        header_variants=("outcome",),
        missing_recommendation="Add the business outcome this experiment is meant to move.",
    ),
    SectionDefinition(
        id="trunkProblem",
        display_name="Trunk Problem",
        group=SectionGroup.PROBLEM_SPACE,
        scoring_mode=ScoringMode.PRESENCE,
        max_points=10,
        header_variants=("trunk problem",),
        missing_recommendation="Name the trunk problem that blocks the outcome.",
    ),
    SectionDefinition(
        id="branchProblem",
        display_name="Branch Problem",
        group=SectionGroup.PROBLEM_SPACE,
        scoring_mode=ScoringMode.PRESENCE,
        max_points=10,
        header_variants=("branch problem",),
        missing_recommendation="Name the branch problem this experiment addresses.",
    ),
    SectionDefinition(
        id="rootCause",
        display_name="Root Cause",
        group=SectionGroup.PROBLEM_SPACE,
        scoring_mode=ScoringMode.LLM_RUBRIC_NPT,
        max_points=10,
        header_variants=("root cause statement", "root cause", "root cause problem statement"),
        criteria=(
            Criterion("length", "Length", 1),
            Criterion("format", "Format", 1),
            Criterion("focus", "Focus", 4),
            Criterion("clarity", "Clarity", 4),
        ),
        missing_message="Missing root cause statement",
        missing_recommendation=(
            "Add a one or two sentence root cause in the form "
            "\"[trunk problem] because [reason]\", focused on user behavior."
        ),
    ),
    SectionDefinition(
        id="supportingData",
        display_name="Supporting Data",
        group=SectionGroup.PROBLEM_SPACE,
        scoring_mode=ScoringMode.LLM_RUBRIC_NPT,
        max_points=10,
        header_variants=("supporting data", "why"),
        criteria=(
            Criterion("structure", "Structure & Format", 2),
            Criterion("relevance", "Relevance", 3),
            Criterion("clarity", "Clarity & Specificity", 3),
            Criterion("sources", "Source Attribution", 2),
        ),
        missing_message="Missing supporting data",
        missing_recommendation="Add bulleted, sourced evidence that supports the root cause.",
    ),
    SectionDefinition(
        id="hypothesis",
        display_name="Hypothesis",
        group=SectionGroup.PROBLEM_SPACE,
        scoring_mode=ScoringMode.LLM_RUBRIC_NPT,
        max_points=10,
        header_variants=("hypothesis statement", "hypothesis"),
        criteria=(
            Criterion("belief", "Belief Statement", 2),
            Criterion("reason", "Reason", 2),
            Criterion("falsifiability", "Falsifiability", 3),
            Criterion("insights", "Reflects Insights", 3),
        ),
        missing_message="Missing hypothesis statement",
        missing_recommendation="Add a present-tense, falsifiable belief with a clear rationale.",
    ),
    # Solution space
    SectionDefinition(
        id="prediction",
        display_name="Prediction",
        group=SectionGroup.SOLUTION_SPACE,
        scoring_mode=ScoringMode.LLM_RUBRIC_NPT,
        max_points=10,
        header_variants=("prediction",),
        criteria=(
            Criterion("format", "Format", 2),
            Criterion("solution", "Solution Alignment", 3),
            Criterion("testability", "Testability", 3),
            Criterion("flexibility", "Multiple Tests", 2),
        ),
        missing_message="Missing prediction",
        missing_recommendation="Add an \"If ... then ...\" prediction with a measurable outcome.",
    ),
    SectionDefinition(
        id="testTitle",
        display_name="Test Title",
        group=SectionGroup.SOLUTION_SPACE,
        scoring_mode=ScoringMode.HEURISTIC,
        max_points=0,
        header_variants=("test title",),
        missing_message="Missing test title",
        missing_recommendation="Add a short test title (under 50 characters).",
    ),
    SectionDefinition(
        id="shortDescription",
        display_name="Short Description",
        group=SectionGroup.SOLUTION_SPACE,
        scoring_mode=ScoringMode.PRESENCE,
        max_points=0,
        header_variants=("short description",),
        missing_message="Missing short description",
        missing_recommendation="Add a one paragraph description of the test.",
    ),
    SectionDefinition(
        id="learningObjective",
        display_name="Learning Objective",
        group=SectionGroup.SOLUTION_SPACE,
        scoring_mode=ScoringMode.LLM_BINARY_2PT,
        max_points=2,
        header_variants=("test learning objective", "learning objective"),
        missing_message="Missing learning objective",
        missing_recommendation=(
            "No learning objective provided. Please add a clear, single learning objective "
            "that states what you want to learn and the expected user behavior."
        ),
    ),
    SectionDefinition(
        id="testType",
        display_name="Test Type",
        group=SectionGroup.SOLUTION_SPACE,
        scoring_mode=ScoringMode.PRESENCE,
        max_points=0,
        header_variants=("test type",),
        missing_message="Missing test type",
        missing_recommendation="State the test type (for example A/B, multivariate, holdout).",
    ),
    SectionDefinition(
        id="testVariant",
        display_name="Test Variant Description",
        group=SectionGroup.SOLUTION_SPACE,
        scoring_mode=ScoringMode.LLM_BINARY_2PT,
        max_points=2,
        header_variants=("test variant description",),
        missing_message="Missing test variant description",
        missing_recommendation=(
            "No test variant description provided. Please add a clear description of the "
            "variant experience and how it differs from the control."
        ),
    ),
    SectionDefinition(
        id="controlVariant",
        display_name="Control Variant Description",
        group=SectionGroup.SOLUTION_SPACE,
        scoring_mode=ScoringMode.LLM_BINARY_2PT,
        max_points=2,
        header_variants=("control variant description",),
        missing_message="Missing control variant description",
        missing_recommendation=(
            "No control variant description provided. Please add a clear description of "
            "the existing baseline experience."
        ),
    ),
    SectionDefinition(
        id="audience",
        display_name="Audience",
        group=SectionGroup.SOLUTION_SPACE,
        scoring_mode=ScoringMode.LLM_BINARY_2PT,
        max_points=2,
        header_variants=("audience",),
        missing_message="Missing audience definition",
        missing_recommendation=(
            "No audience definition provided. Please add a clear description of the target "
            "audience with specific criteria and randomization method."
        ),
    ),
    SectionDefinition(
        id="duration",
        display_name="Duration",
        group=SectionGroup.SOLUTION_SPACE,
        scoring_mode=ScoringMode.HEURISTIC,
        max_points=2,
        header_variants=("duration",),
        missing_message="Missing duration",
        missing_recommendation="State how long the test runs and why that length is enough.",
    ),
    SectionDefinition(
        id="successCriteria",
        display_name="Success Criteria",
        group=SectionGroup.SOLUTION_SPACE,
        scoring_mode=ScoringMode.HEURISTIC,
        max_points=2,
        header_variants=("success criteria",),
        missing_message="Missing success criteria",
        missing_recommendation="Name the primary metric and the threshold that counts as a win.",
    ),
    SectionDefinition(
        id="dataRequirements",
        display_name="Data Requirements",
        group=SectionGroup.SOLUTION_SPACE,
        scoring_mode=ScoringMode.HEURISTIC,
        max_points=2,
        header_variants=("data requirements",),
        missing_message="Missing data requirements",
        missing_recommendation="List the events and metrics to track and how they are collected.",
    ),
    SectionDefinition(
        id="considerations",
        display_name="Considerations & Investigation Requirements",
        group=SectionGroup.SOLUTION_SPACE,
        scoring_mode=ScoringMode.HEURISTIC,
        max_points=2,
        header_variants=(
            "consideration or investigative requirements",
            "considerations and investigation requirements",
            "considerations",
        ),
        missing_message="Missing considerations",
        missing_recommendation="Describe risks, dependencies and open questions.",
    ),
    SectionDefinition(
        id="whatNext",
        display_name="What Next",
        group=SectionGroup.SOLUTION_SPACE,
        scoring_mode=ScoringMode.HEURISTIC,
        max_points=2,
        header_variants=("what next",),
        missing_message="Missing what next section",
        missing_recommendation="Describe the next step for both a win and a loss.",
    ),
]


SECTIONS: Mapping[str, SectionDefinition] = MappingProxyType({d.id: d for d in _DEFINITIONS})


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def lookup(section_id: str) -> Optional[SectionDefinition]:
    """Return the definition for section_id, or None if it is not registered."""
    return SECTIONS.get(section_id)


def require_llm_section(section_id: Optional[str]) -> SectionDefinition:
    """
    Resolve a section that is judged by the LLM.

    Raises:
        ValidationError: unknown section id, or a section not judged by the LLM
    """
    section = lookup(section_id or "")
    if section is None or not section.scoring_mode.uses_judge:
        raise ValidationError("Invalid section type")
    return section


def llm_sections() -> List[SectionDefinition]:
    return [s for s in SECTIONS.values() if s.scoring_mode.uses_judge]


def sections_by_group(group: SectionGroup) -> List[SectionDefinition]:
    return [s for s in SECTIONS.values() if s.group == group]


def total_max_points(sections: Optional[Mapping[str, SectionDefinition]] = None) -> int:
    """Denominator of the aggregate percentage (88 for the canonical registry)."""
    sections = SECTIONS if sections is None else sections
    return sum(s.max_points for s in sections.values())


def registry_summary() -> Dict[str, Dict[str, object]]:
    return {
        s.id: {
            "id": s.id,
            "name": s.display_name,
            "group": s.group.value,
            "scoring_mode": s.scoring_mode.value,
            "max_points": s.max_points,
            "header_variants": list(s.header_variants),
            "criteria": {c.key: c.points for c in s.criteria},
        }
        for s in SECTIONS.values()
    }
