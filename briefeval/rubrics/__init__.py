# briefeval/rubrics/__init__.py

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from briefeval.rubrics.registry import SectionDefinition, SectionGroup


class ResultStatus(str, Enum):
    SUCCESS = "SUCCESS"
    MISSING_CONTENT = "MISSING_CONTENT"
    ERROR = "ERROR"


ERROR_RATIONALE = "Error evaluating section"


def round_half_up(value: float) -> int:
    """Nearest integer with halves rounded up (2.5 -> 3, 12.5 -> 13)."""
    return int(math.floor(value + 0.5))


@dataclass
class SectionResult:
    """Evaluation result for one section. Exactly one per registry entry per run."""
    section_id: str
    display_name: str
    mode: str
    score: float
    max_points: int
    rationale: str
    evidence: str = ""
    recommendation: str = ""
    details: Dict[str, Any] = field(default_factory=dict)
    status: ResultStatus = ResultStatus.SUCCESS

    @classmethod
    def for_section(cls, section: SectionDefinition, **kwargs: Any) -> "SectionResult":
        return cls(
            section_id=section.id,
            display_name=section.display_name,
            mode=section.scoring_mode.value,
            max_points=section.max_points,
            **kwargs,
        )

    @classmethod
    def missing(cls, section: SectionDefinition) -> "SectionResult":
        return cls.for_section(
            section,
            score=0,
            rationale=section.missing_message,
            recommendation=section.missing_recommendation,
            status=ResultStatus.MISSING_CONTENT,
        )

    @classmethod
    def failed(cls, section: SectionDefinition, error: str) -> "SectionResult":
        return cls.for_section(
            section,
            score=0,
            rationale=ERROR_RATIONALE,
            details={"error": error},
            status=ResultStatus.ERROR,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "section_id": self.section_id,
            "display_name": self.display_name,
            "mode": self.mode,
            "score": self.score,
            "max_points": self.max_points,
            "rationale": self.rationale,
            "evidence": self.evidence,
            "recommendation": self.recommendation,
            "details": dict(self.details),
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SectionResult":
        return cls(
            section_id=data["section_id"],
            display_name=data.get("display_name", data["section_id"]),
            mode=data.get("mode", ""),
            score=data["score"],
            max_points=int(data.get("max_points", 0)),
            rationale=data.get("rationale", ""),
            evidence=data.get("evidence", ""),
            recommendation=data.get("recommendation", ""),
            details=dict(data.get("details") or {}),
            status=ResultStatus(data.get("status", ResultStatus.SUCCESS.value)),
        )


@dataclass
class AggregateReport:
    """All per-section results of one run plus the normalized total."""
    sections: Dict[str, SectionResult]  # registry order
    total_score: float
    max_score: int
    total_percentage: int
    rubric_version: str = "unversioned"
    generated_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="seconds")
    )

    def results_in_group(self, group: SectionGroup) -> List[SectionResult]:
        from briefeval.rubrics.registry import SECTIONS
        return [
            r for sid, r in self.sections.items()
            if sid in SECTIONS and SECTIONS[sid].group == group
        ]

    @property
    def failed_sections(self) -> List[str]:
        return [sid for sid, r in self.sections.items() if r.status == ResultStatus.ERROR]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sections": {sid: r.to_dict() for sid, r in self.sections.items()},
            "total_score": self.total_score,
            "max_score": self.max_score,
            "total_percentage": self.total_percentage,
            "rubric_version": self.rubric_version,
            "generated_at": self.generated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AggregateReport":
        sections = {
            sid: SectionResult.from_dict({"section_id": sid, **r})
            for sid, r in (data.get("sections") or {}).items()
        }
        return cls(
            sections=sections,
            total_score=data.get("total_score", sum(r.score for r in sections.values())),
            max_score=int(data.get("max_score", 0)),
            total_percentage=int(data["total_percentage"]),
            rubric_version=data.get("rubric_version", "unversioned"),
            generated_at=data.get("generated_at", ""),
        )


__all__ = ["AggregateReport", "ERROR_RATIONALE", "ResultStatus", "SectionResult", "round_half_up"]
