# briefeval/llm/schemas.py
"""
Structured-output contract with the LLM judge.

Two shapes exist, one per LLM scoring mode:
- 2-point sections:  {score, reason, evidence, recommendation}
- N-point sections:  {score, summary, details, recommendation?}

The tool schema sent to the model and the pydantic models used to validate
its reply are built from the same section definition.
"""

from __future__ import annotations

from typing import Any, Dict, Union

from pydantic import BaseModel, Field, model_validator

from briefeval.rubrics.registry import ScoringMode, SectionDefinition


TOOL_NAME = "evaluate_section"


class BinaryVerdict(BaseModel):
    """Judge reply for LLM_BINARY_2PT sections."""
    score: float = Field(..., strict=True)
    reason: str = Field(..., min_length=1)
    evidence: str
    recommendation: str

    @model_validator(mode="after")
    def _evidence_for_credit(self) -> "BinaryVerdict":
        # a zero score may quote nothing
        if self.score > 0 and not self.evidence.strip():
            raise ValueError("evidence is required when score is above 0")
        return self


class RubricVerdict(BaseModel):
    """Judge reply for LLM_RUBRIC_NPT sections."""
    score: float = Field(..., strict=True)
    summary: str
    details: Dict[str, Any]
    recommendation: str = ""


Verdict = Union[BinaryVerdict, RubricVerdict]


def verdict_model(section: SectionDefinition):
    if section.scoring_mode == ScoringMode.LLM_BINARY_2PT:
        return BinaryVerdict
    if section.scoring_mode == ScoringMode.LLM_RUBRIC_NPT:
        return RubricVerdict
    raise ValueError(f"Section '{section.id}' is not judged by the LLM")


def build_tool(section: SectionDefinition) -> Dict[str, Any]:
    """OpenAI tool definition for the forced evaluate_section call."""
    score = {
        "type": "number",
        "minimum": 0,
        "maximum": section.max_points,
        "description": f"Score (0-{section.max_points})",
    }

    if section.scoring_mode == ScoringMode.LLM_BINARY_2PT:
        parameters = {
            "type": "object",
            "properties": {
                "score": score,
                "reason": {"type": "string", "description": "Brief explanation of the score"},
                "evidence": {"type": "string", "description": "Short quote or excerpt from the section"},
                "recommendation": {"type": "string", "description": "Suggestion for improvement if needed"},
            },
            "required": ["score", "reason", "evidence", "recommendation"],
        }
        description = f"Scores the {section.display_name} section of an experiment brief on a 0-2 scale"
    else:
        parameters = {
            "type": "object",
            "properties": {
                "score": score,
                "summary": {"type": "string", "description": "A brief summary of the evaluation"},
                "details": {
                    "type": "object",
                    "description": "Score and explanation for each criterion",
                    "properties": {
                        c.key: {"type": "string", "description": f"{c.label} ({c.points} points)"}
                        for c in section.criteria
                    },
                },
                "recommendation": {"type": "string", "description": "Specific improvement suggestion"},
            },
            "required": ["score", "summary", "details"],
        }
        description = f"Scores the {section.display_name} section of an experiment brief against its rubric"

    return {
        "type": "function",
        "function": {
            "name": TOOL_NAME,
            "description": description,
            "parameters": parameters,
        },
    }
