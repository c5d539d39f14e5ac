# briefeval/export/report.py
"""
Export an AggregateReport as a JSON artifact or a Word-compatible HTML report.

The JSON artifact round-trips losslessly through ``load_report_json``. The
HTML report is rendered from a packaged Jinja2 template and is meant to be
saved with a ``.doc`` extension, which word processors open directly.
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup, escape

from briefeval.rubrics import AggregateReport, SectionResult, round_half_up
from briefeval.rubrics.registry import SectionGroup


WORD_MIME_TYPE = "application/msword"
JSON_MIME_TYPE = "application/json"

# Recommendations the judge emits when nothing needs changing
_NO_OP_RECOMMENDATIONS = {
    "No recommendation needed as the section meets the criteria of the rubric.",
    "No recommendations, all requirements are met.",
}

_HIDDEN_DETAIL_KEYS = {"error", "status"}


# =============================================================================
# JSON ARTIFACT
# =============================================================================

def report_to_json(report: AggregateReport, *, indent: int = 2) -> str:
    return json.dumps(report.to_dict(), indent=indent, ensure_ascii=False)


def load_report_json(raw: str) -> AggregateReport:
    return AggregateReport.from_dict(json.loads(raw))


# =============================================================================
# HTML REPORT
# =============================================================================

def section_percentage(score: float, max_points: int) -> Optional[int]:
    """Per-section percentage; None for informational (0-point) sections."""
    if max_points <= 0:
        return None
    return round_half_up(100 * score / max_points)


def score_class(score: float, max_points: int) -> str:
    if max_points <= 0:
        return "score-na"
    pct = 100 * score / max_points
    if max_points == 2:
        high, medium = 100, 50
    elif max_points == 8:
        high, medium = 75, 50
    else:
        high, medium = 80, 60
    if pct >= high:
        return "score-high"
    if pct >= medium:
        return "score-medium"
    return "score-low"


def format_criterion(key: str) -> str:
    """'falsifiability' -> 'Falsifiability', 'successPath' -> 'Success Path'."""
    spaced = "".join(f" {ch}" if ch.isupper() else ch for ch in key)
    return spaced[:1].upper() + spaced[1:]


def _nl2br(value: Any) -> Markup:
    return Markup("<br>").join(escape(str(value)).split("\n"))


def _environment() -> Environment:
    env = Environment(
        loader=PackageLoader("briefeval", "export/templates"),
        autoescape=select_autoescape(["html"]),
    )
    env.filters["nl2br"] = _nl2br
    return env


def _section_view(result: SectionResult, content: str) -> Dict[str, Any]:
    recommendation = result.recommendation
    if recommendation in _NO_OP_RECOMMENDATIONS:
        recommendation = ""
    return {
        "name": result.display_name,
        "score": result.score,
        "max_points": result.max_points,
        "percentage": section_percentage(result.score, result.max_points),
        "score_class": score_class(result.score, result.max_points),
        "content": (content or "").strip(),
        "assessment": result.rationale,
        "evidence": result.evidence,
        "recommendation": recommendation,
        "criteria": [
            (format_criterion(k), v)
            for k, v in result.details.items()
            if k not in _HIDDEN_DETAIL_KEYS and v not in (None, "")
        ],
        "error": result.details.get("error"),
    }


def render_html(
    report: AggregateReport,
    document: Optional[Mapping[str, str]] = None,
    *,
    generated_on: Optional[date] = None,
) -> str:
    """
    Render the Word-compatible HTML report.

    Args:
        report: evaluation results
        document: optional section id -> submitted text, shown above each feedback block
        generated_on: report date (defaults to today)
    """
    document = document or {}
    generated_on = generated_on or date.today()

    groups: List[Dict[str, Any]] = []
    for group, title in (
        (SectionGroup.PROBLEM_SPACE, "Problem Space"),
        (SectionGroup.SOLUTION_SPACE, "Solution Space"),
    ):
        groups.append({
            "title": title,
            "sections": [
                _section_view(r, document.get(r.section_id, ""))
                for r in report.results_in_group(group)
            ],
        })

    template = _environment().get_template("report.html")
    return template.render(
        report=report,
        groups=groups,
        generated_on=generated_on.strftime("%B %d, %Y").replace(" 0", " "),
    )


def word_filename(on: Optional[date] = None) -> str:
    on = on or date.today()
    return f"experiment-evaluation-report-{on.isoformat()}.doc"


def json_filename(on: Optional[date] = None) -> str:
    on = on or date.today()
    return f"experiment-evaluation-report-{on.isoformat()}.json"
