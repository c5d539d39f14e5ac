"""
Tests for JSON and Word-compatible HTML export.
"""

import asyncio
from datetime import date

import pytest

from briefeval.export.report import (
    format_criterion,
    load_report_json,
    render_html,
    report_to_json,
    score_class,
    section_percentage,
    word_filename,
)
from briefeval.rubrics.scorer import ScoringEngine


@pytest.fixture
def report(make_fake_judge, full_brief):
    judge = make_fake_judge(failures={"prediction": "No function call in response"})
    return asyncio.run(ScoringEngine(judge).evaluate(full_brief))


def test_json_round_trip(report):
    restored = load_report_json(report_to_json(report))
    assert restored.to_dict() == report.to_dict()
    assert list(restored.sections) == list(report.sections)


def test_html_report_contents(report, full_brief):
    html = render_html(report, full_brief, generated_on=date(2025, 9, 1))

    assert "Generated on September 1, 2025" in html
    assert "Problem Space" in html and "Solution Space" in html
    assert html.index("Outcome") < html.index("Learning Objective")
    assert full_brief["rootCause"] in html
    assert "Belief: 2/2 - ok" in html.replace("<strong>", "").replace("</strong>", "")
    assert "Issue:" in html
    assert "Evaluation failed: No function call in response" in html
    assert f"{report.total_percentage}%" in html


def test_html_skips_boilerplate_recommendation(report):
    html = render_html(report)
    assert "No recommendations, all requirements are met." not in html


def test_html_escapes_content(report):
    html = render_html(report, {"outcome": "<script>alert(1)</script>\nsecond line"})
    assert "<script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;<br>second line" in html


def test_informational_sections_show_na(report):
    html = render_html(report)
    assert "N/A" in html


@pytest.mark.parametrize("score, max_points, expected", [
    (10, 10, "score-high"),
    (8, 10, "score-high"),
    (6, 10, "score-medium"),
    (5, 10, "score-low"),
    (2, 2, "score-high"),
    (1, 2, "score-medium"),
    (0, 2, "score-low"),
    (6, 8, "score-high"),
    (4, 8, "score-medium"),
    (0, 0, "score-na"),
])
def test_score_class(score, max_points, expected):
    assert score_class(score, max_points) == expected


@pytest.mark.parametrize("score, max_points, expected", [
    (1, 8, 13),
    (1, 2, 50),
    (7, 10, 70),
    (0, 0, None),
])
def test_section_percentage(score, max_points, expected):
    assert section_percentage(score, max_points) == expected


def test_format_criterion():
    assert format_criterion("falsifiability") == "Falsifiability"
    assert format_criterion("successPath") == "Success Path"


def test_word_filename():
    assert word_filename(date(2025, 9, 1)) == "experiment-evaluation-report-2025-09-01.doc"
