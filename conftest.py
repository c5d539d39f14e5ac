# conftest.py
"""
Shared fixtures: fake LLM judges and fake OpenAI chat completions.

No test talks to a real provider. The app reads its credential at import,
so a dummy key is set before any test module imports it.
"""

from __future__ import annotations

import json
import os
from types import SimpleNamespace
from typing import Any, Dict, Optional

import pytest

os.environ.setdefault("BRIEFEVAL_LLM_API_KEY", "test-key")

from briefeval.errors import JudgeFailure, UpstreamError  # noqa: E402
from briefeval.llm.schemas import TOOL_NAME, BinaryVerdict, RubricVerdict  # noqa: E402
from briefeval.rubrics.registry import SECTIONS, ScoringMode  # noqa: E402


# =============================================================================
# FAKE JUDGE
# =============================================================================

class FakeJudge:
    """
    Stands in for LlmJudge. Returns full marks unless told otherwise.

    failures: section id -> message raised as JudgeFailure
    crashes: section ids that raise a plain RuntimeError
    """
    rubric_version = "test-rubric"

    def __init__(
        self,
        verdicts: Optional[Dict[str, Any]] = None,
        failures: Optional[Dict[str, str]] = None,
        crashes=(),
        ping_error: Optional[str] = None,
    ):
        self.verdicts = verdicts or {}
        self.failures = failures or {}
        self.crashes = set(crashes)
        self.ping_error = ping_error
        self.calls = []

    async def judge(self, section_id: str, content: str):
        self.calls.append((section_id, content))
        if section_id in self.failures:
            raise JudgeFailure(section_id, self.failures[section_id])
        if section_id in self.crashes:
            raise RuntimeError("connection reset")
        if section_id in self.verdicts:
            return self.verdicts[section_id]

        section = SECTIONS[section_id]
        if section.scoring_mode == ScoringMode.LLM_BINARY_2PT:
            return BinaryVerdict(
                score=2.0,
                reason="Clear and specific",
                evidence=content[:40],
                recommendation="No recommendations, all requirements are met.",
            )
        return RubricVerdict(
            score=float(section.max_points),
            summary="Meets every criterion",
            details={c.key: f"{c.points}/{c.points} - ok" for c in section.criteria},
            recommendation="",
        )

    async def ping(self) -> str:
        if self.ping_error:
            raise UpstreamError(self.ping_error)
        return "OpenAI API is working correctly!"

    @property
    def called_sections(self):
        return [sid for sid, _ in self.calls]


@pytest.fixture
def fake_judge():
    return FakeJudge()


@pytest.fixture
def make_fake_judge():
    return FakeJudge


# =============================================================================
# FAKE OPENAI CLIENT
# =============================================================================

def _completion(arguments: Optional[Any] = None, *, name: str = TOOL_NAME, content: Optional[str] = None):
    if arguments is None:
        tool_calls = None
    else:
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments)
        tool_calls = [SimpleNamespace(function=SimpleNamespace(name=name, arguments=arguments))]
    message = SimpleNamespace(tool_calls=tool_calls, content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeCompletions:
    def __init__(self, response=None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class FakeAsyncOpenAI:
    """Just enough of AsyncOpenAI for chat.completions.create."""

    def __init__(self, response=None, error: Optional[Exception] = None):
        self.completions = FakeCompletions(response, error)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def make_completion():
    return _completion


@pytest.fixture
def make_client():
    return FakeAsyncOpenAI


# =============================================================================
# SAMPLE BRIEF
# =============================================================================

FULL_BRIEF = {
    "outcome": "Increase checkout revenue",
    "trunkProblem": "Too few visitors complete a purchase",
    "branchProblem": "Mobile checkout abandonment is high",
    "rootCause": "Users abandon at the payment step because the form is long",
    "supportingData": "Analytics show 40% drop-off at payment (Q2 funnel report)",
    "hypothesis": "We believe a one-page checkout will increase completion because it removes steps",
    "prediction": "If we ship one-page checkout, mobile conversion will increase by 5%",
    "testTitle": "One-page mobile checkout",
    "shortDescription": "Collapse checkout into a single page on mobile",
    "learningObjective": "Learn whether fewer steps increase mobile checkout completion",
    "testType": "A/B test",
    "testVariant": "Single-page checkout with inline payment",
    "controlVariant": "Current three-step checkout",
    "audience": "All mobile web visitors in the US",
    "duration": "We will run this for 4 weeks because we expect sufficient statistical power at current traffic volume.",
    "successCriteria": "Conversion rate increases by 5% with 95% confidence.",
    "dataRequirements": "Track checkout events and collect order metrics in the warehouse.",
    "considerations": (
        "The main risk is a dependency on the payments team shipping the new widget on time, "
        "and a limitation is that mobile traffic is lower during the summer holidays."
    ),
    "whatNext": "If the test is a success we roll out to all users; if it fails we try an alternative layout.",
}


@pytest.fixture
def full_brief():
    return dict(FULL_BRIEF)
