# briefeval/llm/judge.py
"""
LLM judge for rubric-scored sections.

Sends one section's text plus its catalog prompt to an OpenAI-compatible
chat endpoint, forces a structured ``evaluate_section`` tool call and
validates the arguments against the section's verdict model. One attempt per
call: every failure is raised as JudgeFailure and never retried here.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError as SchemaError

from briefeval.config import Settings
from briefeval.errors import JudgeFailure, UpstreamError
from briefeval.llm.schemas import TOOL_NAME, Verdict, build_tool, verdict_model
from briefeval.rubrics.catalog import PromptCatalog, load_catalog
from briefeval.rubrics.registry import SectionDefinition, lookup

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "You are an expert experiment evaluator. Evaluate the content based on the provided "
    "criteria and return a structured evaluation."
)

PING_PROMPT = 'Say "OpenAI API is working correctly!"'


def truncate(text: str, max_chars: int) -> str:
    """Keep head and tail of overlong section text."""
    if len(text) <= max_chars:
        return text
    head_len = int(max_chars * 0.7)
    tail_len = int(max_chars * 0.3)
    return text[:head_len] + "\n\n[...TRUNCATED...]\n\n" + text[-tail_len:]


class LlmJudge:
    """Async client that scores one section per call."""

    def __init__(
        self,
        client: AsyncOpenAI,
        catalog: PromptCatalog,
        *,
        model: str,
        temperature: float = 0.3,
        max_tokens: int = 1000,
        max_chars: int = 12000,
    ):
        self.client = client
        self.catalog = catalog
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_chars = max_chars

    @classmethod
    def from_settings(cls, settings: Settings, catalog: PromptCatalog) -> "LlmJudge":
        client = AsyncOpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout,
            max_retries=0,
        )
        return cls(
            client,
            catalog,
            model=settings.model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )

    @property
    def rubric_version(self) -> str:
        return self.catalog.version

    def _resolve(self, section_id: str) -> tuple:
        section = lookup(section_id)
        if section is None or not section.scoring_mode.uses_judge:
            raise JudgeFailure(section_id, "Section is not judged by the LLM")
        prompt = self.catalog.prompt_for(section_id)
        if prompt is None:
            raise JudgeFailure(section_id, "No rubric prompt loaded for section")
        return section, prompt

    async def judge(self, section_id: str, content: str) -> Verdict:
        """
        Score one section.

        Args:
            section_id: registry id of an LLM-judged section
            content: raw section text, passed through unvalidated

        Returns:
            BinaryVerdict or RubricVerdict, depending on the section's mode

        Raises:
            JudgeFailure: transport error, missing tool call, bad JSON or schema violation
        """
        section, prompt = self._resolve(section_id)

        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": f"{prompt}\n\nContent to evaluate:\n{truncate(content, self.max_chars)}"},
        ]

        logger.debug("Judging section %s: %r", section_id, content)
        started = time.monotonic()
        try:
            resp = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                tools=[build_tool(section)],
                tool_choice={"type": "function", "function": {"name": TOOL_NAME}},
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except OpenAIError as e:
            raise JudgeFailure(section_id, f"LLM request failed: {e}", cause=e) from e

        logger.info("Judged section %s in %.0fms", section_id, (time.monotonic() - started) * 1000)
        return self.parse_response(section, resp)

    def parse_response(self, section: SectionDefinition, resp: Any) -> Verdict:
        """Validate a chat completion against the section's verdict model."""
        choices = getattr(resp, "choices", None) or []
        message = choices[0].message if choices else None
        tool_calls = getattr(message, "tool_calls", None) or []

        call = next((c for c in tool_calls if c.function.name == TOOL_NAME), None)
        if call is None:
            raise JudgeFailure(section.id, "No function call in response")

        try:
            data = json.loads(call.function.arguments or "")
        except json.JSONDecodeError as e:
            raise JudgeFailure(section.id, f"Malformed JSON in function call arguments: {e}", cause=e) from e

        if not isinstance(data, dict):
            raise JudgeFailure(section.id, "Function call arguments are not a JSON object")

        try:
            verdict = verdict_model(section).model_validate(data)
        except SchemaError as e:
            raise JudgeFailure(section.id, f"Invalid evaluation structure: {e}", cause=e) from e

        if not 0 <= verdict.score <= section.max_points:
            raise JudgeFailure(
                section.id,
                f"Score {verdict.score} outside 0-{section.max_points}",
            )
        return verdict

    async def ping(self) -> str:
        """
        Smoke-test connectivity to the provider.

        Raises:
            UpstreamError: with the provider's message
        """
        try:
            resp = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": PING_PROMPT}],
                max_tokens=20,
            )
        except OpenAIError as e:
            raise UpstreamError(str(e)) from e

        if not resp.choices:
            raise UpstreamError("Empty response from provider")
        return resp.choices[0].message.content or ""


def build_judge(settings: Settings, catalog: Optional[PromptCatalog] = None) -> LlmJudge:
    return LlmJudge.from_settings(settings, catalog or load_catalog(settings.prompts_dir))
