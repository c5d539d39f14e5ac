# briefeval/errors.py
"""
Error taxonomy shared by the service, the scoring engine and the judge client.
"""

from __future__ import annotations

from typing import Optional


class BriefEvalError(Exception):
    """Base class for all briefeval errors."""
    status_code: int = 500


class ConfigurationError(BriefEvalError):
    """Missing or invalid process configuration. Fatal at startup."""


class ValidationError(BriefEvalError):
    """Caller supplied an invalid request (missing fields, unknown section)."""
    status_code = 400


class UnsupportedDocumentError(ValidationError):
    """Uploaded file type cannot be ingested."""
    status_code = 415


class JudgeFailure(BriefEvalError):
    """
    The LLM judge could not produce a valid evaluation for a section.

    Covers transport errors, timeouts, non-success responses, missing tool
    calls, malformed JSON and schema violations.
    """

    def __init__(self, section_id: str, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.section_id = section_id
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.section_id}: {self.message}"


class UpstreamError(BriefEvalError):
    """LLM provider failure surfaced verbatim through the smoke-test endpoint."""
