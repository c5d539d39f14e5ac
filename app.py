# app.py
"""
Brief Evaluator API - FastAPI application for rubric scoring of experiment briefs.

Scores each section of an experiment brief against a fixed rubric: presence
checks, keyword heuristics and an LLM judge for the rubric-graded sections.
Per-section results are merged into one report that can be exported as JSON
or as a Word-compatible document.

Run with: uvicorn app:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, File, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from briefeval import __version__
from briefeval.config import configure_logging, load_settings
from briefeval.errors import BriefEvalError, JudgeFailure, UpstreamError, ValidationError
from briefeval.export.report import (
    JSON_MIME_TYPE,
    WORD_MIME_TYPE,
    json_filename,
    render_html,
    report_to_json,
    word_filename,
)
from briefeval.extract.document import extract_document
from briefeval.features.sections import segment_sections
from briefeval.llm.judge import LlmJudge, build_judge
from briefeval.rubrics import AggregateReport
from briefeval.rubrics.catalog import load_catalog
from briefeval.rubrics.registry import registry_summary, require_llm_section, total_max_points
from briefeval.rubrics.scorer import ScoringEngine

# Load environment variables
load_dotenv()

# =============================================================================
# CONFIGURATION
# =============================================================================

# Raises ConfigurationError when no provider credential is set
SETTINGS = load_settings()
configure_logging(SETTINGS.log_level)

logger = logging.getLogger("briefeval.app")

CATALOG = load_catalog(SETTINGS.prompts_dir)
JUDGE = build_judge(SETTINGS, CATALOG)

logger.info(
    "Loaded rubric catalog %s (%d prompts), model %s",
    CATALOG.version, len(CATALOG.prompts), SETTINGS.model,
)


def get_judge() -> LlmJudge:
    return JUDGE


def get_engine(judge=Depends(get_judge)) -> ScoringEngine:
    return ScoringEngine(
        judge,
        max_concurrency=SETTINGS.max_concurrency,
        rubric_version=CATALOG.version,
    )


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class EvaluateSectionRequest(BaseModel):
    """Single-section evaluation request. Both fields are checked by the handler."""
    section: Optional[str] = None
    content: Optional[str] = None


class EvaluateSectionsRequest(BaseModel):
    """Whole-brief evaluation from already segmented text."""
    sections: Dict[str, str] = Field(..., description="Section id -> section text")


class ExportRequest(BaseModel):
    """A previously returned report plus the optional submitted text per section."""
    report: Dict[str, Any]
    document: Optional[Dict[str, str]] = None


# =============================================================================
# FASTAPI APP
# =============================================================================

app = FastAPI(
    title="Brief Evaluator API",
    description="""
    Rubric scoring of experiment briefs.

    ## Scoring

    * **Presence**: full marks when the section has any text
    * **Heuristics**: keyword checks for duration, success criteria, data requirements, considerations and next steps
    * **LLM judge**: structured rubric verdicts for the problem statement and hypothesis sections

    Scores from all sections are summed and normalized to a percentage.
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BriefEvalError)
async def briefeval_error_handler(request: Request, exc: BriefEvalError):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


# =============================================================================
# API ENDPOINTS
# =============================================================================

@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Brief Evaluator API",
        "version": __version__,
        "rubric_version": CATALOG.version,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "rubric_version": CATALOG.version,
        "max_score": total_max_points(),
        "llm": {
            "model": SETTINGS.model,
            "base_url": SETTINGS.masked_base_url(),
            "max_concurrency": SETTINGS.max_concurrency,
        },
    }


@app.get("/test")
async def test():
    """Liveness probe."""
    return {"message": "API is working!"}


@app.get("/test-openai")
async def test_openai(judge=Depends(get_judge)):
    """Smoke-test connectivity to the LLM provider."""
    try:
        message = await judge.ping()
    except UpstreamError as e:
        logger.error("LLM connectivity check failed: %s", e)
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
    return {"success": True, "message": message}


@app.get("/sections")
async def list_sections():
    """List all section definitions in registry order."""
    sections = registry_summary()
    return {
        "sections": sections,
        "total": len(sections),
        "max_score": total_max_points(),
    }


@app.post("/evaluate-section")
async def evaluate_section(body: EvaluateSectionRequest, judge=Depends(get_judge)):
    """Score one LLM-judged section and return the judge's verdict as-is."""
    if not body.section or not (body.content or "").strip():
        raise ValidationError("Missing section or content")
    section = require_llm_section(body.section)

    try:
        verdict = await judge.judge(section.id, body.content)
    except JudgeFailure as e:
        logger.warning("Section evaluation failed: %s", e)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to evaluate content", "details": e.message, "section": section.id},
        )
    except Exception as e:
        logger.exception("Unexpected error evaluating section %s", section.id)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to evaluate content", "details": str(e), "section": section.id},
        )
    return verdict.model_dump()


@app.post("/evaluate-sections")
async def evaluate_sections(body: EvaluateSectionsRequest, engine: ScoringEngine = Depends(get_engine)):
    """Score a brief that has already been split into sections."""
    report = await engine.evaluate(body.sections)
    return report.to_dict()


@app.post("/evaluate")
async def evaluate_document(
    file: UploadFile = File(..., description="Experiment brief (.txt, .docx or .pdf)"),
    engine: ScoringEngine = Depends(get_engine),
):
    """Extract, segment and score an uploaded brief."""
    filename = file.filename or "unknown.txt"
    contents = await file.read()

    doc = extract_document(filename, contents)
    brief = segment_sections(doc.lines)
    logger.info(
        "Segmented %s: %d/%d sections present",
        filename, sum(brief.present.values()), len(brief.sections),
    )

    report = await engine.evaluate(brief.sections)
    return {
        **report.to_dict(),
        "document": brief.sections,
        "document_info": {
            "filename": filename,
            "source": doc.source,
            "text_length": len(doc.text),
            "ignored_preamble_lines": brief.ignored_preamble,
        },
    }


@app.post("/export")
async def export_report(
    body: ExportRequest,
    export_format: str = Query("json", alias="format", description="Artifact format: json or html"),
):
    """Turn a report into a downloadable JSON artifact or Word-compatible document."""
    fmt = export_format.lower()
    if fmt not in ("json", "html"):
        raise ValidationError("Unsupported export format")

    try:
        report = AggregateReport.from_dict(body.report)
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid report: {e}") from e

    if fmt == "json":
        content, media_type, filename = report_to_json(report), JSON_MIME_TYPE, json_filename()
    else:
        content, media_type, filename = render_html(report, body.document), WORD_MIME_TYPE, word_filename()

    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
