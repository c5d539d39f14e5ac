# briefeval/cli.py

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from briefeval.config import configure_logging, load_settings
from briefeval.errors import BriefEvalError, ConfigurationError
from briefeval.export.report import render_html, report_to_json
from briefeval.extract.document import extract_document
from briefeval.features.sections import segment_sections
from briefeval.llm.judge import build_judge
from briefeval.rubrics import AggregateReport, ResultStatus
from briefeval.rubrics.scorer import ScoringEngine


def print_verdict(report: AggregateReport) -> None:
    """
    Human-readable verdict from the machine-readable report.
    Keeps it short enough to skim in a terminal.
    """
    print("\n" + "=" * 60)
    print(f"OVERALL: {report.total_percentage}%  ({report.total_score}/{report.max_score} points)")
    print(f"Rubric: {report.rubric_version}")

    for result in report.sections.values():
        if result.max_points == 0:
            marker = "·"
        elif result.status == ResultStatus.ERROR:
            marker = "!"
        elif result.score >= result.max_points:
            marker = "✓"
        else:
            marker = "✗"
        score = f"{result.score}/{result.max_points}" if result.max_points else "n/a"
        print(f" {marker} {result.display_name:<28} {score:>8}  {result.rationale[:60]}")

    if report.failed_sections:
        print(f"\nFailed sections: {', '.join(report.failed_sections)}")
    print("=" * 60 + "\n")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Score an experiment brief against the rubric.")
    parser.add_argument("brief_path", help="Path to a .txt, .docx or .pdf brief")
    parser.add_argument("--format", choices=("json", "html"), default="json", help="Output artifact format")
    parser.add_argument("--output", default="", help="Write the artifact here instead of stdout")
    parser.add_argument("--verdict", action="store_true", help="Print a short terminal verdict")

    args = parser.parse_args(argv)

    load_dotenv()
    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    configure_logging(settings.log_level)

    path = Path(args.brief_path)
    try:
        doc = extract_document(path.name, path.read_bytes())
        brief = segment_sections(doc.lines)
        engine = ScoringEngine(build_judge(settings), max_concurrency=settings.max_concurrency)
        report = asyncio.run(engine.evaluate(brief.sections))
    except (OSError, BriefEvalError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.verdict:
        print_verdict(report)

    artifact = report_to_json(report) if args.format == "json" else render_html(report, brief.sections)
    if args.output:
        Path(args.output).write_text(artifact, encoding="utf-8")
        print(f"Wrote {args.format} report to {args.output}")
    else:
        print(artifact)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
