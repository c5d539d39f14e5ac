# briefeval/features/sections.py

from __future__ import annotations

import re

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from briefeval.rubrics.registry import SECTIONS, SectionDefinition


@dataclass
class SegmentedBrief:
    """
    A brief split into registry sections.
    """
    sections: Dict[str, str]             # every registry id, "" when absent
    header_lines: Dict[str, List[int]]   # 1-based line numbers of matched headers
    ignored_preamble: int                # non-empty lines before the first header

    @property
    def present(self) -> Dict[str, bool]:
        return {k: bool(v) for k, v in self.sections.items()}


_BULLET = re.compile(r"^[•\-\*]\s*")
_TRAILING_PUNCT = re.compile(r"[:.]\s*$")


def normalize_heading(line: str) -> str:
    """
    Normalize a line for header comparison:
    strip a leading bullet marker, one trailing ':' or '.', whitespace; lower-case.
    """
    ln = _BULLET.sub("", line.strip())
    ln = _TRAILING_PUNCT.sub("", ln)
    return ln.strip().lower()


def _header_index(sections: Mapping[str, SectionDefinition]) -> Dict[str, str]:
    index: Dict[str, str] = {}
    for section in sections.values():
        for variant in section.header_variants:
            # first registration wins
            index.setdefault(variant.lower(), section.id)
    return index


def match_header(line: str, sections: Mapping[str, SectionDefinition] = SECTIONS) -> Optional[str]:
    return _header_index(sections).get(normalize_heading(line))


def segment_sections(
    lines: List[str],
    *,
    sections: Mapping[str, SectionDefinition] = SECTIONS,
) -> SegmentedBrief:
    """
    Split brief lines into sections by exact header matching.

    - Header lines are compared (normalized) against each section's title variants.
    - Unrecognized lines are content for the current section.
    - Content before the first recognized header is discarded.
    - A repeated header keeps appending to the same section.

    Returns:
        SegmentedBrief
    """
    index = _header_index(sections)
    out: Dict[str, List[str]] = {k: [] for k in sections.keys()}
    header_lines: Dict[str, List[int]] = {k: [] for k in sections.keys()}
    current: Optional[str] = None
    preamble = 0

    for i, raw in enumerate(lines, 1):
        normalized = normalize_heading(raw)
        if not normalized:
            continue

        section_id = index.get(normalized)
        if section_id is not None:
            current = section_id
            header_lines[section_id].append(i)
            continue

        if current is None:
            preamble += 1
            continue

        out[current].append(raw.strip())

    return SegmentedBrief(
        sections={k: "\n".join(v) for k, v in out.items()},
        header_lines=header_lines,
        ignored_preamble=preamble,
    )


def segment_text(text: str, **kwargs) -> SegmentedBrief:
    return segment_sections((text or "").splitlines(), **kwargs)
