# briefeval/features/keywords.py

from __future__ import annotations

import re

from typing import Dict, Pattern


_COUNT_WORDS = r"(?:\d+(?:\.\d+)?|one|two|three|four|five|six|seven|eight|nine|ten|eleven|twelve)"


# Curated cue-phrases. Keep them short + high-signal.
# Stems (e.g. "expect", "requir") deliberately match inflections.
CUE_PATTERNS: Dict[str, Pattern] = {
    # duration
    "timeframe": re.compile(
        rf"\b{_COUNT_WORDS}(?:\s*(?:-|to)\s*{_COUNT_WORDS})?[\s-]*(?:days?|weeks?|months?)\b|\buntil\b",
        re.I,
    ),
    "rationale": re.compile(r"\bbecause\b|\bdue to\b|\bbased on\b|\bexpect|\bneed|\brequir", re.I),
    # success criteria
    "metric_change": re.compile(
        r"\bincreas|\bdecreas|\bimprov|\breduc|\d+(?:\.\d+)?\s*%|\bratio\b|\brates?\b", re.I
    ),
    "threshold": re.compile(r"\bsignifican|\bp-value\b|\bconfidence\b|\bstatistical|\bthreshold", re.I),
    # data requirements
    "tracked_data": re.compile(r"\bmetrics?\b|\bevents?\b|\bpropert(?:y|ies)\b|\battributes?\b|\btrack", re.I),
    "collection": re.compile(r"\bcollect|\bmeasur|\brecord|\bcaptur|\bstor(?:e|ed|ing|age)\b", re.I),
    # considerations
    "risk": re.compile(r"\brisks?\b|\bconcerns?\b|\bchallenges?\b|\blimitations?\b|\bdependenc", re.I),
    # what next
    "success_path": re.compile(r"\bsuccess|\bpass|\bachiev|\bmeets?\b|\bexceed", re.I),
    "failure_path": re.compile(r"\bfail|\bnot\b|\bbelow\b|\bmiss|\balternative", re.I),
}


def has_cue(text: str, cue: str) -> bool:
    return bool(CUE_PATTERNS[cue].search(text or ""))


def word_count(text: str) -> int:
    return len((text or "").split())
