from __future__ import annotations

import re
from typing import List, Optional

from .models import ResearchData, now_ms


RESEARCH_SOURCES = ["AI Research Assistant"]

_SUMMARY_RE = re.compile(r"SUMMARY:\s*(.+?)(?=\n|KEY POINTS:|\Z)")
_KEY_POINTS_RE = re.compile(r"KEY POINTS:\s*([\s\S]*?)(?=\n[ \t]*\n|\Z)")

GENERIC_KEY_POINTS = [
    "General information gathered about the topic",
    "Key business considerations identified",
    "Potential value propositions outlined",
    "Competitive landscape reviewed",
    "Market opportunities assessed",
]

FALLBACK_KEY_POINTS = [
    "Key information gathered about the topic",
    "Business context and background researched",
    "Relevant talking points identified",
]


def _parse_summary(text: str) -> str:
    match = _SUMMARY_RE.search(text)
    return match.group(1).strip() if match else ""


def _parse_key_points(text: str) -> List[str]:
    match = _KEY_POINTS_RE.search(text)
    if not match:
        return []
    points: List[str] = []
    for line in match.group(1).split("\n"):
        line = line.strip()
        if not line.startswith(("•", "-")):
            continue
        point = line[1:].strip()
        if point:
            points.append(point)
    return points


def parse_research(query: str, text: str, timestamp: Optional[float] = None) -> ResearchData:
    query = query.strip()
    summary = _parse_summary(text or "")
    key_points = _parse_key_points(text or "")

    if not summary and not key_points:
        summary = f"Research completed for: {query}"
        key_points = list(GENERIC_KEY_POINTS)

    return ResearchData(
        query=query,
        summary=summary or f"Research summary for {query}",
        key_points=key_points or list(FALLBACK_KEY_POINTS),
        sources=list(RESEARCH_SOURCES),
        timestamp=now_ms() if timestamp is None else timestamp,
    )
