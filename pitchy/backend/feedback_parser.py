"""Turn free-text model replies into structured feedback.

Every reply goes through two passes. The strict pass accepts only the exact
layout requested by the prompt templates; when the model drifts from it, the
tolerant pass scans for the section markers line by line and fills anything
it cannot find with fixed defaults. Neither pass raises.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple

from .constants import DEFAULT_CRITERION_SCORE, DEFAULT_SCORE
from .models import PitchCriteria, PitchCriteriaJustifications, PitchFeedback, SessionFeedback


logger = logging.getLogger("uvicorn.error")

SCORE_MARKER = "SCORE:"
OVERALL_SCORE_MARKER = "OVERALL SCORE:"
FEEDBACK_MARKER = "FEEDBACK:"
CRITERIA_SCORES_MARKER = "CRITERIA SCORES:"
CRITERIA_JUSTIFICATIONS_MARKER = "CRITERIA JUSTIFICATIONS:"
BULLET_CHARS = ("•", "-")

# (field name, label used in the model reply)
PITCH_CRITERIA: Tuple[Tuple[str, str], ...] = (
    ("clarity", "Clarity"),
    ("persuasiveness", "Persuasiveness"),
    ("structure", "Structure"),
    ("time_management", "Time Management"),
    ("impact", "Impact"),
)

CONVERSATION_FALLBACK_FEEDBACK = [
    "Failed to extract meaningful feedback from conversation analysis",
    "This suggests the conversation was too brief or unfocused to evaluate",
    "Need significantly more substantive interaction with the customer",
    "Try having a complete conversation before expecting useful feedback",
]

PITCH_FALLBACK_FEEDBACK = [
    "Failed to extract meaningful feedback from the pitch analysis",
    "This usually means the pitch was too short or unfocused to evaluate",
    "A complete pitch needs a hook, a problem, a solution, benefits, and a call to action",
    "Use most of the allotted time without running over it",
    "Record a full pitch aimed at the selected customer before requesting feedback",
]

MISSING_JUSTIFICATION = "No justification provided."
MISSING_JUSTIFICATIONS_SECTION = "No justification provided - the analysis omitted the justification section."

_STRICT_SCORE_RE = re.compile(r"^SCORE:\s*(\d{1,3})$")
_STRICT_OVERALL_RE = re.compile(r"^OVERALL SCORE:\s*(\d{1,3})$")
_DIGITS_RE = re.compile(r"(\d+)")


def _non_blank_lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def _is_bullet(line: str) -> bool:
    return line.startswith(BULLET_CHARS)


def _strip_bullet(line: str) -> str:
    return line[1:].strip()


def _in_range(score: int) -> bool:
    return 0 <= score <= 100


def _find_marker(lines: Sequence[str], marker: str, start: int = 0) -> int:
    for index in range(start, len(lines)):
        if marker in lines[index]:
            return index
    return -1


def _first_int(text: str) -> Optional[int]:
    match = _DIGITS_RE.search(text)
    if not match:
        return None
    return int(match.group(1))


def _score_after_marker(lines: Sequence[str], marker: str, default: int) -> int:
    index = _find_marker(lines, marker)
    if index == -1:
        return default
    value = _first_int(lines[index])
    return default if value is None else value


def _bullets_after_marker(lines: Sequence[str], marker: str) -> List[str]:
    index = _find_marker(lines, marker)
    if index == -1:
        return []
    bullets: List[str] = []
    for line in lines[index + 1 :]:
        if _is_bullet(line):
            item = _strip_bullet(line)
            if item:
                bullets.append(item)
    return bullets


def _criterion_line_re(label: str) -> re.Pattern:
    return re.compile(rf"^[\s•*\-]*{re.escape(label)}[\s*]*:(.*)$", re.IGNORECASE)


def _justification_line_re(label: str) -> re.Pattern:
    return re.compile(rf"{re.escape(label)}\s+Justification[\s*]*:", re.IGNORECASE)


_CRITERION_RES = {field: _criterion_line_re(label) for field, label in PITCH_CRITERIA}
_JUSTIFICATION_RES = {field: _justification_line_re(label) for field, label in PITCH_CRITERIA}


def _section(lines: Sequence[str], marker: str, end_markers: Sequence[str]) -> Sequence[str]:
    """Lines between ``marker`` and the next end marker; all lines if ``marker`` is absent."""
    start = _find_marker(lines, marker)
    if start == -1:
        return lines
    end = len(lines)
    for index in range(start + 1, len(lines)):
        if any(end_marker in lines[index] for end_marker in end_markers):
            end = index
            break
    return lines[start + 1 : end]


# ---------------------------------------------------------------------------
# Conversation feedback
# ---------------------------------------------------------------------------

def strict_parse_session_feedback(text: str) -> Optional[SessionFeedback]:
    lines = _non_blank_lines(text)
    if len(lines) < 3:
        return None
    match = _STRICT_SCORE_RE.match(lines[0])
    if not match or lines[1] != FEEDBACK_MARKER:
        return None
    score = int(match.group(1))
    if not _in_range(score):
        return None

    bullets = lines[2:]
    if not all(_is_bullet(line) and _strip_bullet(line) for line in bullets):
        return None
    return SessionFeedback(
        score=score,
        feedback=[_strip_bullet(line) for line in bullets],
        raw_feedback=text,
    )


def tolerant_parse_session_feedback(text: str, *, default_score: int = DEFAULT_SCORE) -> SessionFeedback:
    lines = _non_blank_lines(text)
    score = _score_after_marker(lines, SCORE_MARKER, default_score)
    feedback = _bullets_after_marker(lines, FEEDBACK_MARKER)
    if not feedback:
        feedback = list(CONVERSATION_FALLBACK_FEEDBACK)
    return SessionFeedback(score=score, feedback=feedback, raw_feedback=text)


def parse_session_feedback(text: str, *, default_score: int = DEFAULT_SCORE) -> SessionFeedback:
    parsed = strict_parse_session_feedback(text)
    if parsed is not None:
        logger.debug("session_feedback_parse mode=strict")
        return parsed
    logger.debug("session_feedback_parse mode=tolerant")
    return tolerant_parse_session_feedback(text, default_score=default_score)


# ---------------------------------------------------------------------------
# Pitch feedback
# ---------------------------------------------------------------------------

def _build_pitch_feedback(
    *,
    score: int,
    scores: Dict[str, int],
    justifications: Dict[str, str],
    feedback: List[str],
    raw_text: str,
) -> PitchFeedback:
    return PitchFeedback(
        score=score,
        feedback=feedback,
        raw_feedback=raw_text,
        criteria=PitchCriteria(**scores),
        criteria_justifications=PitchCriteriaJustifications(**justifications),
    )


def strict_parse_pitch_feedback(text: str) -> Optional[PitchFeedback]:
    lines = _non_blank_lines(text)
    criteria_count = len(PITCH_CRITERIA)
    # overall + marker + scores + marker + justifications + marker + >= 1 bullet
    if len(lines) < 2 * criteria_count + 5:
        return None

    match = _STRICT_OVERALL_RE.match(lines[0])
    if not match or lines[1] != CRITERIA_SCORES_MARKER:
        return None
    overall = int(match.group(1))
    if not _in_range(overall):
        return None

    scores: Dict[str, int] = {}
    for offset, (field, label) in enumerate(PITCH_CRITERIA):
        score_match = re.match(rf"^{re.escape(label)}:\s*(\d{{1,3}})$", lines[2 + offset])
        if not score_match or not _in_range(int(score_match.group(1))):
            return None
        scores[field] = int(score_match.group(1))

    cursor = 2 + criteria_count
    if lines[cursor] != CRITERIA_JUSTIFICATIONS_MARKER:
        return None
    justifications: Dict[str, str] = {}
    for offset, (field, label) in enumerate(PITCH_CRITERIA):
        prefix = f"{label} Justification:"
        line = lines[cursor + 1 + offset]
        if not line.startswith(prefix) or not line[len(prefix) :].strip():
            return None
        justifications[field] = line[len(prefix) :].strip()

    cursor += 1 + criteria_count
    if lines[cursor] != FEEDBACK_MARKER:
        return None
    bullets = lines[cursor + 1 :]
    if not all(_is_bullet(line) and _strip_bullet(line) for line in bullets):
        return None

    return _build_pitch_feedback(
        score=overall,
        scores=scores,
        justifications=justifications,
        feedback=[_strip_bullet(line) for line in bullets],
        raw_text=text,
    )


def tolerant_parse_pitch_feedback(
    text: str,
    *,
    default_score: int = DEFAULT_SCORE,
    default_criterion_score: int = DEFAULT_CRITERION_SCORE,
) -> PitchFeedback:
    lines = _non_blank_lines(text)
    overall = _score_after_marker(lines, OVERALL_SCORE_MARKER, default_score)

    score_lines = _section(
        lines,
        CRITERIA_SCORES_MARKER,
        (CRITERIA_JUSTIFICATIONS_MARKER, FEEDBACK_MARKER),
    )
    scores: Dict[str, int] = {}
    for field, _label in PITCH_CRITERIA:
        scores[field] = default_criterion_score
        for line in score_lines:
            match = _CRITERION_RES[field].match(line)
            if not match:
                continue
            value = _first_int(match.group(1))
            if value is not None:
                scores[field] = value
            break

    justification_lines = _section(lines, CRITERIA_JUSTIFICATIONS_MARKER, (FEEDBACK_MARKER,))
    justifications: Dict[str, str] = {}
    for field, _label in PITCH_CRITERIA:
        justifications[field] = MISSING_JUSTIFICATION
        for line in justification_lines:
            if not _JUSTIFICATION_RES[field].search(line):
                continue
            value = line.split(":", 1)[1].strip(" *")
            if value:
                justifications[field] = value
            break

    if justifications["clarity"] == MISSING_JUSTIFICATION:
        justifications = {
            field: (MISSING_JUSTIFICATIONS_SECTION if value == MISSING_JUSTIFICATION else value)
            for field, value in justifications.items()
        }

    feedback = _bullets_after_marker(lines, FEEDBACK_MARKER)
    if not feedback:
        feedback = list(PITCH_FALLBACK_FEEDBACK)

    return _build_pitch_feedback(
        score=overall,
        scores=scores,
        justifications=justifications,
        feedback=feedback,
        raw_text=text,
    )


def parse_pitch_feedback(
    text: str,
    *,
    default_score: int = DEFAULT_SCORE,
    default_criterion_score: int = DEFAULT_CRITERION_SCORE,
) -> PitchFeedback:
    parsed = strict_parse_pitch_feedback(text)
    if parsed is not None:
        logger.debug("pitch_feedback_parse mode=strict")
        return parsed
    logger.debug("pitch_feedback_parse mode=tolerant")
    return tolerant_parse_pitch_feedback(
        text,
        default_score=default_score,
        default_criterion_score=default_criterion_score,
    )
