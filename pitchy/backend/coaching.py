from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from .constants import DEFAULT_CRITERION_SCORE, DEFAULT_SCORE
from .feedback_parser import parse_pitch_feedback, parse_session_feedback
from .llm_client import request_chat_completion
from .models import (
    ConversationExchange,
    Persona,
    PitchCriteria,
    PitchFeedback,
    PitchSession,
    ResearchData,
    Scenario,
    SessionFeedback,
)
from .prompt_builder import build_feedback_prompt, build_pitch_feedback_prompt, build_research_prompt
from .research import parse_research


logger = logging.getLogger("uvicorn.error")

VALID_ROLES = {"system", "user", "assistant"}
MIN_EXCHANGES_FOR_REVIEW = 2

EMPTY_CONVERSATION_FEEDBACK = SessionFeedback(
    score=0,
    feedback=[
        "Complete failure: No conversation attempted whatsoever",
        "You cannot learn sales without actually talking to the customer",
        "This is like showing up to a sales meeting and saying nothing",
        "Start over and actually engage in a real conversation",
    ],
    raw_feedback="SCORE: 0 - No conversation data available for analysis. Complete failure to engage.",
)

MINIMAL_CONVERSATION_FEEDBACK = SessionFeedback(
    score=15,
    feedback=[
        "Pathetically short conversation - barely tried to engage",
        "One or two sentences is not a sales conversation",
        "Real customers need more than surface-level interaction",
        "Practice having complete conversations, not just quick exchanges",
    ],
    raw_feedback="SCORE: 15 - Extremely minimal conversation. Insufficient effort to evaluate sales skills.",
)


def validate_messages(messages: Sequence[Dict[str, str]]) -> List[Dict[str, str]]:
    if not messages:
        raise ValueError("Messages array is required and must not be empty")
    cleaned: List[Dict[str, str]] = []
    for message in messages:
        role = message.get("role") if isinstance(message, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if role not in VALID_ROLES or not isinstance(content, str):
            raise ValueError("Invalid message format. Each message must have role and content.")
        cleaned.append({"role": role, "content": content})
    return cleaned


def generate_chat_reply(messages: Sequence[Dict[str, str]]) -> str:
    validated = validate_messages(messages)
    reply = request_chat_completion(
        validated,
        temperature=0.8,
        max_tokens=150,
        presence_penalty=0.1,
        frequency_penalty=0.1,
    )
    return reply.strip()


def _checked_score(score: int, default: int, field: str) -> int:
    if 0 <= score <= 100:
        return score
    logger.warning("feedback_score_out_of_range field=%s value=%s default=%s", field, score, default)
    return default


def generate_session_feedback(
    transcript: Sequence[ConversationExchange],
    persona: Persona,
    scenario: Scenario,
) -> SessionFeedback:
    if len(transcript) == 0:
        logger.info("session_feedback_shortcut reason=empty_transcript")
        return EMPTY_CONVERSATION_FEEDBACK
    if len(transcript) < MIN_EXCHANGES_FOR_REVIEW:
        logger.info("session_feedback_shortcut reason=minimal_transcript exchanges=%s", len(transcript))
        return MINIMAL_CONVERSATION_FEEDBACK

    prompt = build_feedback_prompt(transcript, persona, scenario)
    raw_text = request_chat_completion(
        [{"role": "user", "content": prompt}],
        temperature=0.3,
        max_tokens=500,
    )
    parsed = parse_session_feedback(raw_text, default_score=DEFAULT_SCORE)
    score = _checked_score(parsed.score, DEFAULT_SCORE, "score")
    if score != parsed.score:
        parsed = parsed.model_copy(update={"score": score})

    logger.info(
        "session_feedback_done persona=%s scenario=%s exchanges=%s score=%s",
        persona.id,
        scenario.id,
        len(transcript),
        parsed.score,
    )
    return parsed


def generate_pitch_feedback(pitch_session: PitchSession) -> PitchFeedback:
    prompt = build_pitch_feedback_prompt(pitch_session)
    raw_text = request_chat_completion(
        [{"role": "user", "content": prompt}],
        temperature=0.3,
        max_tokens=900,
    )
    parsed = parse_pitch_feedback(
        raw_text,
        default_score=DEFAULT_SCORE,
        default_criterion_score=DEFAULT_CRITERION_SCORE,
    )

    criteria = {
        field: _checked_score(value, DEFAULT_CRITERION_SCORE, field)
        for field, value in parsed.criteria.model_dump().items()
    }
    parsed = parsed.model_copy(
        update={
            "score": _checked_score(parsed.score, DEFAULT_SCORE, "score"),
            "criteria": PitchCriteria(**criteria),
        }
    )

    logger.info(
        "pitch_feedback_done persona=%s pitch_length=%s duration=%s score=%s",
        pitch_session.persona.id,
        pitch_session.pitch_length.id,
        pitch_session.duration,
        parsed.score,
    )
    return parsed


def run_research(query: str) -> ResearchData:
    cleaned = (query or "").strip()
    if not cleaned:
        raise ValueError("Search query is required and must be a non-empty string")

    logger.info("research_started query=%r", cleaned)
    raw_text = request_chat_completion(
        [{"role": "user", "content": build_research_prompt(cleaned)}],
        temperature=0.5,
        max_tokens=600,
    )
    data = parse_research(cleaned, raw_text)
    logger.info("research_done query=%r key_points=%s", cleaned, len(data.key_points))
    return data
