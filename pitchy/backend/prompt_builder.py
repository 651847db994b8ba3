from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence

from .models import ConversationExchange, PitchSession, Persona, ResearchData, Scenario
from .prompts.conversation import RESEARCH_BLOCK_TEMPLATE, SYSTEM_PROMPT_TEMPLATE
from .prompts.feedback import USER_PROMPT_TEMPLATE as FEEDBACK_PROMPT_TEMPLATE
from .prompts.pitch import USER_PROMPT_TEMPLATE as PITCH_PROMPT_TEMPLATE
from .prompts.research import USER_PROMPT_TEMPLATE as RESEARCH_PROMPT_TEMPLATE


_PLACEHOLDER_RE = re.compile(r"\{([a-z_]+)\}")
SALESPERSON_LABEL = "Salesperson"


def _fill(template: str, values: Dict[str, str]) -> str:
    """Substitute ``{name}`` placeholders in one pass.

    Values are never rescanned, so transcripts or research text containing
    braces are inserted verbatim.
    """
    return _PLACEHOLDER_RE.sub(lambda match: values.get(match.group(1), match.group(0)), template)


def _format_seconds(seconds: float) -> str:
    value = round(float(seconds), 1)
    if value == int(value):
        return str(int(value))
    return f"{value:.1f}"


def _bullets(items: Sequence[str], marker: str = "-") -> str:
    return "\n".join(f"{marker} {item}" for item in items)


def build_research_block(research: Optional[ResearchData]) -> str:
    if research is None:
        return ""
    return _fill(
        RESEARCH_BLOCK_TEMPLATE,
        {
            "research_query": research.query,
            "research_summary": research.summary,
            "research_key_points": _bullets(research.key_points),
        },
    )


def build_conversation_messages(
    persona: Persona,
    scenario: Scenario,
    history: Sequence[ConversationExchange],
    user_message: str = "",
    research: Optional[ResearchData] = None,
) -> List[dict]:
    system_content = _fill(
        SYSTEM_PROMPT_TEMPLATE,
        {
            "persona_prompt": persona.system_prompt,
            "scenario_context": scenario.initial_context,
            "research_block": build_research_block(research),
            "persona_name": persona.name,
        },
    )

    messages: List[dict] = [{"role": "system", "content": system_content}]
    for exchange in history:
        if exchange.user:
            messages.append({"role": "user", "content": exchange.user})
        if exchange.assistant:
            messages.append({"role": "assistant", "content": exchange.assistant})

    if user_message:
        messages.append({"role": "user", "content": user_message})
    return messages


def format_transcript(history: Sequence[ConversationExchange], persona: Persona) -> str:
    blocks: List[str] = []
    for exchange in history:
        lines: List[str] = []
        if exchange.user:
            lines.append(f"{SALESPERSON_LABEL}: {exchange.user}")
        if exchange.assistant:
            lines.append(f"{persona.name}: {exchange.assistant}")
        if lines:
            blocks.append("\n".join(lines))
    if not blocks:
        return "(no conversation took place)"
    return "\n\n".join(blocks)


def build_feedback_prompt(
    history: Sequence[ConversationExchange],
    persona: Persona,
    scenario: Scenario,
) -> str:
    objectives = _bullets(scenario.objectives) if scenario.objectives else "- (none listed)"
    return _fill(
        FEEDBACK_PROMPT_TEMPLATE,
        {
            "scenario_name": scenario.name,
            "scenario_description": scenario.description,
            "scenario_objectives": objectives,
            "persona_name": persona.name,
            "persona_description": persona.description,
            "transcript": format_transcript(history, persona),
        },
    )


def time_usage_ratio(pitch_session: PitchSession) -> float:
    return float(pitch_session.duration) / float(pitch_session.pitch_length.duration)


def build_pitch_feedback_prompt(pitch_session: PitchSession) -> str:
    persona = pitch_session.persona
    pitch_length = pitch_session.pitch_length
    usage_percent = round(time_usage_ratio(pitch_session) * 100)
    return _fill(
        PITCH_PROMPT_TEMPLATE,
        {
            "persona_name": persona.name,
            "persona_description": persona.description,
            "pitch_length_name": pitch_length.name,
            "pitch_length_description": pitch_length.description or pitch_length.name,
            "allotted_seconds": _format_seconds(pitch_length.duration),
            "actual_seconds": _format_seconds(pitch_session.duration),
            "time_usage_percent": str(usage_percent),
            "transcript": pitch_session.transcript.strip(),
        },
    )


def build_research_prompt(query: str) -> str:
    return _fill(RESEARCH_PROMPT_TEMPLATE, {"query": query.strip()})
