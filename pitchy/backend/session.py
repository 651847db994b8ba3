"""Per-user practice session flow.

A session walks through::

    research -> mode-select -> conversation-setup -> conversation -> feedback
                            \\-> pitch-setup        -> pitch        -> pitch-feedback

and ``reset`` returns it to ``research`` from anywhere. All session-scoped
data lives on a :class:`SessionContext` owned by one
:class:`SessionController`; model calls are injected so the flow can run
without a network.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Sequence, TypeVar

from . import coaching
from .models import (
    ConversationExchange,
    Persona,
    PitchFeedback,
    PitchLength,
    PitchSession,
    ResearchData,
    Scenario,
    SessionFeedback,
    SessionSnapshot,
    now_ms,
)
from .personas import get_persona
from .pitch_lengths import get_pitch_length
from .prompt_builder import build_conversation_messages
from .scenarios import get_scenario


logger = logging.getLogger("uvicorn.error")

RESEARCH = "research"
MODE_SELECT = "mode-select"
CONVERSATION_SETUP = "conversation-setup"
PITCH_SETUP = "pitch-setup"
CONVERSATION = "conversation"
PITCH = "pitch"
FEEDBACK = "feedback"
PITCH_FEEDBACK = "pitch-feedback"

MODE_CONVERSATION = "conversation"
MODE_PITCH = "pitch"

ChatFn = Callable[[Sequence[Dict[str, str]]], str]
FeedbackFn = Callable[[Sequence[ConversationExchange], Persona, Scenario], SessionFeedback]
PitchFeedbackFn = Callable[[PitchSession], PitchFeedback]
T = TypeVar("T")


class SessionStateError(ValueError):
    """Raised when an operation is not allowed in the current state."""


def _resolve(lookup: Callable[[str], Optional[T]], item_id: str, label: str) -> T:
    item = lookup(item_id)
    if item is None:
        raise ValueError(f"Unknown {label}: {item_id}")
    return item


@dataclass
class SessionContext:
    session_id: str
    state: str = RESEARCH
    research: Optional[ResearchData] = None
    mode: Optional[str] = None
    persona: Optional[Persona] = None
    scenario: Optional[Scenario] = None
    pitch_length: Optional[PitchLength] = None
    history: List[ConversationExchange] = field(default_factory=list)
    pitch_session: Optional[PitchSession] = None
    feedback: Optional[SessionFeedback] = None
    pitch_feedback: Optional[PitchFeedback] = None


class SessionController:
    def __init__(
        self,
        session_id: str,
        *,
        chat_fn: ChatFn = coaching.generate_chat_reply,
        feedback_fn: FeedbackFn = coaching.generate_session_feedback,
        pitch_feedback_fn: PitchFeedbackFn = coaching.generate_pitch_feedback,
    ) -> None:
        self.context = SessionContext(session_id=session_id)
        self._chat_fn = chat_fn
        self._feedback_fn = feedback_fn
        self._pitch_feedback_fn = pitch_feedback_fn
        self._busy = False
        self._busy_lock = threading.Lock()

    @property
    def state(self) -> str:
        return self.context.state

    @property
    def busy(self) -> bool:
        return self._busy

    def _require(self, *states: str) -> None:
        if self.context.state not in states:
            expected = " or ".join(states)
            raise SessionStateError(
                f"Operation not allowed in state '{self.context.state}' (expected {expected})."
            )

    @contextmanager
    def _pending(self) -> Iterator[None]:
        with self._busy_lock:
            if self._busy:
                raise SessionStateError("Another operation is already in progress for this session.")
            self._busy = True
        try:
            yield
        finally:
            with self._busy_lock:
                self._busy = False

    def _transition(self, new_state: str) -> None:
        logger.info(
            "session_id=%s transition from=%s to=%s",
            self.context.session_id,
            self.context.state,
            new_state,
        )
        self.context.state = new_state

    # -- research / mode ---------------------------------------------------

    def complete_research(self, research: Optional[ResearchData]) -> None:
        self._require(RESEARCH)
        self.context.research = research
        self._transition(MODE_SELECT)

    def choose_mode(self, mode: str) -> None:
        self._require(MODE_SELECT)
        if mode == MODE_CONVERSATION:
            target = CONVERSATION_SETUP
        elif mode == MODE_PITCH:
            target = PITCH_SETUP
        else:
            raise ValueError(f"Unknown practice mode: {mode}")
        self.context.mode = mode
        self._transition(target)

    def back_to_mode_select(self) -> None:
        self._require(CONVERSATION_SETUP, PITCH_SETUP)
        self.context.mode = None
        self.context.persona = None
        self.context.scenario = None
        self.context.pitch_length = None
        self._transition(MODE_SELECT)

    # -- setup -------------------------------------------------------------

    def select(
        self,
        *,
        persona_id: Optional[str] = None,
        scenario_id: Optional[str] = None,
        pitch_length_id: Optional[str] = None,
    ) -> None:
        """Apply several setup choices at once.

        Every id is checked before anything is stored, so a rejected request
        leaves the previous selections untouched.
        """
        self._require(CONVERSATION_SETUP, PITCH_SETUP)
        if scenario_id is not None:
            self._require(CONVERSATION_SETUP)
        if pitch_length_id is not None:
            self._require(PITCH_SETUP)

        persona = _resolve(get_persona, persona_id, "persona") if persona_id is not None else None
        scenario = _resolve(get_scenario, scenario_id, "scenario") if scenario_id is not None else None
        pitch_length = (
            _resolve(get_pitch_length, pitch_length_id, "pitch length") if pitch_length_id is not None else None
        )

        if persona is not None:
            self.context.persona = persona
        if scenario is not None:
            self.context.scenario = scenario
        if pitch_length is not None:
            self.context.pitch_length = pitch_length

    def select_persona(self, persona_id: str) -> Persona:
        self.select(persona_id=persona_id)
        return self.context.persona

    def select_scenario(self, scenario_id: str) -> Scenario:
        self.select(scenario_id=scenario_id)
        return self.context.scenario

    def select_pitch_length(self, pitch_length_id: str) -> PitchLength:
        self.select(pitch_length_id=pitch_length_id)
        return self.context.pitch_length

    def start(self) -> None:
        if self.context.state == CONVERSATION_SETUP:
            self.start_conversation()
        elif self.context.state == PITCH_SETUP:
            self.start_pitch()
        else:
            self._require(CONVERSATION_SETUP, PITCH_SETUP)

    def start_conversation(self) -> None:
        self._require(CONVERSATION_SETUP)
        if self.context.persona is None or self.context.scenario is None:
            raise SessionStateError("Select a persona and a scenario before starting the conversation.")
        self.context.history = []
        self.context.feedback = None
        self._transition(CONVERSATION)

    def start_pitch(self) -> None:
        self._require(PITCH_SETUP)
        if self.context.persona is None or self.context.pitch_length is None:
            raise SessionStateError("Select a persona and a pitch length before starting the pitch.")
        self.context.pitch_session = None
        self.context.pitch_feedback = None
        self._transition(PITCH)

    # -- live conversation -------------------------------------------------

    def take_turn(self, user_text: str = "") -> ConversationExchange:
        """Send one salesperson utterance and record the persona's reply.

        An empty utterance is only accepted for the opening turn, where it
        asks the persona to speak first.
        """
        self._require(CONVERSATION)
        user_text = (user_text or "").strip()
        if not user_text and self.context.history:
            raise ValueError("Cannot send an empty message after the conversation has started.")

        with self._pending():
            messages = build_conversation_messages(
                self.context.persona,
                self.context.scenario,
                self.context.history,
                user_text,
                self.context.research,
            )
            reply = self._chat_fn(messages)
            exchange = ConversationExchange(user=user_text, assistant=reply, timestamp=now_ms())
            self.context.history.append(exchange)

        logger.info(
            "session_id=%s turn_done exchanges=%s opening=%s",
            self.context.session_id,
            len(self.context.history),
            not user_text,
        )
        return exchange

    def end_conversation(self) -> SessionFeedback:
        self._require(CONVERSATION)
        with self._pending():
            feedback = self._feedback_fn(
                list(self.context.history),
                self.context.persona,
                self.context.scenario,
            )
            self.context.feedback = feedback
            self._transition(FEEDBACK)
        return feedback

    # -- pitch -------------------------------------------------------------

    def submit_pitch(self, transcript: str, duration: float) -> PitchFeedback:
        self._require(PITCH)
        if not transcript or not transcript.strip():
            raise ValueError("Valid transcript string is required")
        if duration < 0:
            raise ValueError("Valid duration number is required")

        with self._pending():
            pitch_session = PitchSession(
                persona=self.context.persona,
                pitch_length=self.context.pitch_length,
                transcript=transcript,
                duration=duration,
                timestamp=now_ms(),
            )
            pitch_feedback = self._pitch_feedback_fn(pitch_session)
            self.context.pitch_session = pitch_session
            self.context.pitch_feedback = pitch_feedback
            self._transition(PITCH_FEEDBACK)
        return pitch_feedback

    # -- reset / views -----------------------------------------------------

    def reset(self) -> None:
        # Refused while a model call is in flight.
        with self._pending():
            session_id = self.context.session_id
            logger.info("session_id=%s reset from=%s", session_id, self.context.state)
            self.context = SessionContext(session_id=session_id)

    def snapshot(self) -> SessionSnapshot:
        context = self.context
        return SessionSnapshot(
            session_id=context.session_id,
            state=context.state,
            research=context.research,
            mode=context.mode,
            persona=context.persona,
            scenario=context.scenario,
            pitch_length=context.pitch_length,
            history=list(context.history),
            pitch_session=context.pitch_session,
            feedback=context.feedback,
            pitch_feedback=context.pitch_feedback,
            busy=self._busy,
        )
