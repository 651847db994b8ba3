"""
Tests for the practice session state machine. Model calls are replaced with
plain callables so the flow runs offline.
"""

import pytest

from pitchy.backend.models import PitchCriteria, PitchCriteriaJustifications, PitchFeedback, SessionFeedback
from pitchy.backend.session import (
    CONVERSATION,
    CONVERSATION_SETUP,
    FEEDBACK,
    MODE_SELECT,
    PITCH,
    PITCH_FEEDBACK,
    PITCH_SETUP,
    RESEARCH,
    SessionController,
    SessionStateError,
)
from pitchy.backend.session_store import InMemorySessionStore


class FakeCoach:
    def __init__(self):
        self.chat_calls = []
        self.feedback_calls = []
        self.pitch_calls = []
        self.replies = ["Who is this?", "I have five minutes.", "Fine, send me an email."]
        self.fail_next = False

    def chat(self, messages):
        self.chat_calls.append(list(messages))
        if self.fail_next:
            self.fail_next = False
            raise RuntimeError("Chat completion error 503: overloaded")
        return self.replies[len(self.chat_calls) - 1]

    def feedback(self, transcript, persona, scenario):
        self.feedback_calls.append((list(transcript), persona, scenario))
        if self.fail_next:
            self.fail_next = False
            raise RuntimeError("Chat completion timed out after 60 seconds.")
        return SessionFeedback(score=61, feedback=["ok"], raw_feedback="SCORE: 61")

    def pitch_feedback(self, pitch_session):
        self.pitch_calls.append(pitch_session)
        if self.fail_next:
            self.fail_next = False
            raise RuntimeError("Chat completion timed out after 60 seconds.")
        return PitchFeedback(
            score=48,
            feedback=["tighten"],
            raw_feedback="OVERALL SCORE: 48",
            criteria=PitchCriteria(clarity=1, persuasiveness=2, structure=3, time_management=4, impact=5),
            criteria_justifications=PitchCriteriaJustifications(
                clarity="a", persuasiveness="b", structure="c", time_management="d", impact="e"
            ),
        )


@pytest.fixture
def coach():
    return FakeCoach()


@pytest.fixture
def controller(coach):
    return SessionController(
        "session-1",
        chat_fn=coach.chat,
        feedback_fn=coach.feedback,
        pitch_feedback_fn=coach.pitch_feedback,
    )


def _to_conversation(controller, research=None):
    controller.complete_research(research)
    controller.choose_mode("conversation")
    controller.select_persona("busy_betty")
    controller.select_scenario("cold_call")
    controller.start()


def _to_pitch(controller):
    controller.complete_research(None)
    controller.choose_mode("pitch")
    controller.select_persona("technical_tom")
    controller.select_pitch_length("short")
    controller.start()


# ═══════════════════════════════════════════════════════════════
# SETUP TRANSITIONS
# ═══════════════════════════════════════════════════════════════

class TestSetup:

    def test_initial_state(self, controller):
        assert controller.state == RESEARCH
        assert controller.busy is False

    def test_research_then_mode(self, controller, research):
        controller.complete_research(research)
        assert controller.state == MODE_SELECT
        assert controller.context.research == research

        controller.choose_mode("conversation")
        assert controller.state == CONVERSATION_SETUP

    def test_skip_research(self, controller):
        controller.complete_research(None)
        controller.choose_mode("pitch")

        assert controller.state == PITCH_SETUP
        assert controller.context.research is None

    def test_unknown_mode(self, controller):
        controller.complete_research(None)
        with pytest.raises(ValueError):
            controller.choose_mode("debate")
        assert controller.state == MODE_SELECT

    def test_mode_not_allowed_before_research(self, controller):
        with pytest.raises(SessionStateError):
            controller.choose_mode("pitch")

    def test_start_requires_selections(self, controller):
        controller.complete_research(None)
        controller.choose_mode("conversation")
        controller.select_persona("busy_betty")

        with pytest.raises(SessionStateError):
            controller.start()
        assert controller.state == CONVERSATION_SETUP

    def test_pitch_start_requires_length(self, controller):
        controller.complete_research(None)
        controller.choose_mode("pitch")
        controller.select_persona("busy_betty")

        with pytest.raises(SessionStateError):
            controller.start()

    def test_unknown_persona(self, controller):
        controller.complete_research(None)
        controller.choose_mode("conversation")

        with pytest.raises(ValueError, match="Unknown persona"):
            controller.select_persona("angry_andy")
        assert controller.context.persona is None

    def test_scenario_not_selectable_in_pitch_setup(self, controller):
        controller.complete_research(None)
        controller.choose_mode("pitch")

        with pytest.raises(SessionStateError):
            controller.select_scenario("cold_call")

    def test_back_clears_selections(self, controller):
        controller.complete_research(None)
        controller.choose_mode("conversation")
        controller.select_persona("busy_betty")
        controller.back_to_mode_select()

        assert controller.state == MODE_SELECT
        assert controller.context.persona is None
        assert controller.context.mode is None


# ═══════════════════════════════════════════════════════════════
# LIVE CONVERSATION
# ═══════════════════════════════════════════════════════════════

class TestConversation:

    def test_opening_turn(self, controller, coach):
        _to_conversation(controller)
        exchange = controller.take_turn("")

        assert controller.state == CONVERSATION
        assert exchange.user == ""
        assert exchange.assistant == "Who is this?"
        assert len(coach.chat_calls[0]) == 1
        assert coach.chat_calls[0][0]["role"] == "system"

    def test_turns_accumulate_history(self, controller, coach):
        _to_conversation(controller)
        controller.take_turn("")
        controller.take_turn("Hi Betty, it's Sam from Acme.")

        assert [e.assistant for e in controller.context.history] == ["Who is this?", "I have five minutes."]
        roles = [m["role"] for m in coach.chat_calls[1]]
        assert roles == ["system", "assistant", "user"]
        assert coach.chat_calls[1][-1]["content"] == "Hi Betty, it's Sam from Acme."

    def test_research_reaches_system_prompt(self, controller, coach, research):
        _to_conversation(controller, research)
        controller.take_turn("")
        assert "RESEARCH CONTEXT" in coach.chat_calls[0][0]["content"]

    def test_empty_turn_after_opening_rejected(self, controller):
        _to_conversation(controller)
        controller.take_turn("")

        with pytest.raises(ValueError):
            controller.take_turn("   ")
        assert len(controller.context.history) == 1

    def test_failed_turn_leaves_history_unchanged(self, controller, coach):
        _to_conversation(controller)
        coach.fail_next = True

        with pytest.raises(RuntimeError):
            controller.take_turn("")
        assert controller.state == CONVERSATION
        assert controller.context.history == []
        assert controller.busy is False

    def test_reentrant_call_rejected_while_busy(self, controller, coach):
        _to_conversation(controller)

        def chat(messages):
            assert controller.busy is True
            controller.take_turn("again")
            return "never"

        controller._chat_fn = chat
        with pytest.raises(SessionStateError, match="in progress"):
            controller.take_turn("")
        assert controller.context.history == []
        assert controller.busy is False

    def test_end_conversation(self, controller, coach):
        _to_conversation(controller)
        controller.take_turn("")
        controller.take_turn("Hello")
        feedback = controller.end_conversation()

        assert controller.state == FEEDBACK
        assert feedback.score == 61
        transcript, persona, scenario = coach.feedback_calls[0]
        assert len(transcript) == 2
        assert persona.id == "busy_betty"
        assert scenario.id == "cold_call"

    def test_failed_feedback_stays_in_conversation(self, controller, coach):
        _to_conversation(controller)
        coach.fail_next = True

        with pytest.raises(RuntimeError):
            controller.end_conversation()
        assert controller.state == CONVERSATION
        assert controller.context.feedback is None

    def test_turn_not_allowed_in_setup(self, controller):
        controller.complete_research(None)
        with pytest.raises(SessionStateError):
            controller.take_turn("hello")


# ═══════════════════════════════════════════════════════════════
# PITCH
# ═══════════════════════════════════════════════════════════════

class TestPitch:

    def test_submit_pitch(self, controller, coach):
        _to_pitch(controller)
        assert controller.state == PITCH

        result = controller.submit_pitch("We make dashboards fast.", 52.5)

        assert controller.state == PITCH_FEEDBACK
        assert result.score == 48
        session = controller.context.pitch_session
        assert session.duration == 52.5
        assert session.pitch_length.duration == 60
        assert coach.pitch_calls[0] is session

    def test_blank_transcript_rejected(self, controller, coach):
        _to_pitch(controller)

        with pytest.raises(ValueError):
            controller.submit_pitch("   ", 10)
        assert coach.pitch_calls == []

    def test_negative_duration_rejected(self, controller):
        _to_pitch(controller)
        with pytest.raises(ValueError):
            controller.submit_pitch("pitch", -1)

    def test_failed_evaluation_stays_in_pitch(self, controller, coach):
        _to_pitch(controller)
        coach.fail_next = True

        with pytest.raises(RuntimeError):
            controller.submit_pitch("We make dashboards fast.", 30)
        assert controller.state == PITCH
        assert controller.context.pitch_session is None


# ═══════════════════════════════════════════════════════════════
# RESET, SNAPSHOT AND STORE
# ═══════════════════════════════════════════════════════════════

class TestResetAndStore:

    def test_reset_clears_everything(self, controller, research):
        _to_conversation(controller, research)
        controller.take_turn("")
        controller.reset()

        assert controller.state == RESEARCH
        assert controller.context.session_id == "session-1"
        assert controller.context.research is None
        assert controller.context.persona is None
        assert controller.context.history == []

    def test_reset_from_feedback(self, controller):
        _to_conversation(controller)
        controller.end_conversation()
        controller.reset()
        assert controller.state == RESEARCH

    def test_snapshot(self, controller):
        _to_conversation(controller)
        controller.take_turn("")
        snapshot = controller.snapshot()

        assert snapshot.session_id == "session-1"
        assert snapshot.state == CONVERSATION
        assert snapshot.persona.id == "busy_betty"
        assert len(snapshot.history) == 1
        dumped = snapshot.model_dump(by_alias=True)
        assert "sessionId" in dumped
        assert "pitchLength" in dumped

    def test_store_lifecycle(self):
        store = InMemorySessionStore()
        first = store.create_session()
        second = store.create_session()

        assert first.context.session_id != second.context.session_id
        assert store.get_session(first.context.session_id) is first
        assert len(store) == 2
        assert store.delete_session(first.context.session_id) is True
        assert store.delete_session(first.context.session_id) is False
        assert store.get_session(first.context.session_id) is None


# ═══════════════════════════════════════════════════════════════
# OVERLAPPING OPERATIONS AND ATOMIC SELECTION
# ═══════════════════════════════════════════════════════════════

class TestOverlapAndSelection:

    def test_reset_refused_during_turn(self, controller):
        _to_conversation(controller)

        def chat(messages):
            controller.reset()
            return "too late"

        controller._chat_fn = chat
        with pytest.raises(SessionStateError, match="in progress"):
            controller.take_turn("")

        assert controller.state == CONVERSATION
        assert controller.context.history == []
        assert controller.context.persona.id == "busy_betty"
        assert controller.busy is False

    def test_reset_refused_during_feedback(self, controller):
        _to_conversation(controller)

        def feedback(transcript, persona, scenario):
            controller.reset()
            return SessionFeedback(score=50, feedback=["x"], raw_feedback="SCORE: 50")

        controller._feedback_fn = feedback
        with pytest.raises(SessionStateError):
            controller.end_conversation()

        assert controller.state == CONVERSATION
        assert controller.context.feedback is None
        assert controller.context.scenario.id == "cold_call"

    def test_reset_allowed_once_call_finishes(self, controller):
        _to_conversation(controller)
        controller.take_turn("")
        controller.reset()

        assert controller.state == RESEARCH
        assert controller.context.history == []

    def test_rejected_selection_stores_nothing(self, controller):
        controller.complete_research(None)
        controller.choose_mode("conversation")

        with pytest.raises(ValueError, match="Unknown scenario"):
            controller.select(persona_id="busy_betty", scenario_id="nope")
        assert controller.context.persona is None
        assert controller.context.scenario is None

    def test_select_all_at_once(self, controller):
        controller.complete_research(None)
        controller.choose_mode("pitch")
        controller.select(persona_id="technical_tom", pitch_length_id="standard")

        assert controller.context.persona.id == "technical_tom"
        assert controller.context.pitch_length.duration == 120

    def test_select_keeps_earlier_choices(self, controller):
        controller.complete_research(None)
        controller.choose_mode("conversation")
        controller.select(persona_id="busy_betty")
        controller.select(scenario_id="product_demo")

        assert controller.context.persona.id == "busy_betty"
        assert controller.context.scenario.id == "product_demo"
