import pytest
from fastapi.testclient import TestClient

from pitchy.backend import web
from pitchy.backend.models import ConversationExchange, PitchSession, ResearchData
from pitchy.backend.personas import PERSONAS
from pitchy.backend.pitch_lengths import PITCH_LENGTHS
from pitchy.backend.scenarios import SCENARIOS
from pitchy.backend.session_store import InMemorySessionStore


@pytest.fixture
def persona():
    return PERSONAS["busy_betty"]


@pytest.fixture
def scenario():
    return SCENARIOS["cold_call"]


@pytest.fixture
def research():
    return ResearchData(
        query="Acme Analytics",
        summary="Acme sells dashboards to mid-size retailers.",
        key_points=["Founded in 2015", "Raised a Series B last year", "Competes with Looker"],
        sources=["AI Research Assistant"],
        timestamp=1700000000000,
    )


@pytest.fixture
def two_exchanges():
    return [
        ConversationExchange(user="", assistant="I only have five minutes. Who is this?", timestamp=1),
        ConversationExchange(user="Hi Betty, I'm Sam from Acme.", assistant="Get to the point.", timestamp=2),
    ]


@pytest.fixture
def pitch_session(persona):
    return PitchSession(
        persona=persona,
        pitch_length=PITCH_LENGTHS["short"],
        transcript="Acme cuts reporting time in half for retail teams.",
        duration=45,
        timestamp=1700000000000,
    )


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(web, "session_store", InMemorySessionStore())
    with TestClient(web.app) as test_client:
        yield test_client
