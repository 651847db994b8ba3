import time
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    return int(time.time() * 1000)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenCamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Persona(FrozenCamelModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    avatar: str = ""
    system_prompt: str = ""


class Scenario(FrozenCamelModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    icon: str = ""
    initial_context: str = ""
    objectives: List[str] = Field(default_factory=list)


class PitchLength(FrozenCamelModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    duration: int = Field(gt=0)
    description: str = ""


class ConversationExchange(FrozenCamelModel):
    user: str
    assistant: str
    timestamp: float


class PitchSession(FrozenCamelModel):
    persona: Persona
    pitch_length: PitchLength
    transcript: str = Field(min_length=1)
    duration: float = Field(ge=0)
    timestamp: float


class SessionFeedback(FrozenCamelModel):
    score: int
    feedback: List[str]
    raw_feedback: str


class PitchCriteria(FrozenCamelModel):
    clarity: int
    persuasiveness: int
    structure: int
    time_management: int
    impact: int


class PitchCriteriaJustifications(FrozenCamelModel):
    clarity: str
    persuasiveness: str
    structure: str
    time_management: str
    impact: str


class PitchFeedback(FrozenCamelModel):
    score: int
    feedback: List[str]
    raw_feedback: str
    criteria: PitchCriteria
    criteria_justifications: PitchCriteriaJustifications


class ResearchData(FrozenCamelModel):
    query: str
    summary: str
    key_points: List[str]
    sources: List[str]
    timestamp: float


class ChatMessage(CamelModel):
    role: Literal["system", "user", "assistant"]
    content: str


# Request bodies


class ChatRequest(CamelModel):
    messages: List[ChatMessage] = Field(min_length=1)


class FeedbackRequest(CamelModel):
    transcript: List[ConversationExchange]
    persona: Persona
    scenario: Scenario


class PitchFeedbackRequest(CamelModel):
    pitch_session: PitchSession


class ResearchRequest(CamelModel):
    query: str


class TTSRequest(CamelModel):
    text: str = Field(min_length=1)
    persona: str = ""


class DeviceVoice(CamelModel):
    name: str
    lang: str = ""
    local_service: bool = False


class VoiceRequest(CamelModel):
    persona: str = ""
    voices: List[DeviceVoice] = Field(default_factory=list)
    mobile: bool = False


class SessionResearchRequest(CamelModel):
    data: Optional[ResearchData] = None


class SessionModeRequest(CamelModel):
    mode: Literal["conversation", "pitch"]


class SessionSelectionRequest(CamelModel):
    persona_id: Optional[str] = None
    scenario_id: Optional[str] = None
    pitch_length_id: Optional[str] = None


class SessionTurnRequest(CamelModel):
    text: str = ""


class SessionPitchRequest(CamelModel):
    transcript: str = Field(min_length=1)
    duration: float = Field(ge=0)


# Response bodies


class ErrorResponse(CamelModel):
    success: bool = False
    error: str


class TranscribeResponse(CamelModel):
    success: bool = True
    text: str


class ChatResponse(CamelModel):
    success: bool = True
    response: str


class FeedbackResponse(CamelModel):
    success: bool = True
    feedback: SessionFeedback


class PitchFeedbackResponse(CamelModel):
    success: bool = True
    feedback: PitchFeedback


class ResearchResponse(CamelModel):
    success: bool = True
    data: ResearchData


class VoiceResponse(CamelModel):
    success: bool = True
    voice: Optional[str]
    rate: float
    pitch: float
    volume: float


class SessionSnapshot(CamelModel):
    session_id: str
    state: str
    research: Optional[ResearchData] = None
    mode: Optional[str] = None
    persona: Optional[Persona] = None
    scenario: Optional[Scenario] = None
    pitch_length: Optional[PitchLength] = None
    history: List[ConversationExchange] = Field(default_factory=list)
    pitch_session: Optional[PitchSession] = None
    feedback: Optional[SessionFeedback] = None
    pitch_feedback: Optional[PitchFeedback] = None
    busy: bool = False


class SessionResponse(CamelModel):
    success: bool = True
    session: SessionSnapshot
