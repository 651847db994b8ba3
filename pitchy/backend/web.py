import logging
import os
from typing import Callable, List, Optional, TypeVar

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .coaching import generate_chat_reply, generate_pitch_feedback, generate_session_feedback, run_research
from .constants import MAX_REQUEST_BYTES
from .models import (
    ChatRequest,
    ChatResponse,
    FeedbackRequest,
    FeedbackResponse,
    Persona,
    PitchFeedbackRequest,
    PitchFeedbackResponse,
    PitchLength,
    ResearchRequest,
    ResearchResponse,
    Scenario,
    SessionModeRequest,
    SessionPitchRequest,
    SessionResearchRequest,
    SessionResponse,
    SessionSelectionRequest,
    SessionTurnRequest,
    TranscribeResponse,
    TTSRequest,
    VoiceRequest,
    VoiceResponse,
)
from .personas import list_personas
from .pitch_lengths import list_pitch_lengths
from .scenarios import list_scenarios
from .session import CONVERSATION, SessionController, SessionStateError
from .session_store import build_session_store
from .speech import synthesize_speech
from .transcription import transcribe_upload
from .voices import choose_device_voice


logger = logging.getLogger("uvicorn.error")
T = TypeVar("T")

app = FastAPI(title="Pitchy Sales Practice Backend")
session_store = build_session_store()

frontend_origins = os.getenv(
    "FRONTEND_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in frontend_origins.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems: List[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        problems.append(f"{location}: {message}" if location else message)
    detail = "; ".join(problems) or "Request body is invalid."
    return _error_response(400, f"Invalid request: {detail}")


@app.middleware("http")
async def enforce_upload_size(request, call_next):
    if request.method == "POST" and request.url.path == "/api/transcribe":
        content_length = request.headers.get("content-length")
        if content_length:
            try:
                if int(content_length) > MAX_REQUEST_BYTES:
                    return _error_response(413, f"Request too large. Max size is {MAX_REQUEST_BYTES} bytes.")
            except ValueError:
                pass
    return await call_next(request)


def _upstream_error(exc: RuntimeError) -> HTTPException:
    detail = str(exc)
    status_code = 500 if "OPENAI_API_KEY" in detail else 502
    logger.warning("upstream_call_failed status=%s error=%s", status_code, detail)
    return HTTPException(status_code=status_code, detail=detail)


def _call(fn: Callable[..., T], *args, **kwargs) -> T:
    try:
        return fn(*args, **kwargs)
    except SessionStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RuntimeError as exc:
        raise _upstream_error(exc) from exc


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "storage": session_store.storage_name}


@app.get("/api/personas", response_model=List[Persona])
def get_personas() -> List[Persona]:
    return list_personas()


@app.get("/api/scenarios", response_model=List[Scenario])
def get_scenarios() -> List[Scenario]:
    return list_scenarios()


@app.get("/api/pitch-lengths", response_model=List[PitchLength])
def get_pitch_lengths() -> List[PitchLength]:
    return list_pitch_lengths()


@app.post("/api/transcribe", response_model=TranscribeResponse)
async def transcribe(audio: Optional[UploadFile] = File(None)) -> TranscribeResponse:
    if audio is None:
        raise HTTPException(status_code=400, detail="No audio file provided")
    try:
        text = await transcribe_upload(audio)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RuntimeError as exc:
        raise _upstream_error(exc) from exc
    return TranscribeResponse(text=text)


@app.post("/api/chat", response_model=ChatResponse)
def chat(request: ChatRequest) -> ChatResponse:
    messages = [message.model_dump() for message in request.messages]
    reply = _call(generate_chat_reply, messages)
    return ChatResponse(response=reply)


@app.post("/api/feedback", response_model=FeedbackResponse)
def feedback(request: FeedbackRequest) -> FeedbackResponse:
    result = _call(generate_session_feedback, request.transcript, request.persona, request.scenario)
    return FeedbackResponse(feedback=result)


@app.post("/api/pitch-feedback", response_model=PitchFeedbackResponse)
def pitch_feedback(request: PitchFeedbackRequest) -> PitchFeedbackResponse:
    result = _call(generate_pitch_feedback, request.pitch_session)
    return PitchFeedbackResponse(feedback=result)


@app.post("/api/research", response_model=ResearchResponse)
def research(request: ResearchRequest) -> ResearchResponse:
    data = _call(run_research, request.query)
    return ResearchResponse(data=data)


@app.post("/api/tts")
def tts(request: TTSRequest) -> Response:
    audio = _call(synthesize_speech, request.text, request.persona)
    return Response(content=audio, media_type="audio/mpeg")


@app.post("/api/voice", response_model=VoiceResponse)
def device_voice(request: VoiceRequest) -> VoiceResponse:
    choice = choose_device_voice(request.persona, request.voices, mobile=request.mobile)
    return VoiceResponse(voice=choice.voice, rate=choice.rate, pitch=choice.pitch, volume=choice.volume)


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

def _get_controller(session_id: str) -> SessionController:
    controller = session_store.get_session(session_id)
    if controller is None:
        raise HTTPException(status_code=404, detail="Session not found.")
    return controller


def _session_response(controller: SessionController) -> SessionResponse:
    return SessionResponse(session=controller.snapshot())


@app.post("/api/sessions", response_model=SessionResponse)
def create_session() -> SessionResponse:
    controller = session_store.create_session()
    logger.info("session_id=%s session_created", controller.context.session_id)
    return _session_response(controller)


@app.get("/api/sessions/{session_id}", response_model=SessionResponse)
def get_session(session_id: str) -> SessionResponse:
    return _session_response(_get_controller(session_id))


@app.delete("/api/sessions/{session_id}")
def delete_session(session_id: str) -> dict:
    if not session_store.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found.")
    return {"success": True}


@app.post("/api/sessions/{session_id}/research", response_model=SessionResponse)
def session_research(session_id: str, request: SessionResearchRequest) -> SessionResponse:
    controller = _get_controller(session_id)
    _call(controller.complete_research, request.data)
    return _session_response(controller)


@app.post("/api/sessions/{session_id}/mode", response_model=SessionResponse)
def session_mode(session_id: str, request: SessionModeRequest) -> SessionResponse:
    controller = _get_controller(session_id)
    _call(controller.choose_mode, request.mode)
    return _session_response(controller)


@app.post("/api/sessions/{session_id}/selection", response_model=SessionResponse)
def session_selection(session_id: str, request: SessionSelectionRequest) -> SessionResponse:
    controller = _get_controller(session_id)
    _call(
        controller.select,
        persona_id=request.persona_id,
        scenario_id=request.scenario_id,
        pitch_length_id=request.pitch_length_id,
    )
    return _session_response(controller)


@app.post("/api/sessions/{session_id}/back", response_model=SessionResponse)
def session_back(session_id: str) -> SessionResponse:
    controller = _get_controller(session_id)
    _call(controller.back_to_mode_select)
    return _session_response(controller)


@app.post("/api/sessions/{session_id}/start", response_model=SessionResponse)
def session_start(session_id: str) -> SessionResponse:
    controller = _get_controller(session_id)
    _call(controller.start)
    if controller.state == CONVERSATION:
        _call(controller.take_turn, "")
    return _session_response(controller)


@app.post("/api/sessions/{session_id}/turns", response_model=SessionResponse)
def session_turn(session_id: str, request: SessionTurnRequest) -> SessionResponse:
    controller = _get_controller(session_id)
    _call(controller.take_turn, request.text)
    return _session_response(controller)


@app.post("/api/sessions/{session_id}/end", response_model=SessionResponse)
def session_end(session_id: str) -> SessionResponse:
    controller = _get_controller(session_id)
    _call(controller.end_conversation)
    return _session_response(controller)


@app.post("/api/sessions/{session_id}/pitch", response_model=SessionResponse)
def session_pitch(session_id: str, request: SessionPitchRequest) -> SessionResponse:
    controller = _get_controller(session_id)
    _call(controller.submit_pitch, request.transcript, request.duration)
    return _session_response(controller)


@app.post("/api/sessions/{session_id}/reset", response_model=SessionResponse)
def session_reset(session_id: str) -> SessionResponse:
    controller = _get_controller(session_id)
    _call(controller.reset)
    return _session_response(controller)
