import os
from dataclasses import dataclass
from typing import Dict

from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI

from .llm_client import base_url, get_api_key, timeout_seconds, truncate


DEFAULT_TRANSCRIBE_MODEL = "whisper-1"
DEFAULT_TTS_MODEL = "tts-1-hd"
DEFAULT_AUDIO_FILENAME = "audio.wav"
DEFAULT_AUDIO_MIME = "audio/wav"


@dataclass(frozen=True)
class HostedVoice:
    voice: str
    speed: float


DEFAULT_HOSTED_VOICE = HostedVoice(voice="alloy", speed=1.0)
HOSTED_VOICES: Dict[str, HostedVoice] = {
    "skeptical_steve": HostedVoice(voice="onyx", speed=0.9),
    "busy_betty": HostedVoice(voice="nova", speed=1.1),
    "technical_tom": HostedVoice(voice="echo", speed=1.0),
}


def hosted_voice_for(persona_id: str) -> HostedVoice:
    return HOSTED_VOICES.get(persona_id or "", DEFAULT_HOSTED_VOICE)


def _build_client() -> OpenAI:
    return OpenAI(base_url=base_url(), api_key=get_api_key(), timeout=timeout_seconds())


def _env_model(name: str, default: str) -> str:
    return os.getenv(name, default).strip() or default


def _provider_error(action: str, exc: Exception) -> RuntimeError:
    if isinstance(exc, APIStatusError):
        detail = truncate(getattr(exc, "message", None) or str(exc))
        return RuntimeError(f"{action} failed ({exc.status_code}): {detail}")
    if isinstance(exc, APITimeoutError):
        return RuntimeError(f"{action} timed out.")
    if isinstance(exc, APIConnectionError):
        return RuntimeError(f"Failed to connect to speech provider: {exc}")
    return RuntimeError(f"Unexpected {action.lower()} error: {exc}")


def transcribe_audio(audio_bytes: bytes, filename: str = "", content_type: str = "") -> str:
    if not audio_bytes:
        raise ValueError("Audio file is empty.")

    client = _build_client()
    upload = (
        filename or DEFAULT_AUDIO_FILENAME,
        audio_bytes,
        content_type or DEFAULT_AUDIO_MIME,
    )
    try:
        transcription = client.audio.transcriptions.create(
            file=upload,
            model=_env_model("PITCHY_TRANSCRIBE_MODEL", DEFAULT_TRANSCRIBE_MODEL),
            response_format="text",
        )
    except (APIStatusError, APITimeoutError, APIConnectionError) as exc:
        raise _provider_error("Transcription", exc) from exc

    # response_format="text" yields a plain string; older SDKs return an object.
    text = transcription if isinstance(transcription, str) else getattr(transcription, "text", "")
    return (text or "").strip()


def synthesize_speech(text: str, persona_id: str = "") -> bytes:
    if not text or not text.strip():
        raise ValueError("Text is required")

    hosted = hosted_voice_for(persona_id)
    client = _build_client()
    try:
        response = client.audio.speech.create(
            model=_env_model("PITCHY_TTS_MODEL", DEFAULT_TTS_MODEL),
            voice=hosted.voice,
            input=text,
            response_format="mp3",
            speed=hosted.speed,
        )
    except (APIStatusError, APITimeoutError, APIConnectionError) as exc:
        raise _provider_error("Speech synthesis", exc) from exc
    return response.content
