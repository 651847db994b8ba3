"""
Tests for device voice selection and hosted voice mapping.
"""

from unittest.mock import MagicMock, patch

import pytest

from pitchy.backend.models import DeviceVoice
from pitchy.backend.speech import DEFAULT_HOSTED_VOICE, hosted_voice_for, synthesize_speech, transcribe_audio
from pitchy.backend.voices import choose_device_voice


def _voices(*entries):
    return [DeviceVoice(name=name, lang=lang, local_service=local) for name, lang, local in entries]


# ═══════════════════════════════════════════════════════════════
# DEVICE VOICES
# ═══════════════════════════════════════════════════════════════

class TestDeviceVoice:

    def test_desktop_prefers_named_voice(self):
        voices = _voices(
            ("Google US English", "en-US", False),
            ("Microsoft Zira - English (United States)", "en-US", True),
        )
        choice = choose_device_voice("technical_tom", voices)

        assert choice.voice == "Microsoft Zira - English (United States)"
        assert choice.rate == 0.95
        assert choice.pitch == 0.95
        assert choice.volume == 0.9

    def test_mobile_preference_order_and_rate(self):
        voices = _voices(("Daniel", "en-GB", True), ("Samantha", "en-US", True))
        choice = choose_device_voice("busy_betty", voices, mobile=True)

        assert choice.voice == "Samantha"
        assert choice.rate == 0.99
        assert choice.pitch == 1.1

    def test_falls_back_to_local_english(self):
        voices = _voices(("Voix", "fr-FR", True), ("Remote", "en-AU", False), ("Local", "en-AU", True))
        assert choose_device_voice("", voices).voice == "Local"

    def test_falls_back_to_any_english(self):
        voices = _voices(("Voix", "fr-FR", True), ("Remote", "en-AU", False))
        assert choose_device_voice("", voices).voice == "Remote"

    def test_no_english_voice(self):
        choice = choose_device_voice("skeptical_steve", _voices(("Voix", "fr-FR", True)))

        assert choice.voice is None
        assert choice.rate == 0.85
        assert choice.pitch == 0.9


# ═══════════════════════════════════════════════════════════════
# HOSTED SPEECH
# ═══════════════════════════════════════════════════════════════

class TestHostedSpeech:

    def test_persona_voice_mapping(self):
        assert hosted_voice_for("skeptical_steve").voice == "onyx"
        assert hosted_voice_for("busy_betty").speed == 1.1
        assert hosted_voice_for("unknown") == DEFAULT_HOSTED_VOICE

    def test_synthesize_uses_persona_voice(self):
        client = MagicMock()
        client.audio.speech.create.return_value.content = b"mp3-bytes"
        with patch("pitchy.backend.speech._build_client", return_value=client):
            audio = synthesize_speech("Hello there", "busy_betty")

        assert audio == b"mp3-bytes"
        kwargs = client.audio.speech.create.call_args.kwargs
        assert kwargs["voice"] == "nova"
        assert kwargs["speed"] == 1.1
        assert kwargs["input"] == "Hello there"

    def test_synthesize_rejects_blank_text(self):
        with pytest.raises(ValueError):
            synthesize_speech("   ", "busy_betty")

    def test_transcribe_strips_text(self):
        client = MagicMock()
        client.audio.transcriptions.create.return_value = "  we save you an hour  "
        with patch("pitchy.backend.speech._build_client", return_value=client):
            text = transcribe_audio(b"RIFF", filename="clip.webm", content_type="audio/webm")

        assert text == "we save you an hour"
        upload = client.audio.transcriptions.create.call_args.kwargs["file"]
        assert upload == ("clip.webm", b"RIFF", "audio/webm")

    def test_transcribe_rejects_empty_audio(self):
        with pytest.raises(ValueError):
            transcribe_audio(b"")

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(RuntimeError, match="OPENAI_API_KEY"):
            synthesize_speech("Hello", "")
