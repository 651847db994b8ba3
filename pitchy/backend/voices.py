"""On-device voice selection for browsers without hosted speech.

The browser posts its voice catalog and the server walks an ordered list of
predicates, returning the first voice any predicate accepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from .models import DeviceVoice


VoicePredicate = Callable[[DeviceVoice], bool]

MOBILE_PREFERRED_VOICES = [
    "Samantha",
    "Alex",
    "Karen",
    "Daniel",
    "Google US English",
    "Google English",
    "en-US",
    "en-GB",
]

DESKTOP_PREFERRED_VOICES = [
    "Microsoft David - English (United States)",
    "Microsoft Zira - English (United States)",
    "Google US English",
    "Alex",
    "Samantha",
    "Daniel",
    "Karen",
    "Moira",
    "Tessa",
]

DEFAULT_VOLUME = 0.9


@dataclass(frozen=True)
class ProsodyAdjustment:
    rate: float
    pitch: float


PERSONA_PROSODY: Dict[str, ProsodyAdjustment] = {
    "skeptical_steve": ProsodyAdjustment(rate=0.85, pitch=0.9),
    "busy_betty": ProsodyAdjustment(rate=1.1, pitch=1.1),
    "technical_tom": ProsodyAdjustment(rate=0.95, pitch=0.95),
}
NEUTRAL_PROSODY = ProsodyAdjustment(rate=1.0, pitch=1.0)


@dataclass(frozen=True)
class DeviceVoiceChoice:
    voice: Optional[str]
    rate: float
    pitch: float
    volume: float = DEFAULT_VOLUME


def name_matches(preferred: str) -> VoicePredicate:
    short_name = preferred.split(" - ")[0]
    lowered = preferred.lower()

    def predicate(voice: DeviceVoice) -> bool:
        return (
            short_name in voice.name
            or preferred in voice.lang
            or lowered in voice.name.lower()
        )

    return predicate


def local_english(voice: DeviceVoice) -> bool:
    return voice.lang.startswith("en") and voice.local_service


def any_english(voice: DeviceVoice) -> bool:
    return voice.lang.startswith("en")


def preference_chain(mobile: bool) -> List[VoicePredicate]:
    preferred = MOBILE_PREFERRED_VOICES if mobile else DESKTOP_PREFERRED_VOICES
    return [name_matches(name) for name in preferred] + [local_english, any_english]


def first_match(voices: Sequence[DeviceVoice], predicates: Sequence[VoicePredicate]) -> Optional[DeviceVoice]:
    for predicate in predicates:
        for voice in voices:
            if predicate(voice):
                return voice
    return None


def choose_device_voice(
    persona_id: str,
    voices: Sequence[DeviceVoice],
    *,
    mobile: bool = False,
) -> DeviceVoiceChoice:
    selected = first_match(voices, preference_chain(mobile))
    base_rate = 0.9 if mobile else 1.0
    prosody = PERSONA_PROSODY.get(persona_id or "", NEUTRAL_PROSODY)
    return DeviceVoiceChoice(
        voice=selected.name if selected else None,
        rate=round(base_rate * prosody.rate, 3),
        pitch=round(prosody.pitch, 3),
    )
