from typing import Dict, List, Optional

from .models import PitchLength


PITCH_LENGTHS: Dict[str, PitchLength] = {
    "elevator": PitchLength(
        id="elevator",
        name="Elevator Pitch",
        duration=30,
        description="30 seconds - Quick hook and value proposition",
    ),
    "short": PitchLength(
        id="short",
        name="Short Pitch",
        duration=60,
        description="1 minute - Brief but comprehensive overview",
    ),
    "standard": PitchLength(
        id="standard",
        name="Standard Pitch",
        duration=120,
        description="2 minutes - Full pitch with problem, solution, benefits",
    ),
    "extended": PitchLength(
        id="extended",
        name="Extended Pitch",
        duration=300,
        description="5 minutes - Detailed presentation with examples",
    ),
}


def get_pitch_length(pitch_length_id: str) -> Optional[PitchLength]:
    return PITCH_LENGTHS.get(pitch_length_id)


def list_pitch_lengths() -> List[PitchLength]:
    return list(PITCH_LENGTHS.values())
