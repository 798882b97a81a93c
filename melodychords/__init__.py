"""Find the major keys that fit a set of notes and the chords that fit a melody."""

from melodychords.chords import DiatonicChord, build_chords
from melodychords.keys import find_keys, match_keys
from melodychords.phrase import analyze_phrase, parse_phrase, rank_chords
from melodychords.pitch import NoteSpelling, PitchClass, letter_of, normalize
from melodychords.scale import MAJOR_SCALES, SCALE_LOOKUP, MajorScale, respell
from melodychords.state import AppState, apply_action

__all__ = [
    "NoteSpelling",
    "PitchClass",
    "normalize",
    "letter_of",
    "respell",
    "MajorScale",
    "MAJOR_SCALES",
    "SCALE_LOOKUP",
    "DiatonicChord",
    "build_chords",
    "find_keys",
    "match_keys",
    "parse_phrase",
    "rank_chords",
    "analyze_phrase",
    "AppState",
    "apply_action",
]
