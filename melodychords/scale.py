"""Major scale catalog and per-degree harmony tables.

This module holds the fixed catalog of the 15 major keys (every key with at
most seven sharps or flats), the chord quality, Roman numeral and harmonic
function of each scale degree, and key-aware respelling of notes for display.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto, unique
from typing import Dict, List, Optional, Tuple

from melodychords.base import MatchException
from melodychords.pitch import (
    MAX_PITCH_CLASSES,
    NoteSpelling,
    PitchClass,
    enharmonic_twin,
)

MAJOR_INTERVALS: Tuple[int, ...] = (0, 2, 4, 5, 7, 9, 11)
"""Semitone offsets of the major scale degrees from the tonic (W-W-H-W-W-W-H)."""

NUM_DEGREES = len(MAJOR_INTERVALS)
"""Number of degrees in a major scale."""


@unique
class ChordQuality(Enum):
    """Quality of a diatonic triad."""

    Major = auto()
    Minor = auto()
    Diminished = auto()

    @property
    def suffix(self) -> str:
        """Suffix appended to the root to form the chord's display name.

        Returns:
            "" for major, "m" for minor, "°" for diminished.
        """
        if self == ChordQuality.Major:
            return ""
        elif self == ChordQuality.Minor:
            return "m"
        elif self == ChordQuality.Diminished:
            return "°"
        else:
            raise MatchException(self)


@dataclass(frozen=True)
class ChordFunction:
    """The harmonic role of a scale degree, as shown next to its chord."""

    role: str  # Stable identifier, also used as a style class
    label: str  # Short human-readable name
    icon: str  # Single glyph
    description: str  # One-line explanation


@dataclass(frozen=True)
class MajorScale:
    """A named major scale with its seven spelled degrees."""

    name: str  # e.g. "F♯ Major"
    notes: Tuple[NoteSpelling, ...]  # Degrees 1-7, no octaves

    @property
    def root(self) -> NoteSpelling:
        return self.notes[0]

    def pitch_classes(self) -> List[PitchClass]:
        """Pitch classes of the seven degrees, in degree order."""
        return [n.pitch_class() for n in self.notes]

    def note_names(self) -> List[str]:
        return [n.name for n in self.notes]

    def spells(self, spelling: NoteSpelling) -> bool:
        """Check whether the spelling appears literally among the degrees.

        Args:
            spelling: The spelling to look for; its octave is ignored.

        Returns:
            True if one of the degrees has the same spelling name.
        """
        return any(n.name == spelling.name for n in self.notes)


def _mk_scale(*names: str) -> MajorScale:
    notes: List[NoteSpelling] = []
    for name in names:
        spelling = NoteSpelling.parse(name)
        assert spelling is not None, name
        notes.append(spelling)
    return MajorScale(f"{notes[0].name} Major", tuple(notes))


MAJOR_SCALES: List[MajorScale] = [
    # Sharp keys, ascending by fifths
    _mk_scale("C", "D", "E", "F", "G", "A", "B"),
    _mk_scale("G", "A", "B", "C", "D", "E", "F♯"),
    _mk_scale("D", "E", "F♯", "G", "A", "B", "C♯"),
    _mk_scale("A", "B", "C♯", "D", "E", "F♯", "G♯"),
    _mk_scale("E", "F♯", "G♯", "A", "B", "C♯", "D♯"),
    _mk_scale("B", "C♯", "D♯", "E", "F♯", "G♯", "A♯"),
    _mk_scale("F♯", "G♯", "A♯", "B", "C♯", "D♯", "E♯"),
    _mk_scale("C♯", "D♯", "E♯", "F♯", "G♯", "A♯", "B♯"),
    # Flat keys, descending by fifths
    _mk_scale("F", "G", "A", "B♭", "C", "D", "E"),
    _mk_scale("B♭", "C", "D", "E♭", "F", "G", "A"),
    _mk_scale("E♭", "F", "G", "A♭", "B♭", "C", "D"),
    _mk_scale("A♭", "B♭", "C", "D♭", "E♭", "F", "G"),
    _mk_scale("D♭", "E♭", "F", "G♭", "A♭", "B♭", "C"),
    _mk_scale("G♭", "A♭", "B♭", "C♭", "D♭", "E♭", "F"),
    _mk_scale("C♭", "D♭", "E♭", "F♭", "G♭", "A♭", "B♭"),
]
"""The 15 major keys in catalog order: C, the sharp keys, then the flat keys."""

SCALE_LOOKUP: Dict[str, MajorScale] = {s.name: s for s in MAJOR_SCALES}
"""Dictionary lookup from key name to MajorScale."""


def _check_scale(scale: MajorScale) -> None:
    """Assert that a catalog entry is a well-formed major scale.

    Each letter must appear exactly once and the degrees must follow the
    major interval pattern from the root.
    """
    assert len(scale.notes) == NUM_DEGREES
    assert len({n.letter for n in scale.notes}) == NUM_DEGREES
    root = scale.root.pitch_class()
    for steps, pc in zip(MAJOR_INTERVALS, scale.pitch_classes()):
        assert pc == (root + steps) % MAX_PITCH_CLASSES, scale.name


for _scale in MAJOR_SCALES:
    _check_scale(_scale)
assert len(SCALE_LOOKUP) == len(MAJOR_SCALES)

DEGREE_QUALITIES: Tuple[ChordQuality, ...] = (
    ChordQuality.Major,
    ChordQuality.Minor,
    ChordQuality.Minor,
    ChordQuality.Major,
    ChordQuality.Major,
    ChordQuality.Minor,
    ChordQuality.Diminished,
)
"""Triad quality for degrees 1-7 of any major scale."""

DEGREE_NUMERALS: Tuple[str, ...] = ("I", "ii", "iii", "IV", "V", "vi", "vii°")
"""Roman numeral labels for degrees 1-7."""

CHORD_FUNCTIONS: Tuple[ChordFunction, ...] = (
    ChordFunction("home", "Home", "🏠", "Stable, resolved, the tonal center"),
    ChordFunction(
        "bridge-like", "Bridge-like", "🌉", "Leads nicely to V (2-5-1 progression)"
    ),
    ChordFunction("home-like", "Home-like", "🏡", "Soft, can substitute for I"),
    ChordFunction(
        "bridge", "Bridge", "🌁", "Tension builder, wants to move forward"
    ),
    ChordFunction("outside", "Outside", "🚀", "Strong pull back to Home"),
    ChordFunction(
        "home-like", "Home-like", "🏡", "Emotional, often used in pop (1-5-6-4)"
    ),
    ChordFunction(
        "outside-like", "Outside-like", "✨", "Rare, strong tension, resolves to I"
    ),
)
"""Harmonic function of degrees 1-7.

Think of a progression as a journey: start from Home, venture out through
Bridge and Outside chords, and return Home.
"""


def get_scale(key_name: Optional[str]) -> Optional[MajorScale]:
    """Look up a catalog scale by its exact name, e.g. ``"B♭ Major"``."""
    if key_name is None:
        return None
    return SCALE_LOOKUP.get(key_name)


def canonical_key_name(text: str) -> Optional[str]:
    """Resolve loosely typed key text to a catalog key name.

    Accepts ASCII accidentals, any letter case and an optional trailing
    "major", so ``"f# major"``, ``"F#"`` and ``"F♯ Major"`` all resolve to
    ``"F♯ Major"``.

    Args:
        text: The key as typed by the user.

    Returns:
        The catalog key name, or None if no catalog key matches.
    """
    parts = text.split()
    if not parts or len(parts) > 2:
        return None
    if len(parts) == 2 and parts[1].lower() != "major":
        return None
    root = NoteSpelling.parse(parts[0])
    if root is None or root.octave is not None:
        return None
    name = f"{root.name} Major"
    return name if name in SCALE_LOOKUP else None


def respell(spelling: NoteSpelling, key_name: Optional[str]) -> NoteSpelling:
    """Respell a note to match the spelling a key uses for it.

    If the spelling or its enharmonic twin appears literally in the key's
    scale, whichever appears there is returned, so A♯ becomes B♭ in F major.
    Naturals, unmatched spellings and unknown keys pass through unchanged.
    The octave is preserved.

    Args:
        spelling: The note to respell.
        key_name: The catalog name of the active key, or None.

    Returns:
        The respelled note.
    """
    scale = get_scale(key_name)
    if scale is None or scale.spells(spelling):
        return spelling
    twin = enharmonic_twin(spelling)
    if twin is not None and scale.spells(twin):
        return twin
    return spelling
