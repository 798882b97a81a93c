"""Diatonic triads of the major keys."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence, Tuple

from melodychords.pitch import NoteSpelling, PitchClass
from melodychords.scale import (
    CHORD_FUNCTIONS,
    DEGREE_NUMERALS,
    DEGREE_QUALITIES,
    NUM_DEGREES,
    ChordFunction,
    ChordQuality,
    get_scale,
)


@dataclass(frozen=True)
class DiatonicChord:
    """A triad built on one degree of a major scale."""

    degree: int  # Scale degree 1-7
    root: NoteSpelling
    third: NoteSpelling
    fifth: NoteSpelling
    quality: ChordQuality
    numeral: str  # Roman numeral, e.g. "vii°"
    name: str  # Display name, e.g. "Bm" or "F♯°"
    function: ChordFunction

    @property
    def notes(self) -> Tuple[NoteSpelling, NoteSpelling, NoteSpelling]:
        """The chord tones as (root, third, fifth)."""
        return (self.root, self.third, self.fifth)

    def note_names(self) -> List[str]:
        return [n.name for n in self.notes]

    def pitch_classes(self) -> FrozenSet[PitchClass]:
        """The set of the chord's three pitch classes."""
        return frozenset(n.pitch_class() for n in self.notes)


def build_chords(key_name: str) -> List[DiatonicChord]:
    """Build the seven diatonic triads of a major key.

    For degree i the root, third and fifth are the scale degrees i, i+2 and
    i+4, wrapping around the seven-note scale.

    Args:
        key_name: Catalog name of the key, e.g. ``"C Major"``.

    Returns:
        The chords for degrees 1-7 in order, or an empty list if the key
        name is not in the catalog.
    """
    scale = get_scale(key_name)
    if scale is None:
        return []
    chords: List[DiatonicChord] = []
    for i in range(NUM_DEGREES):
        root = scale.notes[i]
        quality = DEGREE_QUALITIES[i]
        chords.append(
            DiatonicChord(
                degree=i + 1,
                root=root,
                third=scale.notes[(i + 2) % NUM_DEGREES],
                fifth=scale.notes[(i + 4) % NUM_DEGREES],
                quality=quality,
                numeral=DEGREE_NUMERALS[i],
                name=root.name + quality.suffix,
                function=CHORD_FUNCTIONS[i],
            )
        )
    return chords


def find_chord(chords: Sequence[DiatonicChord], name: str) -> Optional[DiatonicChord]:
    """Find a chord by display name among the given chords."""
    for chord in chords:
        if chord.name == name:
            return chord
    return None
