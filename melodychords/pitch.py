"""Note spellings and pitch classes.

A note spelling is what the user writes or clicks (a letter, an optional
accidental and an optional octave). A pitch class is the tone it denotes
irrespective of spelling, an integer from 0 (C) to 11 (B). Enharmonic
spellings such as C♯ and D♭ share a pitch class.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum, unique
from typing import Dict, NewType, Optional, Union

PitchClass = NewType("PitchClass", int)
"""Pitch class (0-11), C = 0."""

MAX_PITCH_CLASSES = 12
"""Number of distinct pitch classes in the chromatic scale."""

LETTERS = "CDEFGAB"
"""Note letters in ascending order from C."""


@unique
class Accidental(Enum):
    """Accidental of a spelled note, valued by its display glyph."""

    Sharp = "♯"
    Flat = "♭"

    @property
    def offset(self) -> int:
        """Semitones this accidental adds to the natural letter."""
        return 1 if self == Accidental.Sharp else -1


_ACCIDENTAL_ALIASES: Dict[str, Accidental] = {
    "♯": Accidental.Sharp,
    "#": Accidental.Sharp,
    "♭": Accidental.Flat,
    "b": Accidental.Flat,
}

_LETTER_BASES: Dict[str, int] = {
    "C": 0,
    "D": 2,
    "E": 4,
    "F": 5,
    "G": 7,
    "A": 9,
    "B": 11,
}

# Letter, optional accidental (Unicode or ASCII), optional single-digit octave.
NOTE_TOKEN_PATTERN = r"([A-Ga-g])([♯♭#b])?([0-9])?"

_SPELLING_RE = re.compile(f"^{NOTE_TOKEN_PATTERN}$")


def parse_accidental(text: Optional[str]) -> Optional[Accidental]:
    """Canonicalise an accidental marker, accepting ``#`` and ``b``."""
    if not text:
        return None
    return _ACCIDENTAL_ALIASES.get(text)


@dataclass(frozen=True)
class NoteSpelling:
    """A spelled note, optionally pinned to an octave.

    Equality includes the octave, so compare ``name`` (or use
    ``without_octave``) when only the spelling matters.
    """

    letter: str  # Uppercase letter A-G
    accidental: Optional[Accidental] = None
    octave: Optional[int] = None  # Scientific pitch octave, C4 = middle C

    @classmethod
    def parse(cls, text: str) -> Optional[NoteSpelling]:
        """Parse a single note token such as ``C``, ``f#4`` or ``B♭``.

        Args:
            text: The token to parse. Surrounding whitespace is ignored.

        Returns:
            The spelling, or None if the text is not a note token.
        """
        m = _SPELLING_RE.match(text.strip())
        if m is None:
            return None
        return cls.from_groups(m.group(1), m.group(2), m.group(3))

    @classmethod
    def from_groups(
        cls, letter: str, accidental: Optional[str], octave: Optional[str]
    ) -> NoteSpelling:
        """Build a spelling from the groups of ``NOTE_TOKEN_PATTERN``."""
        return cls(
            letter=letter.upper(),
            accidental=parse_accidental(accidental),
            octave=int(octave) if octave else None,
        )

    @property
    def name(self) -> str:
        """The spelling without octave, e.g. ``F♯``."""
        if self.accidental is None:
            return self.letter
        return self.letter + self.accidental.value

    def without_octave(self) -> NoteSpelling:
        return replace(self, octave=None) if self.octave is not None else self

    def with_octave(self, octave: int) -> NoteSpelling:
        return replace(self, octave=octave)

    def pitch_class(self) -> PitchClass:
        """The pitch class of this spelling."""
        offset = self.accidental.offset if self.accidental is not None else 0
        return PitchClass((_LETTER_BASES[self.letter] + offset) % MAX_PITCH_CLASSES)

    def midi_note(self, default_octave: int) -> int:
        """MIDI note number for this spelling.

        The octave belongs to the letter, so B♯4 sounds as C5 and C♭4 as B3.

        Args:
            default_octave: Octave to use if this spelling carries none.

        Returns:
            The MIDI note number, with C4 = 60.
        """
        octave = self.octave if self.octave is not None else default_octave
        offset = self.accidental.offset if self.accidental is not None else 0
        return 12 * (octave + 1) + _LETTER_BASES[self.letter] + offset

    def __str__(self) -> str:
        if self.octave is None:
            return self.name
        return f"{self.name}{self.octave}"


def _build_pitch_lookup() -> Dict[str, PitchClass]:
    """Build the table of every recognised spelling name to its pitch class.

    Returns:
        Dictionary mapping the 21 spelling names (each letter natural,
        sharp and flat) to pitch classes.
    """
    d: Dict[str, PitchClass] = {}
    for letter in LETTERS:
        for accidental in (None, Accidental.Sharp, Accidental.Flat):
            spelling = NoteSpelling(letter, accidental)
            d[spelling.name] = spelling.pitch_class()
    assert len(d) == 3 * len(LETTERS)
    assert set(d.values()) == set(range(MAX_PITCH_CLASSES))
    return d


PITCH_LOOKUP = _build_pitch_lookup()
"""Lookup table from spelling name (Unicode accidentals) to pitch class."""

Spellable = Union[NoteSpelling, str, int]
"""Anything ``normalize`` accepts: a spelling, its text, or a pitch class."""


def normalize(spelling: Spellable) -> Optional[PitchClass]:
    """Map a spelling to its pitch class.

    Pitch classes themselves pass through, so normalizing twice gives the
    same answer as normalizing once.

    Args:
        spelling: A NoteSpelling, a note token (Unicode or ASCII accidental,
            octave ignored) or an integer pitch class.

    Returns:
        The pitch class, or None for anything unrecognised.
    """
    if isinstance(spelling, NoteSpelling):
        return PITCH_LOOKUP.get(spelling.name)
    elif isinstance(spelling, bool):
        return None
    elif isinstance(spelling, int):
        if 0 <= spelling < MAX_PITCH_CLASSES:
            return PitchClass(spelling)
        return None
    elif isinstance(spelling, str):
        parsed = NoteSpelling.parse(spelling)
        return None if parsed is None else PITCH_LOOKUP.get(parsed.name)
    else:
        return None


def letter_of(spelling: Union[NoteSpelling, str]) -> str:
    """Return the letter of a spelling, used to detect same-letter collisions."""
    if isinstance(spelling, NoteSpelling):
        return spelling.letter
    return spelling[:1].upper()


_ENHARMONIC_TWINS: Dict[str, str] = {
    "C♯": "D♭",
    "D♭": "C♯",
    "D♯": "E♭",
    "E♭": "D♯",
    "F♯": "G♭",
    "G♭": "F♯",
    "G♯": "A♭",
    "A♭": "G♯",
    "A♯": "B♭",
    "B♭": "A♯",
}


def enharmonic_twin(spelling: NoteSpelling) -> Optional[NoteSpelling]:
    """The other common spelling of a black-key note, keeping the octave.

    Args:
        spelling: The spelling to convert.

    Returns:
        The twin spelling (C♯ for D♭ and so on), or None for naturals and
        white-key accidentals such as E♯.
    """
    twin = _ENHARMONIC_TWINS.get(spelling.name)
    if twin is None:
        return None
    parsed = NoteSpelling.parse(twin)
    assert parsed is not None
    return replace(parsed, octave=spelling.octave)
