"""Finding the major keys that contain a set of selected notes.

The matcher compares pitch classes, so a selected D♭ matches a key that
spells the same tone as C♯. Results keep catalog order: every qualifying key
is an equally valid answer and no ranking is applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto, unique
from typing import Iterable, List, Set

from melodychords.pitch import LETTERS, NoteSpelling, PitchClass, normalize
from melodychords.scale import MAJOR_SCALES, MajorScale

NO_SELECTION_MESSAGE = "Select some notes above to find matching keys"
NO_MATCH_MESSAGE = (
    "No major key contains all these notes. "
    "Try removing a note or check for enharmonic equivalents."
)
MATCHED_MESSAGE = (
    "Based on your unique notes, here are the major keys that could work. "
    "Click one to see its chords."
)


def _contains_all(scale: MajorScale, notes: List[NoteSpelling]) -> bool:
    scale_pcs: Set[PitchClass] = set(scale.pitch_classes())
    for note in notes:
        pc = normalize(note)
        # Unrecognised spellings can never be contained.
        if pc is None or pc not in scale_pcs:
            return False
    return True


def find_keys(selected_notes: Iterable[NoteSpelling]) -> List[str]:
    """Find every major key containing all the selected notes.

    Args:
        selected_notes: The notes to match, compared by pitch class.

    Returns:
        Matching key names in catalog order. Empty if nothing is selected
        or no key contains every note.
    """
    notes = list(selected_notes)
    if not notes:
        return []
    return [s.name for s in MAJOR_SCALES if _contains_all(s, notes)]


@unique
class KeyMatchStatus(Enum):
    """Outcome of matching the selected notes against the catalog."""

    NoSelection = auto()  # Nothing selected, nothing computed
    NoMatch = auto()  # Notes selected but no key contains them all
    Matched = auto()  # At least one key matches

    @property
    def message(self) -> str:
        """Guidance text shown with this outcome."""
        if self == KeyMatchStatus.NoSelection:
            return NO_SELECTION_MESSAGE
        elif self == KeyMatchStatus.NoMatch:
            return NO_MATCH_MESSAGE
        else:
            return MATCHED_MESSAGE


@dataclass(frozen=True)
class KeyMatch:
    """A matching key together with its notes for display."""

    name: str
    notes: List[str]


@dataclass(frozen=True)
class KeyMatchResult:
    status: KeyMatchStatus
    matches: List[KeyMatch]

    def names(self) -> List[str]:
        return [m.name for m in self.matches]


def match_keys(selected_notes: Iterable[NoteSpelling]) -> KeyMatchResult:
    """Match the selected notes, distinguishing the empty outcomes.

    Args:
        selected_notes: The user's selected notes.

    Returns:
        A result whose status tells "nothing selected" apart from
        "selected but unmatched", with the matching keys when there are any.
    """
    notes = list(selected_notes)
    if not notes:
        return KeyMatchResult(KeyMatchStatus.NoSelection, [])
    names = find_keys(notes)
    if not names:
        return KeyMatchResult(KeyMatchStatus.NoMatch, [])
    matches = [
        KeyMatch(s.name, s.note_names()) for s in MAJOR_SCALES if s.name in names
    ]
    return KeyMatchResult(KeyMatchStatus.Matched, matches)


def sort_by_letter(notes: Iterable[NoteSpelling]) -> List[NoteSpelling]:
    """Order spellings by letter from C to B for display."""
    return sorted(notes, key=lambda n: LETTERS.index(n.letter))
