"""Renderer-facing snapshots of the application state.

A view is plain data: everything a renderer needs to draw one frame, with no
references back into the state it came from.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from melodychords.chords import DiatonicChord
from melodychords.keys import KeyMatch, KeyMatchStatus, sort_by_letter
from melodychords.phrase import ChordScore, PhraseStatus
from melodychords.scale import ChordFunction
from melodychords.state import AppState, Phrase

CHORDS_HINT = (
    "These are the 7 chords you can use. Each chord has a function "
    "(Home, Bridge, Outside): think of your music as a journey. "
    "Start from Home, venture out, and return Home."
)
NO_KEY_CHORDS_HINT = "Select a key in step 2 to see the available chords."
PHRASES_HINT = (
    "Enter the notes for each phrase in your melody. Add more phrases as you go."
)
NO_KEY_PHRASES_HINT = "Select a key in step 2 to start analyzing phrases."
NO_MATCHING_CHORDS = "No matching chords"


@dataclass(frozen=True)
class ChordView:
    numeral: str
    name: str
    notes: List[str]
    function: ChordFunction


@dataclass(frozen=True)
class SuggestionView:
    name: str
    notes: List[str]
    unique_matches: int
    total_unique_notes: int
    function: ChordFunction
    selected: bool


@dataclass(frozen=True)
class PhraseView:
    number: int  # 1-based display position
    id: int
    text: str
    status: PhraseStatus
    suggestions: List[SuggestionView]
    assigned: Optional[str]


@dataclass(frozen=True)
class AppView:
    """One frame for the renderer."""

    selected_notes: List[str]  # Ordered C to B
    key_status: KeyMatchStatus
    key_message: str
    key_matches: List[KeyMatch]
    selected_key: Optional[str]
    chords_hint: str
    chords: List[ChordView]
    phrases_hint: str
    phrases: List[PhraseView]
    progression: List[str]


def chord_view(chord: DiatonicChord) -> ChordView:
    return ChordView(chord.numeral, chord.name, chord.note_names(), chord.function)


def suggestion_view(score: ChordScore, assigned: Optional[str]) -> SuggestionView:
    return SuggestionView(
        name=score.chord.name,
        notes=score.chord.note_names(),
        unique_matches=score.unique_matches,
        total_unique_notes=score.total_unique_notes,
        function=score.chord.function,
        selected=score.chord.name == assigned,
    )


def phrase_view(number: int, phrase: Phrase) -> PhraseView:
    analysis = phrase.analysis
    return PhraseView(
        number=number,
        id=phrase.id,
        text=phrase.text,
        status=analysis.status,
        suggestions=[suggestion_view(s, analysis.assigned) for s in analysis.suggestions],
        assigned=analysis.assigned,
    )


def build_view(state: AppState) -> AppView:
    """Snapshot the state for rendering.

    Args:
        state: The current application state.

    Returns:
        The view, with selected notes in letter order and phrases numbered
        by position.
    """
    key_result = state.key_matches()
    has_key = state.selected_key is not None
    return AppView(
        selected_notes=[n.name for n in sort_by_letter(state.selected_notes)],
        key_status=key_result.status,
        key_message=key_result.status.message,
        key_matches=key_result.matches,
        selected_key=state.selected_key,
        chords_hint=CHORDS_HINT if has_key else NO_KEY_CHORDS_HINT,
        chords=[chord_view(c) for c in state.chords()],
        phrases_hint=PHRASES_HINT if has_key else NO_KEY_PHRASES_HINT,
        phrases=[phrase_view(i + 1, p) for i, p in enumerate(state.phrases)],
        progression=state.progression(),
    )
