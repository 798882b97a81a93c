"""Application state and the user actions that transform it.

The whole session lives in an immutable ``AppState``. Every user action is a
small frozen dataclass, and ``apply_action`` maps a state and an action to a
``Transition``: the new state plus the effects the front end should carry
out (sounds to play, and a final ``Render``). Nothing here touches a device,
so sessions can be replayed deterministically in tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import FrozenSet, List, Optional, Tuple, Union

from melodychords.base import MatchException
from melodychords.chords import DiatonicChord, build_chords, find_chord
from melodychords.keys import KeyMatchResult, match_keys
from melodychords.phrase import (
    EMPTY_ANALYSIS,
    PhraseAnalysis,
    analyze_phrase,
    parse_phrase,
)
from melodychords.pitch import NoteSpelling, letter_of
from melodychords.scale import respell


@dataclass(frozen=True)
class Phrase:
    """One melodic phrase entered by the user."""

    id: int  # Stable, never reused within a session
    text: str = ""
    analysis: PhraseAnalysis = EMPTY_ANALYSIS

    @property
    def chord(self) -> Optional[str]:
        """The chord name assigned to this phrase, if any."""
        return self.analysis.assigned


@dataclass(frozen=True)
class AppState:
    """Everything the user has chosen so far."""

    selected_notes: Tuple[NoteSpelling, ...] = ()  # Unique by letter, no octaves
    selected_key: Optional[str] = None
    phrases: Tuple[Phrase, ...] = ()  # In display order
    next_phrase_id: int = 1

    def key_matches(self) -> KeyMatchResult:
        return match_keys(self.selected_notes)

    def chords(self) -> List[DiatonicChord]:
        """The diatonic chords of the selected key, or none without a key."""
        if self.selected_key is None:
            return []
        return build_chords(self.selected_key)

    def find_phrase(self, phrase_id: int) -> Optional[Phrase]:
        for phrase in self.phrases:
            if phrase.id == phrase_id:
                return phrase
        return None

    def other_assigned(self, phrase_id: int) -> FrozenSet[str]:
        """Chord names assigned to every phrase except the given one."""
        return frozenset(
            p.chord for p in self.phrases if p.id != phrase_id and p.chord is not None
        )

    def progression(self) -> List[str]:
        """The chord progression summary: assigned chords in phrase order."""
        return [p.chord for p in self.phrases if p.chord is not None]


# =============================================================================
# Actions
# =============================================================================


@dataclass(frozen=True)
class ToggleNote:
    """Select or deselect a note; a new accidental evicts the same letter."""

    note: NoteSpelling


@dataclass(frozen=True)
class ClearNotes:
    pass


@dataclass(frozen=True)
class SelectKey:
    key_name: str


@dataclass(frozen=True)
class AddPhrase:
    pass


@dataclass(frozen=True)
class DeletePhrase:
    phrase_id: int


@dataclass(frozen=True)
class EditPhraseText:
    phrase_id: int
    text: str


@dataclass(frozen=True)
class SelectSuggestedChord:
    phrase_id: int
    chord_name: str


@dataclass(frozen=True)
class PressPhraseKey:
    """A key on a phrase's piano keyboard: sound it and append it to the text."""

    phrase_id: int
    note: NoteSpelling
    octave: int


@dataclass(frozen=True)
class BackspacePhrase:
    """Remove the last note token from a phrase."""

    phrase_id: int


@dataclass(frozen=True)
class PlayPhrase:
    phrase_id: int


@dataclass(frozen=True)
class PlayChord:
    """Sound one of the selected key's chords by name."""

    chord_name: str


Action = Union[
    ToggleNote,
    ClearNotes,
    SelectKey,
    AddPhrase,
    DeletePhrase,
    EditPhraseText,
    SelectSuggestedChord,
    PressPhraseKey,
    BackspacePhrase,
    PlayPhrase,
    PlayChord,
]


# =============================================================================
# Effects
# =============================================================================


@dataclass(frozen=True)
class SoundNote:
    note: NoteSpelling
    octave: Optional[int] = None  # None for the configured default octave


@dataclass(frozen=True)
class SoundChord:
    notes: Tuple[NoteSpelling, ...]


@dataclass(frozen=True)
class SoundMelody:
    notes: Tuple[NoteSpelling, ...]  # Each may carry its own octave


@dataclass(frozen=True)
class Render:
    pass


Effect = Union[SoundNote, SoundChord, SoundMelody, Render]


@dataclass(frozen=True)
class Transition:
    state: AppState
    effects: Tuple[Effect, ...] = (Render(),)


# =============================================================================
# Transitions
# =============================================================================


def _replace_phrase(state: AppState, phrase: Phrase) -> AppState:
    phrases = tuple(phrase if p.id == phrase.id else p for p in state.phrases)
    return replace(state, phrases=phrases)


def reanalyze_phrase(state: AppState, phrase_id: int) -> AppState:
    """Recompute one phrase's suggestions against the current key.

    Without a selected key the phrase keeps its text but loses its
    suggestions and assignment.
    """
    phrase = state.find_phrase(phrase_id)
    if phrase is None:
        return state
    if state.selected_key is None:
        analysis = EMPTY_ANALYSIS
    else:
        analysis = analyze_phrase(
            phrase.text,
            state.chords(),
            state.other_assigned(phrase_id),
            phrase.chord,
        )
    return _replace_phrase(state, replace(phrase, analysis=analysis))


def reanalyze_all(state: AppState) -> AppState:
    """Recompute every phrase in display order.

    Each phrase sees the assignments already recomputed for the phrases
    before it.
    """
    for phrase in state.phrases:
        state = reanalyze_phrase(state, phrase.id)
    return state


def _with_notes(state: AppState, notes: Tuple[NoteSpelling, ...]) -> AppState:
    """Set the selected notes, dropping the key if it no longer matches."""
    new_state = replace(state, selected_notes=notes)
    key = state.selected_key
    if key is not None and key not in new_state.key_matches().names():
        logging.info("key %s no longer matches the selected notes", key)
        new_state = reanalyze_all(replace(new_state, selected_key=None))
    return new_state


def _toggle_note(state: AppState, action: ToggleNote) -> Transition:
    note = action.note.without_octave()
    letter = letter_of(note)
    was_selected = note in state.selected_notes
    notes = tuple(n for n in state.selected_notes if letter_of(n) != letter)
    if not was_selected:
        notes = notes + (note,)
    return Transition(_with_notes(state, notes), (SoundNote(note), Render()))


def _clear_notes(state: AppState) -> Transition:
    cleared = replace(state, selected_notes=(), selected_key=None)
    return Transition(reanalyze_all(cleared))


def _select_key(state: AppState, action: SelectKey) -> Transition:
    if action.key_name not in state.key_matches().names():
        logging.info("ignoring key %s: not among the matches", action.key_name)
        return Transition(state)
    new_state = replace(state, selected_key=action.key_name)
    if not new_state.phrases:
        new_state = _add_phrase(new_state)
    return Transition(reanalyze_all(new_state))


def _add_phrase(state: AppState) -> AppState:
    phrase = Phrase(state.next_phrase_id)
    return replace(
        state,
        phrases=state.phrases + (phrase,),
        next_phrase_id=state.next_phrase_id + 1,
    )


def _delete_phrase(state: AppState, action: DeletePhrase) -> Transition:
    phrases = tuple(p for p in state.phrases if p.id != action.phrase_id)
    return Transition(replace(state, phrases=phrases))


def _set_text(state: AppState, phrase: Phrase, text: str) -> AppState:
    return reanalyze_phrase(_replace_phrase(state, replace(phrase, text=text)), phrase.id)


def _select_chord(
    state: AppState, phrase: Phrase, action: SelectSuggestedChord
) -> Transition:
    for suggestion in phrase.analysis.suggestions:
        if suggestion.chord.name == action.chord_name:
            analysis = replace(phrase.analysis, assigned=action.chord_name)
            new_state = _replace_phrase(state, replace(phrase, analysis=analysis))
            return Transition(new_state, (SoundChord(suggestion.chord.notes), Render()))
    logging.info(
        "ignoring chord %s: not suggested for phrase %d",
        action.chord_name,
        phrase.id,
    )
    return Transition(state)


def _press_key(state: AppState, phrase: Phrase, action: PressPhraseKey) -> Transition:
    raw = action.note.without_octave()
    spelled = respell(raw, state.selected_key)
    token = f"{spelled.name}{action.octave}"
    text = f"{phrase.text.strip()} {token}".strip()
    return Transition(
        _set_text(state, phrase, text), (SoundNote(raw, action.octave), Render())
    )


def _backspace(state: AppState, phrase: Phrase) -> Transition:
    tokens = phrase.text.split()
    if not tokens:
        return Transition(state)
    return Transition(_set_text(state, phrase, " ".join(tokens[:-1])))


def _play_phrase(state: AppState, phrase: Phrase) -> Transition:
    notes = tuple(parse_phrase(phrase.text))
    if not notes:
        return Transition(state)
    return Transition(state, (SoundMelody(notes), Render()))


def _play_chord(state: AppState, action: PlayChord) -> Transition:
    chord = find_chord(state.chords(), action.chord_name)
    if chord is None:
        logging.info("ignoring chord %s: not in the selected key", action.chord_name)
        return Transition(state)
    return Transition(state, (SoundChord(chord.notes), Render()))


def _apply_to_phrase(state: AppState, phrase: Phrase, action: Action) -> Transition:
    if isinstance(action, DeletePhrase):
        return _delete_phrase(state, action)
    elif isinstance(action, EditPhraseText):
        return Transition(_set_text(state, phrase, action.text))
    elif isinstance(action, SelectSuggestedChord):
        return _select_chord(state, phrase, action)
    elif isinstance(action, PressPhraseKey):
        return _press_key(state, phrase, action)
    elif isinstance(action, BackspacePhrase):
        return _backspace(state, phrase)
    elif isinstance(action, PlayPhrase):
        return _play_phrase(state, phrase)
    else:
        raise MatchException(action)


def apply_action(state: AppState, action: Action) -> Transition:
    """Apply one user action.

    The input state is never modified. Actions naming a phrase that does not
    exist, a key that does not match or a chord that is not on offer leave
    the state unchanged.

    Args:
        state: The current state.
        action: The user action.

    Returns:
        The new state and the effects to carry out, ending with ``Render``.
    """
    logging.debug("applying %s", action)
    if isinstance(action, ToggleNote):
        return _toggle_note(state, action)
    elif isinstance(action, ClearNotes):
        return _clear_notes(state)
    elif isinstance(action, SelectKey):
        return _select_key(state, action)
    elif isinstance(action, AddPhrase):
        return Transition(_add_phrase(state))
    elif isinstance(action, PlayChord):
        return _play_chord(state, action)
    elif isinstance(
        action,
        (
            DeletePhrase,
            EditPhraseText,
            SelectSuggestedChord,
            PressPhraseKey,
            BackspacePhrase,
            PlayPhrase,
        ),
    ):
        phrase = state.find_phrase(action.phrase_id)
        if phrase is None:
            logging.info("ignoring %s: no phrase %d", action, action.phrase_id)
            return Transition(state)
        return _apply_to_phrase(state, phrase, action)
    else:
        raise MatchException(action)
