from typing import Sequence

from melodychords.phrase import PhraseStatus
from melodychords.pitch import Accidental, NoteSpelling
from melodychords.state import (
    Action,
    AddPhrase,
    AppState,
    BackspacePhrase,
    ClearNotes,
    DeletePhrase,
    EditPhraseText,
    PlayChord,
    PlayPhrase,
    PressPhraseKey,
    Render,
    SelectKey,
    SelectSuggestedChord,
    SoundChord,
    SoundMelody,
    SoundNote,
    ToggleNote,
    Transition,
    apply_action,
)
from melodychords.view import build_view

C = NoteSpelling("C")
E = NoteSpelling("E")
F = NoteSpelling("F")
G = NoteSpelling("G")
C_SHARP = NoteSpelling("C", Accidental.Sharp)
A_SHARP = NoteSpelling("A", Accidental.Sharp)
B_FLAT = NoteSpelling("B", Accidental.Flat)


def run(actions: Sequence[Action], state: AppState = AppState()) -> AppState:
    for action in actions:
        state = apply_action(state, action).state
    return state


def c_major() -> AppState:
    return run([ToggleNote(C), ToggleNote(E), ToggleNote(G), SelectKey("C Major")])


def test_toggle_note() -> None:
    transition = apply_action(AppState(), ToggleNote(C))
    assert transition.state.selected_notes == (C,)
    assert transition.effects == (SoundNote(C), Render())
    assert run([ToggleNote(C), ToggleNote(C)]).selected_notes == ()


def test_toggle_evicts_same_letter() -> None:
    state = run([ToggleNote(C), ToggleNote(E), ToggleNote(C_SHARP)])
    assert state.selected_notes == (E, C_SHARP)


def test_toggle_drops_octave() -> None:
    state = run([ToggleNote(NoteSpelling("C", None, 5))])
    assert state.selected_notes == (C,)


def test_select_key_adds_first_phrase() -> None:
    state = c_major()
    assert state.selected_key == "C Major"
    assert [p.id for p in state.phrases] == [1]
    assert state.next_phrase_id == 2
    assert [c.name for c in state.chords()] == ["C", "Dm", "Em", "F", "G", "Am", "B°"]


def test_select_unmatched_key_is_ignored() -> None:
    state = run([ToggleNote(C_SHARP)])
    transition = apply_action(state, SelectKey("C Major"))
    assert transition == Transition(state)
    assert transition.state.selected_key is None


def test_edit_phrase() -> None:
    state = run([EditPhraseText(1, "C C C G")], c_major())
    phrase = state.phrases[0]
    assert phrase.analysis.status == PhraseStatus.Analyzed
    assert phrase.chord == "C"
    assert state.progression() == ["C"]


def test_clearing_text_empties_phrase() -> None:
    state = run([EditPhraseText(1, "C E G"), EditPhraseText(1, "")], c_major())
    assert state.phrases[0].analysis.status == PhraseStatus.Empty
    assert state.phrases[0].chord is None
    assert state.progression() == []


def test_key_invalidated_by_new_note() -> None:
    state = run(
        [
            ToggleNote(C),
            ToggleNote(E),
            ToggleNote(G),
            SelectKey("G Major"),
            EditPhraseText(1, "G B D"),
        ]
    )
    assert state.phrases[0].chord == "G"
    state = run([ToggleNote(F)], state)
    assert state.selected_key is None
    assert state.chords() == []
    assert state.phrases[0].text == "G B D"
    assert state.phrases[0].chord is None
    assert state.progression() == []


def test_key_kept_when_still_matching() -> None:
    state = run([ToggleNote(F)], c_major())
    assert state.selected_key == "C Major"


def test_clear_notes() -> None:
    state = run([EditPhraseText(1, "C E G"), ClearNotes()], c_major())
    assert state.selected_notes == ()
    assert state.selected_key is None
    assert state.phrases[0].text == "C E G"
    assert state.progression() == []


def test_selection_survives_other_edits() -> None:
    state = run(
        [
            EditPhraseText(1, "C E G"),
            SelectSuggestedChord(1, "F"),
            AddPhrase(),
            EditPhraseText(2, "G B D"),
        ],
        c_major(),
    )
    assert state.phrases[0].chord == "F"
    state = run([EditPhraseText(1, "C E G E")], state)
    assert state.phrases[0].chord == "F"
    state = run([EditPhraseText(1, "E G B")], state)
    assert state.phrases[0].chord == "Em"


def test_select_suggested_chord() -> None:
    state = run([EditPhraseText(1, "C E G")], c_major())
    transition = apply_action(state, SelectSuggestedChord(1, "Am"))
    assert transition.state.phrases[0].chord == "Am"
    assert transition.effects == (
        SoundChord((NoteSpelling("A"), C, E)),
        Render(),
    )
    assert apply_action(state, SelectSuggestedChord(1, "Dm")) == Transition(state)


def test_variety_between_phrases() -> None:
    state = run(
        [EditPhraseText(1, "C"), AddPhrase(), EditPhraseText(2, "C")], c_major()
    )
    assert state.progression() == ["C", "F"]
    assert state.other_assigned(2) == frozenset({"C"})


def test_delete_renumbers_and_never_reuses_ids() -> None:
    state = run([AddPhrase(), AddPhrase(), DeletePhrase(1)], c_major())
    assert [p.id for p in state.phrases] == [2, 3]
    phrases = build_view(state).phrases
    assert [(v.number, v.id) for v in phrases] == [(1, 2), (2, 3)]
    state = run([AddPhrase()], state)
    assert [p.id for p in state.phrases] == [2, 3, 4]


def test_unknown_phrase_is_ignored() -> None:
    state = c_major()
    assert apply_action(state, EditPhraseText(9, "C")) == Transition(state)
    assert apply_action(state, PlayPhrase(9)) == Transition(state)


def test_press_key_respells() -> None:
    state = run([ToggleNote(F), ToggleNote(B_FLAT), SelectKey("F Major")])
    transition = apply_action(state, PressPhraseKey(1, A_SHARP, 4))
    assert transition.state.phrases[0].text == "B♭4"
    assert transition.effects == (SoundNote(A_SHARP, 4), Render())
    state = run([PressPhraseKey(1, C, 5)], transition.state)
    assert state.phrases[0].text == "B♭4 C5"
    assert state.phrases[0].analysis.status == PhraseStatus.Analyzed


def test_backspace() -> None:
    state = run([EditPhraseText(1, "C E G"), BackspacePhrase(1)], c_major())
    assert state.phrases[0].text == "C E"
    state = run([BackspacePhrase(1), BackspacePhrase(1)], state)
    assert state.phrases[0].text == ""
    assert apply_action(state, BackspacePhrase(1)) == Transition(state)


def test_play_phrase() -> None:
    state = run([EditPhraseText(1, "C E G5")], c_major())
    transition = apply_action(state, PlayPhrase(1))
    assert transition.state == state
    assert transition.effects == (
        SoundMelody((C, E, NoteSpelling("G", None, 5))),
        Render(),
    )


def test_play_chord() -> None:
    state = c_major()
    transition = apply_action(state, PlayChord("Dm"))
    assert transition.effects == (
        SoundChord((NoteSpelling("D"), F, NoteSpelling("A"))),
        Render(),
    )
    assert apply_action(state, PlayChord("D")) == Transition(state)
    assert apply_action(AppState(), PlayChord("C")) == Transition(AppState())


def test_input_state_unchanged() -> None:
    state = run([EditPhraseText(1, "C E G")], c_major())
    snapshot = AppState(
        state.selected_notes, state.selected_key, state.phrases, state.next_phrase_id
    )
    for action in [
        ToggleNote(F),
        ClearNotes(),
        AddPhrase(),
        DeletePhrase(1),
        EditPhraseText(1, "D F A"),
        SelectSuggestedChord(1, "Em"),
        PressPhraseKey(1, C, 4),
        BackspacePhrase(1),
    ]:
        apply_action(state, action)
        assert state == snapshot
