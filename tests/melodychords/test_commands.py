import pytest

from melodychords.commands import (
    CommandError,
    MetaCommand,
    canonical_chord_name,
    parse_command,
)
from melodychords.pitch import Accidental, NoteSpelling
from melodychords.state import (
    AddPhrase,
    AppState,
    BackspacePhrase,
    ClearNotes,
    DeletePhrase,
    EditPhraseText,
    PlayChord,
    PlayPhrase,
    PressPhraseKey,
    SelectKey,
    SelectSuggestedChord,
    ToggleNote,
    apply_action,
)


def _state() -> AppState:
    state = AppState()
    for action in [
        ToggleNote(NoteSpelling("C")),
        ToggleNote(NoteSpelling("E")),
        ToggleNote(NoteSpelling("G")),
        SelectKey("C Major"),
        EditPhraseText(1, "C E G"),
    ]:
        state = apply_action(state, action).state
    return state


@pytest.mark.parametrize(
    "line, expected",
    [
        ("note f#", ToggleNote(NoteSpelling("F", Accidental.Sharp))),
        ("toggle C5", ToggleNote(NoteSpelling("C"))),
        ("clear", ClearNotes()),
        ("key bb major", SelectKey("B♭ Major")),
        ("key G", SelectKey("G Major")),
        ("key 2", SelectKey("G Major")),
        ("chord f#m", PlayChord("F♯m")),
        ("chord Bdim", PlayChord("B°")),
        ("add", AddPhrase()),
        ("del 1", DeletePhrase(1)),
        ("edit 1 C  E G5", EditPhraseText(1, "C E G5")),
        ("edit 1", EditPhraseText(1, "")),
        ("press 1 a#4", PressPhraseKey(1, NoteSpelling("A", Accidental.Sharp), 4)),
        ("back 1", BackspacePhrase(1)),
        ("play 1", PlayPhrase(1)),
        ("pick 1 2", SelectSuggestedChord(1, "Em")),
        ("pick 1 am", SelectSuggestedChord(1, "Am")),
        ("  SHOW ", MetaCommand.Show),
        ("help", MetaCommand.Help),
        ("quit", MetaCommand.Quit),
        ("exit", MetaCommand.Quit),
    ],
)
def test_parse_command(line, expected) -> None:
    assert parse_command(line, _state()) == expected


@pytest.mark.parametrize(
    "line",
    [
        "",
        "frobnicate",
        "note H",
        "note",
        "clear now",
        "key",
        "key 4",
        "key H major",
        "del 2",
        "del x",
        "press 1 A#",
        "press 1 A#7",
        "pick 1 6",
        "chord Cmaj7",
    ],
)
def test_parse_command_errors(line: str) -> None:
    with pytest.raises(CommandError):
        parse_command(line, _state())


def test_phrase_numbers_resolve_to_ids() -> None:
    state = _state()
    for action in [AddPhrase(), AddPhrase(), DeletePhrase(1)]:
        state = apply_action(state, action).state
    assert parse_command("edit 1 C", state) == EditPhraseText(2, "C")
    assert parse_command("del 2", state) == DeletePhrase(3)


@pytest.mark.parametrize(
    "text, expected",
    [("C", "C"), ("f#m", "F♯m"), ("Bbm", "B♭m"), ("Bo", "B°"), ("e♯°", "E♯°")],
)
def test_canonical_chord_name(text: str, expected: str) -> None:
    assert canonical_chord_name(text) == expected
