"""Parsing typed command lines into user actions.

Phrases are referred to by their display number, which is resolved to the
phrase's stable id against the current state at parse time.
"""

from __future__ import annotations

import re
from enum import Enum, auto, unique
from typing import List, Union

from melodychords import constants
from melodychords.pitch import NoteSpelling
from melodychords.scale import ChordQuality, canonical_key_name
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
    SelectKey,
    SelectSuggestedChord,
    ToggleNote,
)

HELP_TEXT = """\
Commands:
  note <N>              toggle a selected note, e.g. note F#
  clear                 clear the selected notes and key
  key <name|n>          select a matching key, e.g. key Bb Major or key 2
  chord <name>          play a chord of the selected key, e.g. chord Dm
  add                   add a phrase
  del <p>               delete phrase p
  edit <p> <notes...>   set the notes of phrase p, e.g. edit 1 C E G C5
  press <p> <note><oct> press a piano key for phrase p, e.g. press 1 A#4
  back <p>              remove the last note of phrase p
  play <p>              play phrase p as a melody
  pick <p> <chord|n>    choose a suggested chord for phrase p
  show                  show everything again
  help                  show this help
  quit                  leave"""

_CHORD_NAME_RE = re.compile(r"^([A-Ga-g][♯♭#b]?)(m|°|o|dim)?$")


class CommandError(ValueError):
    """Raised for a command line that cannot be understood."""


@unique
class MetaCommand(Enum):
    """Commands that act on the session rather than the state."""

    Show = auto()
    Help = auto()
    Quit = auto()


Command = Union[Action, MetaCommand]


def _phrase_id(state: AppState, token: str) -> int:
    if not token.isdigit():
        raise CommandError(f"Expected a phrase number: {token}")
    number = int(token)
    if not 1 <= number <= len(state.phrases):
        raise CommandError(f"No phrase {number}")
    return state.phrases[number - 1].id


def _note(token: str) -> NoteSpelling:
    note = NoteSpelling.parse(token)
    if note is None:
        raise CommandError(f"Not a note: {token}")
    return note


def canonical_chord_name(text: str) -> str:
    """Normalise a typed chord name such as ``f#m`` or ``Bdim`` for display.

    Raises:
        CommandError: If the text is not a triad name.
    """
    m = _CHORD_NAME_RE.match(text.strip())
    if m is None:
        raise CommandError(f"Not a chord name: {text}")
    root = _note(m.group(1))
    suffix = m.group(2)
    if suffix is None:
        quality = ChordQuality.Major
    elif suffix == "m":
        quality = ChordQuality.Minor
    else:
        quality = ChordQuality.Diminished
    return root.name + quality.suffix


def _key_name(state: AppState, rest: str) -> str:
    if rest.isdigit():
        names = state.key_matches().names()
        number = int(rest)
        if not 1 <= number <= len(names):
            raise CommandError(f"No matching key {number}")
        return names[number - 1]
    name = canonical_key_name(rest)
    if name is None:
        raise CommandError(f"Not a major key: {rest}")
    return name


def _pick(state: AppState, args: List[str]) -> SelectSuggestedChord:
    phrase_id = _phrase_id(state, args[0])
    choice = args[1]
    if choice.isdigit():
        phrase = state.find_phrase(phrase_id)
        assert phrase is not None
        names = phrase.analysis.suggested_names()
        number = int(choice)
        if not 1 <= number <= len(names):
            raise CommandError(f"No suggestion {number}")
        return SelectSuggestedChord(phrase_id, names[number - 1])
    return SelectSuggestedChord(phrase_id, canonical_chord_name(choice))


def _press(state: AppState, args: List[str]) -> PressPhraseKey:
    phrase_id = _phrase_id(state, args[0])
    note = _note(args[1])
    if note.octave is None:
        raise CommandError(f"Piano keys need an octave: {args[1]}")
    if note.octave not in constants.PHRASE_KEYBOARD_OCTAVES:
        raise CommandError(f"The keyboard has no octave {note.octave}")
    return PressPhraseKey(phrase_id, note.without_octave(), note.octave)


def _expect_args(verb: str, args: List[str], count: int) -> None:
    if len(args) != count:
        raise CommandError(f"{verb} takes {count} argument(s)")


def parse_command(line: str, state: AppState) -> Command:
    """Parse one command line.

    Args:
        line: The line as typed.
        state: The current state, used to resolve phrase and key numbers.

    Returns:
        The action to apply or a meta command.

    Raises:
        CommandError: If the line is empty or not understood.
    """
    parts = line.split()
    if not parts:
        raise CommandError("Empty command")
    verb = parts[0].lower()
    args = parts[1:]
    if verb in ("note", "toggle"):
        _expect_args(verb, args, 1)
        return ToggleNote(_note(args[0]).without_octave())
    elif verb == "clear":
        _expect_args(verb, args, 0)
        return ClearNotes()
    elif verb == "key":
        if not args:
            raise CommandError("key takes a key name or number")
        return SelectKey(_key_name(state, " ".join(args)))
    elif verb == "chord":
        _expect_args(verb, args, 1)
        return PlayChord(canonical_chord_name(args[0]))
    elif verb == "add":
        _expect_args(verb, args, 0)
        return AddPhrase()
    elif verb in ("del", "delete"):
        _expect_args(verb, args, 1)
        return DeletePhrase(_phrase_id(state, args[0]))
    elif verb == "edit":
        if not args:
            raise CommandError("edit takes a phrase number")
        return EditPhraseText(_phrase_id(state, args[0]), " ".join(args[1:]))
    elif verb == "press":
        _expect_args(verb, args, 2)
        return _press(state, args)
    elif verb == "back":
        _expect_args(verb, args, 1)
        return BackspacePhrase(_phrase_id(state, args[0]))
    elif verb == "play":
        _expect_args(verb, args, 1)
        return PlayPhrase(_phrase_id(state, args[0]))
    elif verb == "pick":
        _expect_args(verb, args, 2)
        return _pick(state, args)
    elif verb == "show":
        return MetaCommand.Show
    elif verb == "help":
        return MetaCommand.Help
    elif verb in ("quit", "exit"):
        return MetaCommand.Quit
    else:
        raise CommandError(f"Unknown command: {verb}")
