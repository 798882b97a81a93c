"""Constants for chord ranking, playback and the command-line front end."""

VARIETY_PENALTY = 0.7
"""Score multiplier for a chord already assigned to another phrase."""

NO_PENALTY = 1.0
"""Score multiplier for a chord not yet used elsewhere."""

MIN_SUGGESTIONS = 3
"""Lower bound of the suggestion slice taken from the ranked chords."""

MAX_SUGGESTIONS = 5
"""Upper bound of the suggestion slice taken from the ranked chords."""

DEFAULT_OCTAVE = 4
"""Octave used for notes that carry no octave of their own (C4 is MIDI 60)."""

DEFAULT_CHORD_OCTAVE = 4
"""Shared octave for every note of a sounded chord."""

DEFAULT_TEMPO = 3.0
"""Melody playback rate in notes per second."""

# Durations in seconds, matching quarter, half and eighth notes at 120 bpm.
DEFAULT_NOTE_DURATION = 0.5
DEFAULT_CHORD_DURATION = 1.0
DEFAULT_MELODY_NOTE_DURATION = 0.25

DEFAULT_VELOCITY = 90
"""MIDI velocity for every note-on message."""

DEFAULT_MIDI_CHANNEL = 1
"""MIDI channel (1-16) used for output."""

DEFAULT_OUTPUT_PORT_NAME = "melodychords"
"""Name of the MIDI output port, created as a virtual port by default."""

PHRASE_KEYBOARD_OCTAVES = (4, 5)
"""Octaves covered by the per-phrase piano keyboard."""

PROMPT = "melodychords> "
