"""Configuration for melodychords.

The configuration covers playback only: which MIDI port to use and how notes,
chords and melodies are voiced and timed. The music-theory core takes no
configuration.
"""

from __future__ import annotations

from dataclasses import dataclass

from melodychords import constants


@dataclass(frozen=True)
class Config:
    """Playback and output settings, fixed for the lifetime of a session."""

    output_port: str  # Name of the MIDI output port
    virtual: bool  # Create the port as a virtual port
    sound_enabled: bool  # False to run silently without opening any port
    midi_channel: int  # MIDI channel (1-16)
    velocity: int  # Note-on velocity (1-127)
    default_octave: int  # Octave for notes that carry none
    chord_octave: int  # Shared octave for every chord tone
    tempo: float  # Melody rate in notes per second
    note_duration: float  # Seconds a single note sounds
    chord_duration: float  # Seconds a chord sounds
    melody_note_duration: float  # Seconds each melody note sounds

    @property
    def mido_channel(self) -> int:
        """The zero-based channel number ``mido`` expects."""
        return self.midi_channel - 1

    @property
    def melody_interval(self) -> float:
        """Seconds between successive melody onsets."""
        return 1.0 / self.tempo


def init_config(
    output_port: str = constants.DEFAULT_OUTPUT_PORT_NAME,
    virtual: bool = True,
    sound_enabled: bool = True,
    midi_channel: int = constants.DEFAULT_MIDI_CHANNEL,
    velocity: int = constants.DEFAULT_VELOCITY,
    default_octave: int = constants.DEFAULT_OCTAVE,
    tempo: float = constants.DEFAULT_TEMPO,
) -> Config:
    """Initialize a configuration with sensible defaults.

    Args:
        output_port: The name of the MIDI output port.
        virtual: Whether to create the output port as a virtual port.
        sound_enabled: Whether to open a port and play sounds at all.
        midi_channel: MIDI channel (1-16) for all notes.
        velocity: Note-on velocity (1-127).
        default_octave: Octave for notes typed without one.
        tempo: Melody playback rate in notes per second.

    Returns:
        A Config instance.

    Raises:
        ValueError: If a numeric setting is out of range.
    """
    if not 1 <= midi_channel <= 16:
        raise ValueError(f"MIDI channel must be 1-16: {midi_channel}")
    if not 1 <= velocity <= 127:
        raise ValueError(f"Velocity must be 1-127: {velocity}")
    if not 0 <= default_octave <= 8:
        raise ValueError(f"Octave must be 0-8: {default_octave}")
    if tempo <= 0:
        raise ValueError(f"Tempo must be positive: {tempo}")
    return Config(
        output_port=output_port,
        virtual=virtual,
        sound_enabled=sound_enabled,
        midi_channel=midi_channel,
        velocity=velocity,
        default_octave=default_octave,
        chord_octave=constants.DEFAULT_CHORD_OCTAVE,
        tempo=tempo,
        note_duration=constants.DEFAULT_NOTE_DURATION,
        chord_duration=constants.DEFAULT_CHORD_DURATION,
        melody_note_duration=constants.DEFAULT_MELODY_NOTE_DURATION,
    )
