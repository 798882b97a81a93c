"""Sound devices: fire-and-forget playback of notes, chords and melodies.

Every call returns immediately. Note-offs and later melody onsets are
scheduled on timer threads, and a melody hands back a ``Playback`` whose
completion can be awaited. Overlapping playback is allowed: a new chord may
start while a melody is still sounding.
"""

from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod
from threading import Event, Lock, Timer
from typing import Callable, Optional, Sequence

from mido.frozen import FrozenMessage

from melodychords.config import Config
from melodychords.midi import MidiSink, is_midi_note, note_off_msg, note_on_msg
from melodychords.pitch import NoteSpelling

Scheduler = Callable[[float, Callable[[], None]], None]
"""Runs a callback after a delay in seconds."""


def timer_scheduler(delay: float, callback: Callable[[], None]) -> None:
    """Schedule a callback on a daemon timer thread."""
    timer = Timer(delay, callback)
    timer.daemon = True
    timer.start()


class Playback:
    """Completion signal for a scheduled melody."""

    def __init__(self, duration: float) -> None:
        """Initialize an unfinished playback.

        Args:
            duration: Scheduled length in seconds.
        """
        self._duration = duration
        self._done = Event()

    @classmethod
    def finished(cls) -> Playback:
        """A playback that has already completed."""
        playback = cls(0.0)
        playback.finish()
        return playback

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def finish(self) -> None:
        self._done.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the melody has finished.

        Args:
            timeout: Maximum seconds to wait, or None to wait indefinitely.

        Returns:
            True if the melody finished, False on timeout.
        """
        return self._done.wait(timeout)


class SoundDevice(metaclass=ABCMeta):
    """Abstract base class for anything that can sound notes."""

    @abstractmethod
    def play_note(self, note: NoteSpelling, octave: Optional[int] = None) -> None:
        """Sound a single note.

        Args:
            note: The note to play.
            octave: Octave override; otherwise the note's own octave or the
                configured default.
        """
        raise NotImplementedError()

    @abstractmethod
    def play_chord(
        self, notes: Sequence[NoteSpelling], octave: Optional[int] = None
    ) -> None:
        """Sound several notes together in one shared octave.

        Args:
            notes: The chord tones.
            octave: The shared octave, or None for the configured chord octave.
        """
        raise NotImplementedError()

    @abstractmethod
    def play_melody(
        self, notes: Sequence[NoteSpelling], tempo: Optional[float] = None
    ) -> Playback:
        """Sound notes one after another.

        Args:
            notes: The melody; each note may carry its own octave.
            tempo: Notes per second, or None for the configured tempo.

        Returns:
            A playback that completes one interval after the last onset.
        """
        raise NotImplementedError()


class NullSoundDevice(SoundDevice):
    """A silent device that only logs what it would have played."""

    def play_note(self, note: NoteSpelling, octave: Optional[int] = None) -> None:
        logging.debug("silent note %s (octave %s)", note, octave)

    def play_chord(
        self, notes: Sequence[NoteSpelling], octave: Optional[int] = None
    ) -> None:
        logging.debug("silent chord %s", " ".join(str(n) for n in notes))

    def play_melody(
        self, notes: Sequence[NoteSpelling], tempo: Optional[float] = None
    ) -> Playback:
        logging.debug("silent melody %s", " ".join(str(n) for n in notes))
        return Playback.finished()


class MidiSoundDevice(SoundDevice):
    """Plays notes as note-on/note-off pairs on a MIDI sink."""

    def __init__(
        self,
        sink: MidiSink,
        config: Config,
        scheduler: Scheduler = timer_scheduler,
    ) -> None:
        """Initialize the device.

        Args:
            sink: Where MIDI messages are sent.
            config: Channel, velocity, octave and timing settings.
            scheduler: Runs delayed note-offs and melody onsets.
        """
        self._sink = sink
        self._config = config
        self._scheduler = scheduler
        # Timer threads send concurrently with the caller.
        self._lock = Lock()

    def _send(self, msg: FrozenMessage) -> None:
        with self._lock:
            self._sink.send_msg(msg)

    def _midi_note(self, note: NoteSpelling, octave: Optional[int]) -> int:
        if octave is not None:
            note = note.with_octave(octave)
        return note.midi_note(self._config.default_octave)

    def _sound(self, midi_notes: Sequence[int], duration: float) -> None:
        channel = self._config.mido_channel
        out_of_range = [n for n in midi_notes if not is_midi_note(n)]
        if out_of_range:
            logging.warning("skipping notes outside the MIDI range: %s", out_of_range)
            midi_notes = [n for n in midi_notes if is_midi_note(n)]
            if not midi_notes:
                return
        for n in midi_notes:
            self._send(note_on_msg(channel, n, self._config.velocity))

        def release() -> None:
            for n in midi_notes:
                self._send(note_off_msg(channel, n))

        self._scheduler(duration, release)

    def play_note(self, note: NoteSpelling, octave: Optional[int] = None) -> None:
        self._sound([self._midi_note(note, octave)], self._config.note_duration)

    def play_chord(
        self, notes: Sequence[NoteSpelling], octave: Optional[int] = None
    ) -> None:
        shared = self._config.chord_octave if octave is None else octave
        midi_notes = [self._midi_note(n, shared) for n in notes]
        self._sound(midi_notes, self._config.chord_duration)

    def play_melody(
        self, notes: Sequence[NoteSpelling], tempo: Optional[float] = None
    ) -> Playback:
        interval = self._config.melody_interval if tempo is None else 1.0 / tempo
        playback = Playback(len(notes) * interval)
        for index, note in enumerate(notes):
            midi_note = self._midi_note(note, None)

            def onset(midi_note: int = midi_note) -> None:
                self._sound([midi_note], self._config.melody_note_duration)

            self._scheduler(index * interval, onset)
        self._scheduler(playback.duration, playback.finish)
        logging.info(
            "playing melody of %d notes over %.2fs", len(notes), playback.duration
        )
        return playback
