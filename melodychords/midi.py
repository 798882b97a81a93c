"""MIDI output for melodychords.

This module wraps ``mido`` output ports behind a small sink interface, and
provides helpers to build and range-check the note messages the sound device
sends.
"""

from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod

import mido
from mido.frozen import FrozenMessage
from mido.ports import BaseOutput

from melodychords.base import Closeable, Resettable

MAX_MIDI_NOTE = 127
"""Highest note number a MIDI message can carry."""


def is_midi_note(note: int) -> bool:
    """Check that a note number fits in a MIDI data byte."""
    return 0 <= note <= MAX_MIDI_NOTE


def note_on_msg(channel: int, note: int, velocity: int) -> FrozenMessage:
    """Build a note-on message.

    Args:
        channel: Zero-based MIDI channel (0-15).
        note: MIDI note number (0-127).
        velocity: Note velocity (1-127).

    Returns:
        The frozen note-on message.
    """
    return FrozenMessage("note_on", channel=channel, note=note, velocity=velocity)


def note_off_msg(channel: int, note: int) -> FrozenMessage:
    """Build a note-off message for the given channel and note."""
    return FrozenMessage("note_off", channel=channel, note=note, velocity=0)


class MidiSink(metaclass=ABCMeta):
    """Abstract base class for MIDI output sinks."""

    @abstractmethod
    def send_msg(self, msg: FrozenMessage) -> None:
        """Send a MIDI message.

        Args:
            msg: The MIDI message to send.
        """
        raise NotImplementedError()


class MidiOutput(MidiSink, Resettable, Closeable):
    """MIDI output connection backed by a ``mido`` port."""

    @classmethod
    def open(cls, out_port_name: str, virtual: bool = False) -> MidiOutput:
        """Open a MIDI output port.

        Args:
            out_port_name: The name of the MIDI port to open.
            virtual: Whether to create a virtual MIDI port.

        Returns:
            A new MidiOutput instance connected to the specified port.
        """
        out_port = mido.open_output(out_port_name, virtual=virtual)
        return cls(out_port_name=out_port_name, out_port=out_port)

    def __init__(self, out_port_name: str, out_port: BaseOutput) -> None:
        """Initialize the MIDI output.

        Args:
            out_port_name: The name of the output port.
            out_port: The mido output port object.
        """
        self._out_port_name = out_port_name
        self._out_port = out_port

    @property
    def name(self) -> str:
        return self._out_port_name

    def reset(self) -> None:
        """Reset the MIDI output port, silencing every sounding note."""
        self._out_port.reset()

    def close(self) -> None:
        """Close the MIDI output port."""
        self._out_port.close()

    def send_msg(self, msg: FrozenMessage) -> None:
        logging.debug("Sending message to %s: %s", self._out_port_name, msg)
        self._out_port.send(msg)
