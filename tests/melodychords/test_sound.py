import logging
from typing import Callable, List, Tuple

import pytest
from mido.frozen import FrozenMessage

from melodychords.config import init_config
from melodychords.midi import (
    MAX_MIDI_NOTE,
    MidiOutput,
    MidiSink,
    is_midi_note,
    note_off_msg,
    note_on_msg,
)
from melodychords.phrase import parse_phrase
from melodychords.pitch import NoteSpelling
from melodychords.sound import MidiSoundDevice, NullSoundDevice, Playback


def is_note_on_msg(msg: FrozenMessage) -> bool:
    return msg.type == "note_on" and msg.velocity > 0


def is_note_off_msg(msg: FrozenMessage) -> bool:
    return msg.type == "note_off" or (msg.type == "note_on" and msg.velocity == 0)


class RecordingSink(MidiSink):
    def __init__(self) -> None:
        self.msgs: List[FrozenMessage] = []

    def send_msg(self, msg: FrozenMessage) -> None:
        self.msgs.append(msg)

    def notes_on(self) -> List[int]:
        return [m.note for m in self.msgs if is_note_on_msg(m)]

    def notes_off(self) -> List[int]:
        return [m.note for m in self.msgs if is_note_off_msg(m)]


class ManualScheduler:
    """Collects delayed callbacks and runs them on demand in time order."""

    def __init__(self) -> None:
        self.pending: List[Tuple[float, Callable[[], None]]] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> None:
        self.pending.append((delay, callback))

    def delays(self) -> List[float]:
        return [d for d, _ in self.pending]

    def run_all(self) -> None:
        while self.pending:
            self.pending.sort(key=lambda p: p[0])
            _, callback = self.pending.pop(0)
            callback()


def _note(text: str) -> NoteSpelling:
    note = NoteSpelling.parse(text)
    assert note is not None
    return note


def _device(**kwargs):
    sink = RecordingSink()
    scheduler = ManualScheduler()
    device = MidiSoundDevice(sink, init_config(**kwargs), scheduler)
    return sink, scheduler, device


def test_note_messages() -> None:
    on = note_on_msg(0, 60, 90)
    off = note_off_msg(0, 60)
    assert on.type == "note_on"
    assert on.velocity == 90
    assert off.type == "note_off"
    assert off.note == 60


@pytest.mark.parametrize(
    "note, expected",
    [(0, True), (60, True), (MAX_MIDI_NOTE, True), (-1, False), (128, False)],
)
def test_is_midi_note(note: int, expected: bool) -> None:
    assert is_midi_note(note) == expected


def test_melody_skips_notes_above_midi_range(
    caplog: pytest.LogCaptureFixture,
) -> None:
    sink, scheduler, device = _device()
    notes = parse_phrase("C5 G#9 B9 B♯9 A9")
    assert [n.midi_note(4) for n in notes] == [72, 128, 131, 132, 129]
    with caplog.at_level(logging.WARNING):
        playback = device.play_melody(notes, tempo=2.0)
        scheduler.run_all()
    assert playback.done
    assert sink.notes_on() == [72]
    assert sink.notes_off() == [72]
    assert "outside the MIDI range" in caplog.text


def test_chord_keeps_notes_in_range() -> None:
    sink, scheduler, device = _device()
    device.play_chord([_note("E"), _note("G♯"), _note("B")], octave=9)
    assert sink.notes_on() == [124]
    scheduler.run_all()
    assert sink.notes_off() == [124]


def test_play_note() -> None:
    sink, scheduler, device = _device()
    device.play_note(_note("C"))
    assert sink.notes_on() == [60]
    assert sink.notes_off() == []
    assert scheduler.delays() == [0.5]
    scheduler.run_all()
    assert sink.notes_off() == [60]


def test_play_note_octaves() -> None:
    sink, scheduler, device = _device(default_octave=3)
    device.play_note(_note("A"))
    device.play_note(_note("A5"))
    device.play_note(_note("A5"), 4)
    assert sink.notes_on() == [57, 81, 69]


def test_channel_and_velocity() -> None:
    sink, _, device = _device(midi_channel=2, velocity=64)
    device.play_note(_note("C"))
    msg = sink.msgs[0]
    assert msg.channel == 1
    assert msg.velocity == 64


def test_play_chord_shares_octave() -> None:
    sink, scheduler, device = _device()
    device.play_chord([_note("G"), _note("B"), _note("D5")])
    assert sink.notes_on() == [67, 71, 62]
    assert scheduler.delays() == [1.0]
    scheduler.run_all()
    assert sorted(sink.notes_off()) == [62, 67, 71]


def test_play_melody() -> None:
    sink, scheduler, device = _device()
    playback = device.play_melody([_note("C4"), _note("E"), _note("G5")], tempo=2.0)
    assert sink.msgs == []
    assert scheduler.delays() == [0.0, 0.5, 1.0, 1.5]
    assert playback.duration == pytest.approx(1.5)
    assert not playback.done
    scheduler.run_all()
    assert sink.notes_on() == [60, 64, 79]
    assert sorted(sink.notes_off()) == [60, 64, 79]
    assert playback.done
    assert playback.wait(0)


def test_play_melody_default_tempo() -> None:
    _, scheduler, device = _device(tempo=4.0)
    device.play_melody([_note("C"), _note("D")])
    assert scheduler.delays() == [0.0, 0.25, 0.5]


def test_play_melody_on_timers() -> None:
    sink = RecordingSink()
    device = MidiSoundDevice(sink, init_config(tempo=100.0))
    playback = device.play_melody([_note("C"), _note("D"), _note("E")])
    assert playback.wait(5.0)


def test_playback() -> None:
    assert not Playback(1.0).wait(0.01)
    finished = Playback.finished()
    assert finished.done
    assert finished.duration == 0.0


def test_null_device() -> None:
    device = NullSoundDevice()
    device.play_note(_note("C"))
    device.play_chord([_note("C"), _note("E"), _note("G")])
    assert device.play_melody([_note("C")]).done


class FakePort:
    def __init__(self) -> None:
        self.sent: List[FrozenMessage] = []
        self.resets = 0
        self.closed = False

    def send(self, msg: FrozenMessage) -> None:
        self.sent.append(msg)

    def reset(self) -> None:
        self.resets += 1

    def close(self) -> None:
        self.closed = True


def test_midi_output() -> None:
    port = FakePort()
    output = MidiOutput("test", port)  # type: ignore
    assert output.name == "test"
    output.send_msg(note_on_msg(0, 60, 90))
    output.reset()
    output.close()
    assert port.sent == [note_on_msg(0, 60, 90)]
    assert port.resets == 1
    assert port.closed


@pytest.mark.parametrize(
    "kwargs",
    [
        {"midi_channel": 0},
        {"midi_channel": 17},
        {"velocity": 0},
        {"velocity": 128},
        {"default_octave": 9},
        {"tempo": 0.0},
    ],
)
def test_config_rejects_out_of_range(kwargs) -> None:
    with pytest.raises(ValueError):
        init_config(**kwargs)


def test_config_defaults() -> None:
    config = init_config()
    assert config.mido_channel == 0
    assert config.melody_interval == pytest.approx(1.0 / 3.0)
    assert config.chord_octave == 4
