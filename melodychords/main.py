"""Main entry point for melodychords.

This module contains the main function and command-line argument handling
for the interactive chord helper. It sets up logging, opens the MIDI output
port, and runs a loop that reads commands and dispatches them.
"""

import logging
import sys
from argparse import ArgumentParser
from contextlib import contextmanager
from typing import Generator, Iterable, TextIO

from melodychords import constants
from melodychords.app import Helper
from melodychords.commands import HELP_TEXT, CommandError, MetaCommand, parse_command
from melodychords.config import Config, init_config
from melodychords.midi import MidiOutput
from melodychords.render import TextRenderer
from melodychords.sound import MidiSoundDevice, NullSoundDevice, SoundDevice

# Longest wait for a melody to finish before closing the port on exit.
FINAL_PLAYBACK_TIMEOUT = 10.0


@contextmanager
def sound_context(config: Config) -> Generator[SoundDevice, None, None]:
    """Context manager for the sound device and its MIDI port.

    Falls back to a silent device if sound is disabled or the port cannot be
    opened. On exit every sounding note is silenced and the port closed.

    Args:
        config: The session configuration.

    Yields:
        A ready sound device.
    """
    if not config.sound_enabled:
        logging.info("sound disabled")
        yield NullSoundDevice()
        return
    try:
        output = MidiOutput.open(config.output_port, virtual=config.virtual)
    except Exception as e:
        logging.error("Failed to open MIDI output port %s: %s", config.output_port, e)
        yield NullSoundDevice()
        return
    logging.info("opened MIDI output port %s", output.name)
    try:
        yield MidiSoundDevice(output, config)
    finally:
        logging.info("final all notes off")
        output.reset()
        logging.info("closing MIDI output port %s", output.name)
        output.close()


def run_session(helper: Helper, lines: Iterable[str], out: TextIO) -> None:
    """Read commands until input ends or the user quits.

    Args:
        helper: The controller to dispatch actions to.
        lines: Command lines, typically standard input.
        out: Where prompts and messages are written.
    """
    helper.redraw()
    out.write(constants.PROMPT)
    out.flush()
    for line in lines:
        if line.strip():
            try:
                command = parse_command(line, helper.state)
            except CommandError as e:
                out.write(f"{e}\n")
            else:
                if command == MetaCommand.Quit:
                    break
                elif command == MetaCommand.Help:
                    out.write(HELP_TEXT + "\n")
                elif command == MetaCommand.Show:
                    helper.redraw()
                else:
                    helper.dispatch(command)
        out.write(constants.PROMPT)
        out.flush()
    out.write("\n")


def make_parser() -> ArgumentParser:
    """Create the command-line argument parser.

    Returns:
        An ArgumentParser configured with all the command-line options.
    """
    parser = ArgumentParser(
        description="Find the major keys and chords that fit your melody."
    )
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--output-port", default=constants.DEFAULT_OUTPUT_PORT_NAME)
    parser.add_argument(
        "--no-virtual",
        dest="virtual",
        action="store_false",
        help="Connect to an existing port instead of creating a virtual one",
    )
    parser.add_argument("--no-sound", dest="sound", action="store_false")
    parser.add_argument("--channel", type=int, default=constants.DEFAULT_MIDI_CHANNEL)
    parser.add_argument("--velocity", type=int, default=constants.DEFAULT_VELOCITY)
    parser.add_argument("--octave", type=int, default=constants.DEFAULT_OCTAVE)
    parser.add_argument("--tempo", type=float, default=constants.DEFAULT_TEMPO)
    return parser


def configure_logging(log_level: str) -> None:
    """Configure the logging system with the specified log level.

    Args:
        log_level: The logging level (e.g., 'DEBUG', 'INFO', 'WARNING').
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(filename)s:%(lineno)d -- %(message)s",
        level=log_level,
    )


def main() -> None:
    """Main entry point for melodychords.

    Parses command-line arguments, configures logging, opens the sound
    device and runs the command loop on standard input.
    """
    parser = make_parser()
    args = parser.parse_args()
    configure_logging(args.log_level)
    try:
        config = init_config(
            output_port=args.output_port,
            virtual=args.virtual,
            sound_enabled=args.sound,
            midi_channel=args.channel,
            velocity=args.velocity,
            default_octave=args.octave,
            tempo=args.tempo,
        )
    except ValueError as e:
        parser.error(str(e))
    with sound_context(config) as sound:
        helper = Helper(TextRenderer(sys.stdout), sound, config)
        try:
            run_session(helper, sys.stdin, sys.stdout)
        except KeyboardInterrupt:
            pass
        helper.wait_for_playback(FINAL_PLAYBACK_TIMEOUT)
    logging.info("done")


if __name__ == "__main__":
    main()
