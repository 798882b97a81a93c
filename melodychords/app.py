"""Main controller that coordinates state, rendering and sound.

This module contains the Helper class, which holds the current application
state, applies user actions to it and carries out the resulting effects on
the renderer and the sound device.
"""

import logging
from typing import Optional

from melodychords.base import MatchException
from melodychords.config import Config
from melodychords.render import Renderer
from melodychords.sound import Playback, SoundDevice
from melodychords.state import (
    Action,
    AppState,
    Effect,
    Render,
    SoundChord,
    SoundMelody,
    SoundNote,
    Transition,
    apply_action,
)
from melodychords.view import build_view


class Helper:
    """Central hub between user actions and the outside world.

    Effects run in the order the transition lists them, so sounds start
    before the frame that reflects them is drawn.
    """

    def __init__(
        self,
        renderer: Renderer,
        sound: SoundDevice,
        config: Config,
        state: Optional[AppState] = None,
    ) -> None:
        """Initialize the helper.

        Args:
            renderer: Displays each new frame.
            sound: Plays notes, chords and melodies.
            config: Session configuration.
            state: Starting state, empty by default.
        """
        self._renderer = renderer
        self._sound = sound
        self._config = config
        self._state = state if state is not None else AppState()
        self._playback: Optional[Playback] = None

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action: Action) -> Transition:
        """Apply an action and carry out its effects.

        Args:
            action: The user action.

        Returns:
            The transition that was applied.
        """
        transition = apply_action(self._state, action)
        self._state = transition.state
        for effect in transition.effects:
            self._run_effect(effect)
        return transition

    def redraw(self) -> None:
        """Render the current state again."""
        self._renderer.render(build_view(self._state))

    def wait_for_playback(self, timeout: Optional[float] = None) -> bool:
        """Block until the most recent melody has finished.

        Args:
            timeout: Maximum seconds to wait, or None to wait indefinitely.

        Returns:
            True if no melody is still playing.
        """
        if self._playback is None:
            return True
        return self._playback.wait(timeout)

    def _run_effect(self, effect: Effect) -> None:
        if isinstance(effect, SoundNote):
            self._sound.play_note(effect.note, effect.octave)
        elif isinstance(effect, SoundChord):
            self._sound.play_chord(effect.notes)
        elif isinstance(effect, SoundMelody):
            self._playback = self._sound.play_melody(effect.notes, self._config.tempo)
        elif isinstance(effect, Render):
            self.redraw()
        else:
            raise MatchException(effect)
        logging.debug("ran effect %s", effect)
