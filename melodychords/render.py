"""Renderers turn view snapshots into something the user can see."""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from typing import List, TextIO

from melodychords.phrase import PhraseStatus
from melodychords.view import NO_MATCHING_CHORDS, AppView, PhraseView, SuggestionView

EMPTY_MARK = "—"
PROGRESSION_ARROW = "  →  "


class Renderer(metaclass=ABCMeta):
    """Abstract base class for anything that displays the application."""

    @abstractmethod
    def render(self, view: AppView) -> None:
        """Display one frame.

        Args:
            view: The snapshot to display.
        """
        raise NotImplementedError()


def _suggestion_line(s: SuggestionView) -> str:
    mark = "*" if s.selected else " "
    f = s.function
    return (
        f"{mark} {s.name:<5} {' '.join(s.notes):<10} "
        f"{s.unique_matches}/{s.total_unique_notes} notes · {f.icon} {f.label}"
    )


def _phrase_lines(p: PhraseView) -> List[str]:
    lines = [f"{p.number}. {p.text or EMPTY_MARK}"]
    if p.status == PhraseStatus.NoMatch:
        lines.append(f"     {NO_MATCHING_CHORDS}")
    elif p.status == PhraseStatus.Analyzed:
        lines.append("     Suggested chords:")
        lines.extend(f"     {_suggestion_line(s)}" for s in p.suggestions)
    return lines


def format_view(view: AppView) -> List[str]:
    """Lay out a view as lines of plain text."""
    lines = [f"Selected notes: {'  '.join(view.selected_notes) or EMPTY_MARK}", ""]

    lines.append(f"Keys: {view.key_message}")
    for m in view.key_matches:
        mark = "*" if m.name == view.selected_key else " "
        lines.append(f"  {mark} {m.name:<10} {'  '.join(m.notes)}")
    lines.append("")

    if view.selected_key is not None:
        lines.append(f"Chords in {view.selected_key}: {view.chords_hint}")
        for c in view.chords:
            f = c.function
            lines.append(
                f"  {c.numeral:<5} {c.name:<5} {' '.join(c.notes):<10} "
                f"{f.icon} {f.label}: {f.description}"
            )
        lines.append("")

    if view.phrases:
        lines.append(f"Phrases: {view.phrases_hint}")
        for p in view.phrases:
            lines.extend(f"  {line}" for line in _phrase_lines(p))
        lines.append("")

    if view.progression:
        lines.append(f"Progression: {PROGRESSION_ARROW.join(view.progression)}")
    return lines


class TextRenderer(Renderer):
    """Writes each frame as a block of plain text to a stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def render(self, view: AppView) -> None:
        for line in format_view(view):
            self._stream.write(line + "\n")
        self._stream.flush()
