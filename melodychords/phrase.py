"""Suggesting chords for a melodic phrase.

A phrase is free text containing note tokens (``C E G C5 f#``). Each diatonic
chord of the active key is scored by how much of the phrase it covers:

- ``weighted_score`` counts the phrase notes that are chord tones, so a
  repeated note counts every time it occurs;
- ``coverage`` is the rounded percentage of the phrase's distinct pitch
  classes that are chord tones;
- a chord already assigned to another phrase is scaled by the variety
  penalty so that consecutive phrases tend to get different chords.

``final_score = weighted_score * coverage / 100 * penalty``. Chords sharing
no pitch class with the phrase are dropped. The rest are sorted by final
score, highest first, with the lower scale degree winning exact ties.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from enum import Enum, auto, unique
from typing import AbstractSet, Dict, List, Optional, Sequence

from melodychords import constants
from melodychords.chords import DiatonicChord
from melodychords.pitch import NOTE_TOKEN_PATTERN, NoteSpelling, PitchClass, normalize

_TOKEN_RE = re.compile(NOTE_TOKEN_PATTERN)


def parse_phrase(text: str) -> List[NoteSpelling]:
    """Scan free text for note tokens.

    Tokens may appear anywhere in the text; anything that is not a note is
    skipped. Letters are uppercased and ASCII accidentals canonicalised. The
    octave digit is kept for playback but plays no part in scoring.

    Args:
        text: The phrase as typed.

    Returns:
        The notes in order of appearance, repeats included.
    """
    return [
        NoteSpelling.from_groups(m.group(1), m.group(2), m.group(3))
        for m in _TOKEN_RE.finditer(text)
    ]


def _round_percent(part: int, whole: int) -> int:
    # Round half up with integer arithmetic.
    return (200 * part + whole) // (2 * whole)


@dataclass(frozen=True)
class ChordScore:
    """How well one chord fits a phrase."""

    chord: DiatonicChord
    weighted_score: int  # Phrase notes that are chord tones, repeats included
    unique_matches: int  # Distinct phrase pitch classes that are chord tones
    total_unique_notes: int  # Distinct pitch classes in the phrase
    coverage: int  # Integer percent of distinct pitch classes covered
    variety_penalty: float
    final_score: float
    total_notes: int  # Phrase tokens


def score_chord(
    chord: DiatonicChord,
    frequencies: Dict[PitchClass, int],
    total_notes: int,
    other_assigned: AbstractSet[str],
) -> Optional[ChordScore]:
    """Score one chord against a phrase's pitch-class frequencies.

    Args:
        chord: The candidate chord.
        frequencies: Occurrences of each pitch class in the phrase.
        total_notes: Number of recognised notes in the phrase.
        other_assigned: Chord names assigned to other phrases.

    Returns:
        The score, or None if the chord shares no pitch class with the phrase.
    """
    chord_pcs = chord.pitch_classes()
    matched = [pc for pc in frequencies if pc in chord_pcs]
    unique_matches = len(matched)
    if unique_matches == 0:
        return None
    weighted_score = sum(frequencies[pc] for pc in matched)
    coverage = _round_percent(unique_matches, len(frequencies))
    if chord.name in other_assigned:
        penalty = constants.VARIETY_PENALTY
    else:
        penalty = constants.NO_PENALTY
    final_score = weighted_score * (coverage / 100) * penalty
    return ChordScore(
        chord=chord,
        weighted_score=weighted_score,
        unique_matches=unique_matches,
        total_unique_notes=len(frequencies),
        coverage=coverage,
        variety_penalty=penalty,
        final_score=final_score,
        total_notes=total_notes,
    )


def suggestion_limit(num_candidates: int) -> int:
    """How many ranked chords to offer: at least 3, at most 5."""
    return max(
        constants.MIN_SUGGESTIONS, min(constants.MAX_SUGGESTIONS, num_candidates)
    )


def rank_chords(
    notes: Sequence[NoteSpelling],
    chords: Sequence[DiatonicChord],
    other_assigned: AbstractSet[str] = frozenset(),
) -> List[ChordScore]:
    """Score and rank chords for a phrase.

    Args:
        notes: The phrase notes, in order, repeats included.
        chords: The candidate chords, in degree order.
        other_assigned: Chord names currently assigned to other phrases.

    Returns:
        The top suggestions, best first. Empty if no chord shares a pitch
        class with the phrase.
    """
    pcs = [pc for pc in (normalize(n) for n in notes) if pc is not None]
    if not pcs:
        return []
    frequencies: Dict[PitchClass, int] = dict(Counter(pcs))
    scored: List[ChordScore] = []
    for chord in chords:
        score = score_chord(chord, frequencies, len(pcs), other_assigned)
        if score is not None:
            scored.append(score)
    scored.sort(key=lambda s: (-s.final_score, s.chord.degree))
    return scored[: suggestion_limit(len(scored))]


def choose_assignment(
    previous: Optional[str], suggestions: Sequence[ChordScore]
) -> Optional[str]:
    """Pick the chord assigned to a phrase after re-ranking.

    Args:
        previous: The chord name assigned before, if any.
        suggestions: The new ranked suggestions.

    Returns:
        The previous chord if it is still suggested, otherwise the top
        suggestion, or None when there are no suggestions.
    """
    if not suggestions:
        return None
    if previous is not None and any(s.chord.name == previous for s in suggestions):
        return previous
    return suggestions[0].chord.name


@unique
class PhraseStatus(Enum):
    """Analysis state of a phrase."""

    Empty = auto()  # No recognised notes
    NoMatch = auto()  # Notes, but no chord shares a pitch class with them
    Analyzed = auto()  # At least one suggestion, one of them assigned


@dataclass(frozen=True)
class PhraseAnalysis:
    status: PhraseStatus
    notes: List[NoteSpelling]
    suggestions: List[ChordScore]
    assigned: Optional[str]

    @property
    def total_unique_notes(self) -> int:
        return len({n.pitch_class() for n in self.notes})

    def suggested_names(self) -> List[str]:
        return [s.chord.name for s in self.suggestions]


EMPTY_ANALYSIS = PhraseAnalysis(PhraseStatus.Empty, [], [], None)


def analyze_phrase(
    text: str,
    chords: Sequence[DiatonicChord],
    other_assigned: AbstractSet[str] = frozenset(),
    previous: Optional[str] = None,
) -> PhraseAnalysis:
    """Parse, rank and assign a chord for one phrase.

    Args:
        text: The phrase text.
        chords: The active key's diatonic chords.
        other_assigned: Chord names assigned to the other phrases.
        previous: The chord currently assigned to this phrase, if any.

    Returns:
        The analysis. Empty or unmatched phrases carry no assignment.
    """
    notes = parse_phrase(text)
    if not notes:
        return EMPTY_ANALYSIS
    suggestions = rank_chords(notes, chords, other_assigned)
    if not suggestions:
        return PhraseAnalysis(PhraseStatus.NoMatch, notes, [], None)
    return PhraseAnalysis(
        PhraseStatus.Analyzed,
        notes,
        suggestions,
        choose_assignment(previous, suggestions),
    )
