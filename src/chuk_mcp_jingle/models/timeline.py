"""
Timeline model - the parsed score.

A Timeline contains:
- Parts (independent voices, including voices split out by backups)
- Measures per part, kept in lock-step across parts
- Notes per measure, each holding its chord frequencies
- The score tempo

The builder fills a Timeline in one forward pass; everything downstream
only reads it.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

from chuk_mcp_jingle.constants import DEFAULT_TEMPO_BPM
from chuk_mcp_jingle.errors import InvalidRangeError

logger = logging.getLogger(__name__)


class Note(BaseModel):
    """
    A note event: one or more simultaneous frequencies sharing a length.

    Frequencies are in parse order; index 0 is the note that opened the
    chord. A rest has a single 0.0 frequency.
    """

    frequencies: list[float] = Field(default_factory=list, description="Chord frequencies in Hz")
    length: float = Field(0.0, ge=0.0, description="Length in quarter notes")

    @property
    def chord_size(self) -> int:
        """Number of chord members."""
        return len(self.frequencies)


class Measure(BaseModel):
    """
    A bar of notes in performance order.

    duration_sum accumulates raw durations of appended notes and is only
    used for backup bookkeeping; it never decreases.
    """

    notes: list[Note] = Field(default_factory=list, description="Notes in performance order")
    duration_sum: int = Field(0, ge=0, description="Raw duration of appended notes")

    def add_note(self, note: Note, raw_duration: int) -> Note:
        """Append a note and account for its raw duration."""
        self.notes.append(note)
        self.duration_sum += raw_duration
        return note


class Part(BaseModel):
    """An independent voice as an ordered list of measures."""

    measures: list[Measure] = Field(default_factory=list, description="Measures in order")

    def note_count(self, start: int = 0, end: int | None = None) -> int:
        """Number of notes in measures [start, end)."""
        return sum(len(m.notes) for m in self.measures[start:end])


class Timeline(BaseModel):
    """
    The complete parsed score.

    This is what the configuration, capacity estimator, MIDI preview and
    downloader read.
    """

    schema_version: str = Field("timeline/v1", description="Schema version")
    name: str = Field("", description="Score name")
    tempo: int = Field(DEFAULT_TEMPO_BPM, gt=0, description="Tempo in BPM")
    parts: list[Part] = Field(default_factory=list, description="Parts in index order")
    warnings: list[str] = Field(default_factory=list, description="Non-fatal parse warnings")

    @property
    def part_count(self) -> int:
        """Number of parts."""
        return len(self.parts)

    def measure_count(self) -> int:
        """
        Number of measures in the first part (0 if there are no parts).

        Parts are kept in lock-step by the builder, but callers that need
        every part to agree should check measure_counts().
        """
        if not self.parts:
            return 0
        return len(self.parts[0].measures)

    def measure_counts(self) -> list[int]:
        """Measure count of every part."""
        return [len(part.measures) for part in self.parts]

    def check_range(self, part_index: int, start: int, end: int | None = None) -> None:
        """
        Validate a part index and a half-open measure range.

        Both bounds must name an existing measure; end=None runs the range
        through the last measure. A range with start >= end is in bounds
        and simply empty.

        Raises:
            InvalidRangeError: If the part or range is out of bounds
        """
        if not 0 <= part_index < len(self.parts):
            raise InvalidRangeError(
                f"Invalid part index {part_index} (score has {len(self.parts)} parts)"
            )
        measures = len(self.parts[part_index].measures)
        if not 0 <= start < measures or (end is not None and not 0 <= end < measures):
            raise InvalidRangeError(
                f"Invalid range of {start} to {end} (part {part_index} has {measures} measures)"
            )

    def notes_in_range(self, part_index: int, start: int, end: int | None = None) -> list[Note]:
        """
        Notes of a part over measures [start, end), in measure then note order.

        Raises:
            InvalidRangeError: If the part or range is out of bounds
        """
        self.check_range(part_index, start, end)
        return [
            note for measure in self.parts[part_index].measures[start:end] for note in measure.notes
        ]

    def note_count(self, part_index: int, start: int, end: int | None = None) -> int:
        """Number of notes of a part over measures [start, end)."""
        self.check_range(part_index, start, end)
        return self.parts[part_index].note_count(start, end)

    def largest_chord_size(self, part_index: int, start: int, end: int | None = None) -> int:
        """
        Size of the largest chord of a part over measures [start, end).

        Useful when both channels play the same part but different chord
        members. Returns 0 for an out-of-bounds part or range.
        """
        try:
            notes = self.notes_in_range(part_index, start, end)
        except InvalidRangeError as e:
            logger.warning(f"largest_chord_size: {e}")
            return 0
        return max((note.chord_size for note in notes), default=0)

    def summary(self) -> dict[str, Any]:
        """Generate a summary for quick inspection."""
        return {
            "name": self.name,
            "tempo": self.tempo,
            "parts": self.part_count,
            "measures": self.measure_count(),
            "measure_counts": self.measure_counts(),
            "notes_per_part": [part.note_count() for part in self.parts],
            "warnings": len(self.warnings),
        }

    def to_yaml_dict(self) -> dict[str, Any]:
        """
        Convert to a YAML-friendly dict.

        Measures are lists of [length, [frequencies...]] pairs to keep
        the dump compact.
        """
        return {
            "schema": self.schema_version,
            "name": self.name,
            "tempo": self.tempo,
            "parts": [
                [
                    [[note.length, list(note.frequencies)] for note in measure.notes]
                    for measure in part.measures
                ]
                for part in self.parts
            ],
        }
