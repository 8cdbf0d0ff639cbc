"""
Score builder - turns a structural event stream into a Timeline.

The builder is a pull-based recursive-descent reader with no
backtracking: each handler is entered right after the EnterElement of
the element it owns and consumes events up to that element's matching
ExitElement.

Backups are how MusicXML records several voices in one measure: after
a voice, <backup> rewinds time by some duration and the next voice is
written against the same span. The builder files each rewound voice
under the next part index until notes have used up the rewound
duration, then returns to the part it came from. Two parallel stacks
track this: the remaining duration of every open backup, and the part
index to return to when it closes. They are only ever pushed and
popped together.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator
from pathlib import Path

from chuk_mcp_jingle.compiler.events import (
    EndOfDocument,
    EnterElement,
    Event,
    ExitElement,
    ScoreSource,
    Text,
    iter_events,
)
from chuk_mcp_jingle.constants import DEFAULT_DIVISIONS
from chuk_mcp_jingle.core.pitch import pitch_to_frequency
from chuk_mcp_jingle.core.rhythm import quarter_length
from chuk_mcp_jingle.errors import (
    BackupUnderflowError,
    ChordWithoutNoteError,
    InvalidPitchError,
    JingleError,
    UnresolvedBackupError,
    XmlStructureError,
    ZeroBackupError,
)
from chuk_mcp_jingle.models.timeline import Measure, Note, Part, Timeline

logger = logging.getLogger(__name__)


class ScoreBuilder:
    """
    Builds a Timeline from one pass over a structural event stream.

    A builder can be reused; each build() starts from scratch and needs a
    fresh event stream.

    Example:
        builder = ScoreBuilder()
        timeline = builder.build(iter_events("song.musicxml"))
    """

    def __init__(self, name: str = ""):
        """
        Initialize the builder.

        Args:
            name: Name given to built timelines
        """
        self.name = name
        self._reset()

    def _reset(self) -> None:
        self._timeline = Timeline(name=self.name)
        self._events: Iterator[Event] = iter(())
        self._current_part = 0
        self._divisions = DEFAULT_DIVISIONS
        self._backups: list[int] = []
        self._restore_parts: list[int] = []

    def build(self, events: Iterable[Event]) -> Timeline:
        """
        Consume an event stream and return the parsed Timeline.

        Args:
            events: Structural events ending with EndOfDocument

        Returns:
            The fully populated Timeline

        Raises:
            JingleError: On the first structural failure; no partial
                Timeline is returned
        """
        self._reset()
        self._events = iter(events)

        try:
            self._parse_document()
            timeline = self._timeline
        finally:
            # A failed pass must not leave a partial timeline behind
            self._reset()

        return timeline

    # Stream access

    def _next(self) -> Event:
        try:
            return next(self._events)
        except StopIteration:
            raise self._error(
                XmlStructureError, "Event stream ended without an end of document"
            ) from None

    def _read_text(self, element: str) -> str:
        """Read the content of a leaf element whose EnterElement was just consumed."""
        event = self._next()
        if isinstance(event, Text):
            return event.content.strip()
        if isinstance(event, ExitElement) and event.name == element:
            return ""
        raise self._error(XmlStructureError, f"Expected text inside <{element}>, got {event!r}")

    def _read_int(self, element: str, default: int | None = None) -> int:
        text = self._read_text(element)
        if not text and default is not None:
            return default
        try:
            return int(text)
        except ValueError:
            raise self._error(
                XmlStructureError, f"Expected an integer in <{element}>, got {text!r}"
            ) from None

    def _read_uint(self, element: str) -> int:
        value = self._read_int(element)
        if value < 0:
            raise self._error(XmlStructureError, f"Negative value {value} in <{element}>")
        return value

    def _children(self, element: str) -> Iterator[str]:
        """Yield names of elements entered until the matching close of element."""
        while True:
            event = self._next()
            if isinstance(event, EndOfDocument):
                raise self._error(XmlStructureError, f"Document ended inside <{element}>")
            if isinstance(event, ExitElement) and event.name == element:
                return
            if isinstance(event, EnterElement):
                yield event.name

    # Handlers

    def _parse_document(self) -> None:
        while True:
            event = self._next()

            if isinstance(event, EndOfDocument):
                self._drain_backups("end of document")
                return

            if isinstance(event, EnterElement):
                if event.name == "note":
                    self._parse_note()
                elif event.name == "backup":
                    self._parse_backup()
                elif event.name == "measure":
                    self._start_measure()
                elif event.name == "per-minute":
                    self._parse_tempo()
                elif event.name == "divisions":
                    self._parse_divisions()
            elif isinstance(event, ExitElement) and event.name == "part":
                self._drain_backups("end of part")
                self._current_part += 1

    def _parse_tempo(self) -> None:
        text = self._read_text("per-minute")
        try:
            tempo = int(float(text))
        except ValueError:
            raise self._error(
                XmlStructureError, f"Expected a tempo in <per-minute>, got {text!r}"
            ) from None
        if tempo <= 0:
            raise self._error(XmlStructureError, f"Tempo must be positive, got {tempo}")
        self._timeline.tempo = tempo

    def _parse_divisions(self) -> None:
        divisions = self._read_int("divisions")
        if divisions <= 0:
            raise self._error(XmlStructureError, f"Divisions must be positive, got {divisions}")
        self._divisions = divisions

    def _parse_note(self) -> None:
        # A backup closes exactly at the note after its duration is used up
        if self._backups and self._backups[-1] == 0:
            self._pop_backup()

        raw_duration = 0
        frequency = 0.0
        is_chord = False

        for child in self._children("note"):
            if child == "pitch":
                frequency = self._parse_pitch()
            elif child == "duration":
                raw_duration = self._read_uint("duration")
            elif child == "chord":
                is_chord = True

        length = quarter_length(raw_duration, self._divisions)
        measure = self._current_measure()

        if is_chord:
            if not measure.notes:
                raise self._error(
                    ChordWithoutNoteError,
                    "Received chord, but no note exists for the current measure",
                )
            note = measure.notes[-1]
            if not math.isclose(note.length, length):
                warning = (
                    f"Length not consistent across notes in chord "
                    f"({note.length} vs {length}) at {self._location()}"
                )
                logger.warning(warning)
                self._timeline.warnings.append(warning)
            note.frequencies.append(frequency)
            return

        measure.add_note(Note(frequencies=[frequency], length=length), raw_duration)

        if self._backups:
            remaining = self._backups[-1]
            if raw_duration > remaining:
                raise self._error(
                    BackupUnderflowError,
                    f"Remaining backup duration ({remaining}) is less than "
                    f"current note duration ({raw_duration})",
                )
            self._backups[-1] = remaining - raw_duration

    def _parse_pitch(self) -> float:
        step = ""
        alter = 0
        octave: int | None = None

        for child in self._children("pitch"):
            if child == "step":
                step = self._read_text("step")
            elif child == "alter":
                alter = self._read_int("alter", default=0)
            elif child == "octave":
                octave = self._read_int("octave")

        if octave is None:
            raise self._error(XmlStructureError, "Pitch without an <octave>")

        try:
            return pitch_to_frequency(step, alter, octave)
        except InvalidPitchError as e:
            e.location = self._location()
            logger.error(f"{e.message} at {e.location}")
            raise

    def _parse_backup(self) -> None:
        duration = 0
        for child in self._children("backup"):
            if child == "duration":
                duration = self._read_uint("duration")

        if duration == 0:
            raise self._error(ZeroBackupError, "0 valued duration within backup encountered")

        self._push_backup(duration)
        self._current_part += 1

    def _start_measure(self) -> None:
        self._drain_backups("start of measure")

        # Every part from the cursor up gains a measure so counts stay aligned
        for part in self._timeline.parts[self._current_part :]:
            part.measures.append(Measure())

    # Backup stacks

    def _push_backup(self, duration: int) -> None:
        self._backups.append(duration)
        self._restore_parts.append(self._current_part)

    def _pop_backup(self) -> None:
        self._backups.pop()
        self._current_part = self._restore_parts.pop()

    def _drain_backups(self, boundary: str) -> None:
        """Close every open backup; each must have been fully used by notes."""
        while self._backups:
            if self._backups[-1] != 0:
                raise self._error(
                    UnresolvedBackupError,
                    f"Reached {boundary} with {len(self._backups)} backups "
                    f"and top having value of {self._backups[-1]}",
                )
            self._pop_backup()

    # Timeline access

    def _current_measure(self) -> Measure:
        parts = self._timeline.parts
        while self._current_part >= len(parts):
            parts.append(Part())

        part = parts[self._current_part]
        if not part.measures:
            part.measures.append(Measure())
        return part.measures[-1]

    def _location(self) -> str:
        parts = self._timeline.parts
        if self._current_part < len(parts):
            measure = max(len(parts[self._current_part].measures) - 1, 0)
        else:
            measure = 0
        return f"part {self._current_part}, measure {measure}"

    def _error(self, error_cls: type[JingleError], message: str) -> JingleError:
        location = self._location()
        logger.error(f"{message} at {location}")
        return error_cls(message, location=location)


def parse_events(events: Iterable[Event], name: str = "") -> Timeline:
    """Build a Timeline from a structural event stream."""
    return ScoreBuilder(name).build(events)


def parse_musicxml(source: ScoreSource, name: str | None = None) -> Timeline:
    """
    Parse a MusicXML document into a Timeline.

    Args:
        source: Path to a .xml/.musicxml/.mxl file, document bytes, or a
            binary file object
        name: Timeline name (defaults to the file stem for paths)

    Returns:
        The parsed Timeline
    """
    if name is None:
        name = Path(source).stem if isinstance(source, (str, Path)) else ""
    return ScoreBuilder(name).build(iter_events(source))
