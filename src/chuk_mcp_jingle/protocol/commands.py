"""
Device commands - the textual jingle protocol.

Every command is one line. The controller echoes the line back and
follows it with a fixed success message; anything else is a failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from chuk_mcp_jingle.constants import (
    ALLOCATE_SUCCESS,
    DUTY_CYCLE,
    NOTE_SUCCESS,
    Channel,
)
from chuk_mcp_jingle.core.rhythm import length_to_ms
from chuk_mcp_jingle.models.timeline import Note

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Command:
    """A command line and the exact response that acknowledges it."""

    text: str
    expected_response: str


def allocate_command(note_count: int) -> Command:
    """Command reserving a slot for note_count notes per channel."""
    text = f"jingle add {note_count} {note_count}\n"
    return Command(text, text + ALLOCATE_SUCCESS)


def note_command(
    note: Note,
    channel: Channel,
    slot: int,
    note_index: int,
    tempo_bpm: int,
    octave_adjust: float = 1.0,
    duty_cycle: int = DUTY_CYCLE,
    chord_index: int = 0,
) -> Command:
    """
    Command programming one note of a slot on one channel.

    Args:
        note: Note to program
        channel: Output channel
        slot: Jingle slot index on the device
        note_index: Index of the note within the slot
        tempo_bpm: Score tempo, for converting length to milliseconds
        octave_adjust: Frequency multiplier (2.0 is an octave up)
        duty_cycle: PWM duty cycle
        chord_index: Which chord member to play

    Returns:
        The command and its expected response
    """
    frequency = 0
    if chord_index < len(note.frequencies):
        frequency = int(note.frequencies[chord_index] * octave_adjust)
    else:
        logger.warning(
            f"chord index {chord_index} out of range for a note with "
            f"{len(note.frequencies)} frequencies"
        )

    duration_ms = length_to_ms(note.length, tempo_bpm)
    text = (
        f"jingle note {slot} {Channel(channel).value} {note_index} "
        f"{duty_cycle} {frequency} {duration_ms}\n"
    )
    return Command(text, text + NOTE_SUCCESS)
