"""
Rhythm primitives - converting score time to note lengths and milliseconds.

MusicXML durations are integers in "divisions", the number of units per
quarter note. Note lengths are kept in quarter notes; the device wants
milliseconds at the score tempo.
"""

from __future__ import annotations

from chuk_mcp_jingle.constants import MS_PER_MINUTE


def quarter_length(raw_duration: int, divisions: int) -> float:
    """
    Convert a raw MusicXML duration to a length in quarter notes.

    Args:
        raw_duration: Duration in divisions
        divisions: Divisions per quarter note (must be positive)

    Returns:
        Length in quarter notes
    """
    if divisions <= 0:
        raise ValueError(f"Divisions must be positive, got {divisions}")
    return raw_duration / divisions


def length_to_ms(length: float, tempo_bpm: int) -> int:
    """Duration in whole milliseconds of a quarter-note length at a tempo."""
    if tempo_bpm <= 0:
        raise ValueError(f"Tempo must be positive, got {tempo_bpm}")
    return int(length * MS_PER_MINUTE / tempo_bpm)


def length_to_ticks(length: float, ticks_per_beat: int) -> int:
    """Convert a quarter-note length to MIDI ticks."""
    return int(round(length * ticks_per_beat))
