"""
Pitch primitives - Step and the equal-temperament pitch resolver.

A MusicXML pitch is a diatonic step letter, a chromatic alteration in
semitones, and an octave. The resolver counts half steps up from C0 and
walks the twelfth root of two to a frequency in Hz.
"""

from __future__ import annotations

import math
from enum import IntEnum

from chuk_mcp_jingle.constants import C0_FREQUENCY, HALF_STEPS_PER_OCTAVE, TWELFTH_ROOT_OF_TWO
from chuk_mcp_jingle.errors import InvalidPitchError

# MIDI note number of A4 and its frequency
_A4_MIDI = 69
_A4_FREQUENCY = 440.0


class Step(IntEnum):
    """
    The seven diatonic step letters.

    The value is the number of half steps above C in the same octave.
    """

    C = 0
    D = 2
    E = 4
    F = 5
    G = 7
    A = 9
    B = 11

    @classmethod
    def parse(cls, letter: str) -> Step:
        """Parse an upper-case step letter like 'C'."""
        name = letter.strip()
        if name in cls.__members__:
            return cls[name]
        raise InvalidPitchError(f"Invalid step specification of {letter!r}")


def half_steps_above_c0(step: Step | str, alter: int = 0, octave: int = 0) -> int:
    """Number of half steps from C0 to the given pitch."""
    if not isinstance(step, Step):
        step = Step.parse(step)
    return octave * HALF_STEPS_PER_OCTAVE + alter + step.value


def pitch_to_frequency(step: Step | str, alter: int = 0, octave: int = 0) -> float:
    """
    Resolve a pitch to its frequency in Hz.

    Args:
        step: Step letter (C, D, E, F, G, A, B)
        alter: Chromatic alteration in semitones (-1 flat, +1 sharp)
        octave: Scientific octave number (C4 is middle C)

    Returns:
        Frequency in Hz, C0 * (2^(1/12))^half_steps

    Raises:
        InvalidPitchError: If the step letter is not recognized

    Example:
        pitch_to_frequency("A", 0, 4)  # ~440.0
    """
    half_steps = half_steps_above_c0(step, alter, octave)

    factor = 1.0
    for _ in range(abs(half_steps)):
        factor *= TWELFTH_ROOT_OF_TWO
    if half_steps < 0:
        factor = 1.0 / factor

    return C0_FREQUENCY * factor


def frequency_to_midi(frequency: float) -> int | None:
    """
    Nearest MIDI note number for a frequency.

    Returns None for non-positive frequencies (rests) and clamps to 0-127.
    """
    if frequency <= 0:
        return None
    note = round(_A4_MIDI + HALF_STEPS_PER_OCTAVE * math.log2(frequency / _A4_FREQUENCY))
    return max(0, min(127, note))
