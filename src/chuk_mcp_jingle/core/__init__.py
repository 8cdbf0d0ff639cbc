"""
Core music primitives.

- Step: Diatonic step letters and their half-step offsets
- pitch_to_frequency: Equal-temperament pitch resolver
- frequency_to_midi: Nearest MIDI note for a frequency
- quarter_length / length_to_ms / length_to_ticks: Duration conversions
"""

from chuk_mcp_jingle.core.pitch import (
    Step,
    frequency_to_midi,
    half_steps_above_c0,
    pitch_to_frequency,
)
from chuk_mcp_jingle.core.rhythm import length_to_ms, length_to_ticks, quarter_length

__all__ = [
    # Pitch
    "Step",
    "frequency_to_midi",
    "half_steps_above_c0",
    "pitch_to_frequency",
    # Rhythm
    "length_to_ms",
    "length_to_ticks",
    "quarter_length",
]
