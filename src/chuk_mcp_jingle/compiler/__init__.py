"""
Compilation pipeline - transforms MusicXML into a device-ready Timeline.

The pipeline:
    MusicXML bytes → structural events (iter_events)
    → Timeline (ScoreBuilder)
    → capacity gate (check_capacity)
    → device commands (chuk_mcp_jingle.protocol)
"""

from chuk_mcp_jingle.compiler.builder import ScoreBuilder, parse_events, parse_musicxml
from chuk_mcp_jingle.compiler.capacity import check_capacity, estimate_memory_usage
from chuk_mcp_jingle.compiler.events import (
    EndOfDocument,
    EnterElement,
    Event,
    ExitElement,
    Text,
    events_from_list,
    iter_events,
)
from chuk_mcp_jingle.compiler.midi import (
    TICKS_PER_BEAT,
    MidiEvent,
    events_to_midi,
    export_preview_midi,
    preview_events,
)

__all__ = [
    # Builder
    "ScoreBuilder",
    "parse_events",
    "parse_musicxml",
    # Events
    "EndOfDocument",
    "EnterElement",
    "Event",
    "ExitElement",
    "Text",
    "events_from_list",
    "iter_events",
    # Capacity
    "check_capacity",
    "estimate_memory_usage",
    # MIDI
    "TICKS_PER_BEAT",
    "MidiEvent",
    "events_to_midi",
    "export_preview_midi",
    "preview_events",
]
