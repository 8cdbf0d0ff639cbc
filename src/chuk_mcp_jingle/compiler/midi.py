"""
MIDI preview - render a configured export to a MIDI file for audition.

The device only plays the first chord member of each note, one note
after another, on two channels. The preview reproduces exactly that:
right channel on MIDI channel 0, left on MIDI channel 1.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from mido import Message, MetaMessage, MidiFile, MidiTrack

from chuk_mcp_jingle.constants import Channel
from chuk_mcp_jingle.core.pitch import frequency_to_midi
from chuk_mcp_jingle.core.rhythm import length_to_ticks

if TYPE_CHECKING:
    from collections.abc import Sequence

    from chuk_mcp_jingle.models.channels import ChannelConfig
    from chuk_mcp_jingle.models.timeline import Timeline


# Standard ticks per beat (quarter note)
TICKS_PER_BEAT = 480

PREVIEW_VELOCITY = 100

# MIDI channel per output channel
MIDI_CHANNELS: dict[Channel, int] = {
    Channel.RIGHT: 0,
    Channel.LEFT: 1,
}


@dataclass(frozen=True)
class MidiEvent:
    """
    A single MIDI note event.

    All times are in ticks (absolute from start of track).
    """

    pitch: int  # MIDI note number (0-127)
    start_ticks: int
    duration_ticks: int
    velocity: int = PREVIEW_VELOCITY
    channel: int = 0

    def __post_init__(self) -> None:
        """Validate MIDI ranges."""
        if not 0 <= self.pitch <= 127:
            raise ValueError(f"Pitch must be 0-127, got {self.pitch}")
        if not 0 <= self.velocity <= 127:
            raise ValueError(f"Velocity must be 0-127, got {self.velocity}")
        if not 0 <= self.channel <= 15:
            raise ValueError(f"Channel must be 0-15, got {self.channel}")
        if self.start_ticks < 0:
            raise ValueError(f"Start ticks must be >= 0, got {self.start_ticks}")
        if self.duration_ticks < 0:
            raise ValueError(f"Duration ticks must be >= 0, got {self.duration_ticks}")


def events_to_midi(
    events: Sequence[MidiEvent],
    tempo_bpm: int,
    ticks_per_beat: int = TICKS_PER_BEAT,
) -> MidiFile:
    """
    Convert a sequence of MidiEvents to a single-track MidiFile.

    Deterministic: same events, same file.
    """
    mid = MidiFile(ticks_per_beat=ticks_per_beat)
    track = MidiTrack()
    mid.tracks.append(track)

    track.append(MetaMessage("set_tempo", tempo=int(60_000_000 / tempo_bpm), time=0))

    messages: list[tuple[int, Message]] = []
    for event in events:
        messages.append(
            (
                event.start_ticks,
                Message(
                    "note_on",
                    channel=event.channel,
                    note=event.pitch,
                    velocity=event.velocity,
                    time=0,
                ),
            )
        )
        messages.append(
            (
                event.start_ticks + event.duration_ticks,
                Message("note_off", channel=event.channel, note=event.pitch, velocity=0, time=0),
            )
        )

    # note_off before note_on at the same tick so repeated pitches retrigger
    messages.sort(key=lambda x: (x[0], x[1].type != "note_off", x[1].channel))

    current_time = 0
    for abs_time, msg in messages:
        msg.time = abs_time - current_time
        track.append(msg)
        current_time = abs_time

    track.append(MetaMessage("end_of_track", time=0))
    return mid


def preview_events(
    timeline: Timeline,
    config: ChannelConfig,
    octave_adjust: float = 1.0,
    ticks_per_beat: int = TICKS_PER_BEAT,
) -> list[MidiEvent]:
    """
    Note events the device would play for the configured export.

    Notes with no sounding frequency (rests) advance time silently.
    """
    config.check(timeline)

    events: list[MidiEvent] = []
    for channel in Channel:
        notes = timeline.notes_in_range(
            config.part_for(channel), config.measure_start, config.measure_end
        )
        position = 0
        for note in notes:
            ticks = length_to_ticks(note.length, ticks_per_beat)
            frequency = note.frequencies[0] * octave_adjust if note.frequencies else 0.0
            pitch = frequency_to_midi(frequency)
            if pitch is not None and ticks > 0:
                events.append(
                    MidiEvent(
                        pitch=pitch,
                        start_ticks=position,
                        duration_ticks=ticks,
                        channel=MIDI_CHANNELS[channel],
                    )
                )
            position += ticks
    return events


def export_preview_midi(
    timeline: Timeline,
    config: ChannelConfig,
    octave_adjust: float = 1.0,
    ticks_per_beat: int = TICKS_PER_BEAT,
) -> MidiFile:
    """
    Render the configured export as a MIDI file.

    Example:
        midi = export_preview_midi(timeline, config)
        midi.save("preview.mid")
    """
    events = preview_events(timeline, config, octave_adjust, ticks_per_beat)
    return events_to_midi(events, tempo_bpm=timeline.tempo, ticks_per_beat=ticks_per_beat)
