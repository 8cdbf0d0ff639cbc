"""
Jingle downloader - programs a configured export into a device slot.

The download is a strict request/response sequence over a Transport:
one allocate command, then one note command per note per channel, right
before left. Each command must be acknowledged with its exact expected
response before the next is sent. The first failure aborts the download
and nothing already sent is rolled back; retry the whole slot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from chuk_mcp_jingle.compiler.capacity import check_capacity
from chuk_mcp_jingle.constants import DUTY_CYCLE, Channel
from chuk_mcp_jingle.errors import ChannelMismatchError, InvalidIndexError, ProtocolError
from chuk_mcp_jingle.models.channels import ChannelConfig
from chuk_mcp_jingle.models.timeline import Timeline
from chuk_mcp_jingle.protocol.commands import Command, allocate_command, note_command

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Blocking request/response link to the controller."""

    def send(self, command: str) -> str:
        """Send one command line and return everything the device answered."""
        ...


def render_commands(
    timeline: Timeline,
    config: ChannelConfig,
    slot: int,
    octave_adjust: float = 1.0,
    duty_cycle: int = DUTY_CYCLE,
) -> list[Command]:
    """
    Render the full command sequence for a slot without sending it.

    The allocate count comes from the right channel. Both channels are
    programmed with the same note indices, so their parts must hold the
    same number of notes over the measure range.

    Raises:
        InvalidIndexError: If the slot or configuration is out of range
        ChannelMismatchError: If the channels' note counts differ
    """
    if slot < 0:
        raise InvalidIndexError(f"Invalid slot index {slot}")
    config.check(timeline)

    notes = {
        channel: timeline.notes_in_range(
            config.part_for(channel), config.measure_start, config.measure_end
        )
        for channel in Channel
    }
    right = notes[Channel.RIGHT]
    left = notes[Channel.LEFT]
    if len(right) != len(left):
        logger.error(
            f"Right channel has {len(right)} notes but left channel has {len(left)} "
            f"in measures {config.measure_range(timeline)}"
        )
        raise ChannelMismatchError(
            f"Right and left parts must have equal note counts in range "
            f"(right {len(right)}, left {len(left)})"
        )

    commands = [allocate_command(len(right))]
    for note_index, (right_note, left_note) in enumerate(zip(right, left, strict=True)):
        for channel, note in ((Channel.RIGHT, right_note), (Channel.LEFT, left_note)):
            commands.append(
                note_command(
                    note,
                    channel,
                    slot,
                    note_index,
                    tempo_bpm=timeline.tempo,
                    octave_adjust=octave_adjust,
                    duty_cycle=duty_cycle,
                )
            )
    return commands


@dataclass(frozen=True)
class DownloadResult:
    """Summary of a completed download."""

    slot: int
    note_count: int
    commands_sent: int


class JingleDownloader:
    """
    Drives a rendered export through a Transport.

    Example:
        downloader = JingleDownloader(SerialTransport("/dev/ttyACM0"))
        downloader.download(timeline, config, slot=0)
    """

    def __init__(
        self,
        transport: Transport,
        octave_adjust: float = 1.0,
        duty_cycle: int = DUTY_CYCLE,
        capacity_bytes: int | None = None,
    ):
        """
        Initialize the downloader.

        Args:
            transport: Link to the controller
            octave_adjust: Frequency multiplier applied to every note
            duty_cycle: PWM duty cycle sent with every note
            capacity_bytes: Device budget to check before sending (None skips the check)
        """
        self.transport = transport
        self.octave_adjust = octave_adjust
        self.duty_cycle = duty_cycle
        self.capacity_bytes = capacity_bytes

    def download(self, timeline: Timeline, config: ChannelConfig, slot: int) -> DownloadResult:
        """
        Program the configured export into a device slot.

        Args:
            timeline: Parsed score
            config: Channel configuration
            slot: Jingle slot index on the device

        Returns:
            DownloadResult for the programmed slot

        Raises:
            CapacityExceededError: If the export does not fit the budget
            ChannelMismatchError: If the channels' note counts differ
            ProtocolError: On the first failed exchange; the slot is left
                partially programmed
        """
        if self.capacity_bytes is not None:
            check_capacity(timeline, config, self.capacity_bytes)

        commands = render_commands(
            timeline,
            config,
            slot,
            octave_adjust=self.octave_adjust,
            duty_cycle=self.duty_cycle,
        )

        for command in commands:
            self._exchange(command)

        note_count = (len(commands) - 1) // len(Channel)
        logger.info(f"Programmed slot {slot} with {note_count} notes per channel")
        return DownloadResult(slot=slot, note_count=note_count, commands_sent=len(commands))

    def _exchange(self, command: Command) -> None:
        logger.debug(f"-> {command.text!r}")
        try:
            response = self.transport.send(command.text)
        except OSError as e:
            logger.error(f"Transport failed sending {command.text!r}: {e}")
            raise ProtocolError(
                f"Transport failed: {e}", command=command.text, expected=command.expected_response
            ) from e

        if response != command.expected_response:
            logger.error(
                f"Unexpected response to {command.text!r}: "
                f"expected {command.expected_response!r}, got {response!r}"
            )
            raise ProtocolError(
                "Unexpected response from device",
                command=command.text,
                expected=command.expected_response,
                actual=response,
            )
