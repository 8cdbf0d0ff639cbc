"""
Channel configuration - which part feeds each channel, over which measures.

The configuration is owned by the caller and validated against a
Timeline on every set. Nothing keeps it in sync if the Timeline is
replaced afterwards, so exporters call check() again before use.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

from chuk_mcp_jingle.constants import Channel
from chuk_mcp_jingle.errors import InvalidIndexError
from chuk_mcp_jingle.models.timeline import Timeline

logger = logging.getLogger(__name__)


class ChannelConfig(BaseModel):
    """
    Export configuration for both channels.

    The measure range [measure_start, measure_end) is shared by both
    channels. Each bound names an existing measure, so measure_end=None
    stands for "through the last measure"; that is also the default. A
    range with start >= end is valid and exports nothing.
    """

    schema_version: str = Field("channels/v1", description="Schema version")
    parts: dict[Channel, int] = Field(
        default_factory=lambda: {Channel.RIGHT: 0, Channel.LEFT: 0},
        description="Part index per channel",
    )
    measure_start: int = Field(0, ge=0, description="First measure of the export")
    measure_end: int | None = Field(
        None, ge=0, description="Measure after the last one exported (None: through the end)"
    )

    @classmethod
    def for_timeline(cls, timeline: Timeline) -> ChannelConfig:
        """Default configuration: part 0 on both channels, every measure."""
        logger.debug(f"Default channel config for {timeline.name or 'score'}")
        return cls()

    def part_for(self, channel: Channel) -> int:
        """Part index feeding a channel."""
        return self.parts.get(channel, 0)

    def measure_range(self, timeline: Timeline) -> range:
        """The configured measures of a timeline as a range."""
        end = timeline.measure_count() if self.measure_end is None else self.measure_end
        return range(self.measure_start, end)

    def set_part_for_channel(self, timeline: Timeline, channel: Channel, part_index: int) -> None:
        """
        Select the part a channel plays.

        Raises:
            InvalidIndexError: If part_index is not a part of the timeline
        """
        channel = Channel(channel)
        self._check_part(timeline, part_index, channel)
        self.parts[channel] = part_index

    def set_measure_range(self, timeline: Timeline, start: int, end: int | None = None) -> None:
        """
        Set the half-open measure range exported on both channels.

        Both bounds are checked against the first part's measure count and
        must be below it; end=None exports through the last measure. No
        ordering is enforced between them.

        Raises:
            InvalidIndexError: If either bound is out of range
        """
        self._check_measures(timeline, start, end)
        self.measure_start = start
        self.measure_end = end

    def check(self, timeline: Timeline) -> None:
        """
        Re-validate the whole configuration against a timeline.

        Raises:
            InvalidIndexError: If any index no longer fits the timeline
        """
        for channel in Channel:
            self._check_part(timeline, self.part_for(channel), channel)
        self._check_measures(timeline, self.measure_start, self.measure_end)

    def _check_part(self, timeline: Timeline, part_index: int, channel: Channel) -> None:
        if not 0 <= part_index < timeline.part_count:
            logger.error(f"Bad part index {part_index} specified for {channel.value} channel")
            raise InvalidIndexError(
                f"Bad part index {part_index} for {channel.value} channel "
                f"(score has {timeline.part_count} parts)"
            )

    def _check_measures(self, timeline: Timeline, start: int, end: int | None) -> None:
        if not timeline.parts:
            raise InvalidIndexError("Cannot set a measure range if there are no parts")
        count = timeline.measure_count()
        if not 0 <= start < count:
            logger.error(f"Invalid measure start index {start} specified")
            raise InvalidIndexError(f"Invalid measure start index {start} ({count} measures)")
        if end is not None and not 0 <= end < count:
            logger.error(f"Invalid measure end index {end} specified")
            raise InvalidIndexError(f"Invalid measure end index {end} ({count} measures)")

    def to_yaml_dict(self) -> dict[str, Any]:
        """Convert to a YAML-friendly dict."""
        return {
            "schema": self.schema_version,
            "parts": {channel.value: self.part_for(channel) for channel in Channel},
            "measures": {"start": self.measure_start, "end": self.measure_end},
        }

    @classmethod
    def from_yaml_dict(cls, data: dict[str, Any]) -> ChannelConfig:
        """Create a ChannelConfig from a YAML-parsed dict."""
        parts = data.get("parts", {})
        measures = data.get("measures", {})
        return cls(
            schema_version=data.get("schema", "channels/v1"),
            parts={channel: parts.get(channel.value, 0) for channel in Channel},
            measure_start=measures.get("start", 0),
            measure_end=measures.get("end"),
        )
