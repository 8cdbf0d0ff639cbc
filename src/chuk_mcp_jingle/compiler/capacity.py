"""
Capacity estimation - how much controller EEPROM an export would use.

Each slot costs a fixed header plus a fixed number of bytes per note on
each channel. This is a pre-flight check only; the wire protocol is
textual and does not carry these bytes.
"""

from __future__ import annotations

import logging

from chuk_mcp_jingle.constants import (
    BYTES_PER_NOTE,
    DEFAULT_CAPACITY_BYTES,
    JINGLE_HEADER_BYTES,
    Channel,
)
from chuk_mcp_jingle.errors import CapacityExceededError
from chuk_mcp_jingle.models.channels import ChannelConfig
from chuk_mcp_jingle.models.timeline import Timeline

logger = logging.getLogger(__name__)


def estimate_memory_usage(timeline: Timeline, config: ChannelConfig) -> int:
    """
    Bytes the configured export would occupy on the device.

    Args:
        timeline: Parsed score
        config: Channel configuration (re-validated against the timeline)

    Returns:
        header + notes_in_range(channel) * bytes_per_note, summed over channels

    Raises:
        InvalidIndexError: If the configuration no longer fits the timeline
    """
    config.check(timeline)

    byte_count = JINGLE_HEADER_BYTES
    for channel in Channel:
        notes = timeline.note_count(
            config.part_for(channel), config.measure_start, config.measure_end
        )
        byte_count += notes * BYTES_PER_NOTE
    return byte_count


def check_capacity(
    timeline: Timeline,
    config: ChannelConfig,
    capacity_bytes: int = DEFAULT_CAPACITY_BYTES,
) -> int:
    """
    Reject an export that would not fit in the device budget.

    Returns:
        The estimated usage in bytes

    Raises:
        CapacityExceededError: If the estimate exceeds capacity_bytes
    """
    usage = estimate_memory_usage(timeline, config)
    if usage > capacity_bytes:
        logger.error(f"Export needs {usage} bytes but only {capacity_bytes} are available")
        raise CapacityExceededError(
            f"Export needs {usage} bytes but only {capacity_bytes} are available"
        )
    return usage
