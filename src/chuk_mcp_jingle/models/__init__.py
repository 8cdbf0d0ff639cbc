"""
Pydantic models for the jingle compiler.

This module provides:
- Timeline: Parsed score (parts, measures, notes, tempo)
- Part / Measure / Note: Timeline building blocks
- ChannelConfig: Part selection per channel and the export measure range
"""

from chuk_mcp_jingle.models.channels import ChannelConfig
from chuk_mcp_jingle.models.timeline import Measure, Note, Part, Timeline

__all__ = [
    "ChannelConfig",
    "Measure",
    "Note",
    "Part",
    "Timeline",
]
