"""
Device protocol - rendering and sending jingle commands.

This module provides:
- Command rendering (allocate_command, note_command, render_commands)
- JingleDownloader: Acknowledgment-checked download over a Transport
- SerialTransport: Transport over a USB serial port
"""

from chuk_mcp_jingle.protocol.commands import Command, allocate_command, note_command
from chuk_mcp_jingle.protocol.downloader import (
    DownloadResult,
    JingleDownloader,
    Transport,
    render_commands,
)

__all__ = [
    "Command",
    "DownloadResult",
    "JingleDownloader",
    "Transport",
    "allocate_command",
    "note_command",
    "render_commands",
]
