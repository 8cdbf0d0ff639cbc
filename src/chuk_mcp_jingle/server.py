#!/usr/bin/env python3
"""
Entry point for the CHUK Jingle MCP Server.

This module provides the main entry point for the MCP server,
supporting multiple transport modes (stdio, http), and a --preview
mode that prints the device commands for a score without starting the
server.
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def preview_score(path: Path, left_part: int, slot: int) -> int:
    """Print the command sequence for a score; returns the exit status."""
    from chuk_mcp_jingle.compiler import parse_musicxml
    from chuk_mcp_jingle.constants import Channel
    from chuk_mcp_jingle.errors import JingleError
    from chuk_mcp_jingle.models import ChannelConfig
    from chuk_mcp_jingle.protocol import render_commands
    from chuk_mcp_jingle.settings import JingleSettings

    settings = JingleSettings.load()
    try:
        timeline = parse_musicxml(path)
        config = ChannelConfig.for_timeline(timeline)
        config.set_part_for_channel(timeline, Channel.LEFT, left_part)
        commands = render_commands(
            timeline,
            config,
            slot,
            octave_adjust=settings.octave_adjust,
            duty_cycle=settings.duty_cycle,
        )
    except (JingleError, OSError) as e:
        logger.error(f"Cannot preview {path}: {e}")
        return 1

    for command in commands:
        sys.stdout.write(command.text)
    return 0


def main() -> None:
    """Main entry point with transport detection."""
    parser = argparse.ArgumentParser(description="CHUK Jingle MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="MCP transport mode (default: stdio)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="HTTP port (only for http transport)",
    )
    parser.add_argument(
        "--settings",
        help="Settings YAML file (default: ./jingle.yaml)",
    )
    parser.add_argument(
        "--serial-port",
        help="Controller serial device, overrides the settings file",
    )
    parser.add_argument(
        "--preview",
        metavar="SCORE",
        help="Print the device commands for a MusicXML score and exit",
    )
    parser.add_argument(
        "--left-part",
        type=int,
        default=0,
        help="Part played on the left channel in --preview mode (default: 0)",
    )
    parser.add_argument(
        "--slot",
        type=int,
        default=0,
        help="Jingle slot used in --preview mode (default: 0)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (shows every device command)",
    )

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    # Settings are read when the server module is imported
    if args.settings:
        os.environ["JINGLE_SETTINGS_FILE"] = args.settings
    if args.serial_port:
        os.environ["JINGLE_SERIAL_PORT"] = args.serial_port

    if args.preview:
        sys.exit(preview_score(Path(args.preview), args.left_part, args.slot))

    from chuk_mcp_jingle.async_server import mcp

    if args.transport == "stdio":
        logger.info("Starting CHUK Jingle MCP Server (stdio)")
        asyncio.run(mcp.run_stdio())
    else:
        logger.info(f"Starting CHUK Jingle MCP Server (http:{args.port})")
        asyncio.run(mcp.run_http(port=args.port))


if __name__ == "__main__":
    main()
