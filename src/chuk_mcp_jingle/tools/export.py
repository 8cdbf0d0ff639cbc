"""
Export tools - MCP tools for capacity checks, previews and downloads.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from chuk_mcp_jingle.compiler.capacity import estimate_memory_usage
from chuk_mcp_jingle.compiler.midi import export_preview_midi
from chuk_mcp_jingle.constants import ErrorMessages, SuccessMessages
from chuk_mcp_jingle.errors import JingleError
from chuk_mcp_jingle.protocol import DownloadResult, JingleDownloader, Transport, render_commands
from chuk_mcp_jingle.scores import ScoreManager
from chuk_mcp_jingle.settings import JingleSettings
from chuk_mcp_jingle.tools.scores import error_response

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def serial_transport_factory(settings: JingleSettings) -> Callable[[], Transport]:
    """Build a factory that opens the configured serial port."""

    def factory() -> Transport:
        from chuk_mcp_jingle.protocol.serial_transport import SerialTransport

        if not settings.serial_port:
            raise ValueError(ErrorMessages.NO_SERIAL_PORT)
        return SerialTransport(
            settings.serial_port,
            baud_rate=settings.baud_rate,
            timeout=settings.serial_timeout,
        )

    return factory


def register_export_tools(
    mcp: ChukMCPServer,
    manager: ScoreManager,
    settings: JingleSettings,
    transport_factory: Callable[[], Transport] | None = None,
) -> dict[str, Any]:
    """
    Register export tools with the MCP server.

    Args:
        mcp: The MCP server instance
        manager: The score manager
        settings: Download settings (octave adjust, duty cycle, budget, paths)
        transport_factory: Opens a link to the controller (default: serial port from settings)

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}
    open_transport = transport_factory or serial_transport_factory(settings)

    @mcp.tool  # type: ignore[arg-type]
    async def jingle_estimate_memory(name: str) -> str:
        """
        Estimate controller EEPROM usage of the configured export.

        Args:
            name: Score name

        Returns:
            JSON string with bytes used, the budget and whether it fits
        """
        try:
            score = await manager.get(name)
            if score is None:
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.SCORE_NOT_FOUND.format(name=name)}
                )

            usage = estimate_memory_usage(score.timeline, score.config)
            return json.dumps(
                {
                    "status": "success",
                    "bytes": usage,
                    "capacity": settings.capacity_bytes,
                    "fits": usage <= settings.capacity_bytes,
                }
            )
        except JingleError as e:
            return error_response(e)
        except Exception as e:
            logger.exception("Failed to estimate memory")
            return error_response(e)

    tools["jingle_estimate_memory"] = jingle_estimate_memory

    @mcp.tool  # type: ignore[arg-type]
    async def jingle_preview_commands(name: str, slot: int = 0) -> str:
        """
        Render the device commands for the configured export without sending them.

        Args:
            name: Score name
            slot: Jingle slot index on the controller

        Returns:
            JSON string with the command lines in send order
        """
        try:
            score = await manager.get(name)
            if score is None:
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.SCORE_NOT_FOUND.format(name=name)}
                )

            commands = render_commands(
                score.timeline,
                score.config,
                slot,
                octave_adjust=settings.octave_adjust,
                duty_cycle=settings.duty_cycle,
            )
            return json.dumps(
                {
                    "status": "success",
                    "commands": [c.text.rstrip("\n") for c in commands],
                    "count": len(commands),
                }
            )
        except JingleError as e:
            return error_response(e)
        except Exception as e:
            logger.exception("Failed to render commands")
            return error_response(e)

    tools["jingle_preview_commands"] = jingle_preview_commands

    @mcp.tool  # type: ignore[arg-type]
    async def jingle_export_midi(name: str, output_name: str | None = None) -> str:
        """
        Write a MIDI preview of the configured export.

        The right channel plays on MIDI channel 1 and the left on MIDI
        channel 2, one note at a time, as the controller would.

        Args:
            name: Score name
            output_name: Optional output filename (without .mid extension)

        Returns:
            JSON string with the MIDI file path
        """
        try:
            score = await manager.get(name)
            if score is None:
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.SCORE_NOT_FOUND.format(name=name)}
                )

            midi = export_preview_midi(
                score.timeline, score.config, octave_adjust=settings.octave_adjust
            )
            settings.output_dir.mkdir(parents=True, exist_ok=True)
            output_path = settings.output_dir / f"{output_name or name}.mid"
            midi.save(str(output_path))

            return json.dumps({"status": "success", "path": str(output_path)})
        except JingleError as e:
            return error_response(e)
        except Exception as e:
            logger.exception("Failed to export MIDI preview")
            return error_response(e)

    tools["jingle_export_midi"] = jingle_export_midi

    @mcp.tool  # type: ignore[arg-type]
    async def jingle_download(name: str, slot: int) -> str:
        """
        Program the configured export into a controller slot.

        Checks the EEPROM budget first. On a failed exchange the slot is
        left partially programmed; run the download again to retry.

        Args:
            name: Score name
            slot: Jingle slot index on the controller

        Returns:
            JSON string with the number of notes and commands sent
        """
        try:
            score = await manager.get(name)
            if score is None:
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.SCORE_NOT_FOUND.format(name=name)}
                )

            timeline, config = score.timeline, score.config

            def run_download() -> DownloadResult:
                transport = open_transport()
                try:
                    downloader = JingleDownloader(
                        transport,
                        octave_adjust=settings.octave_adjust,
                        duty_cycle=settings.duty_cycle,
                        capacity_bytes=settings.capacity_bytes,
                    )
                    return downloader.download(timeline, config, slot)
                finally:
                    close = getattr(transport, "close", None)
                    if close is not None:
                        close()

            # Serial exchanges block, keep them off the event loop
            result = await asyncio.to_thread(run_download)

            return json.dumps(
                {
                    "status": "success",
                    "slot": result.slot,
                    "notes": result.note_count,
                    "commands_sent": result.commands_sent,
                    "message": SuccessMessages.DOWNLOADED.format(
                        slot=result.slot, notes=result.note_count
                    ),
                }
            )
        except (JingleError, ValueError, OSError) as e:
            return error_response(e)
        except Exception as e:
            logger.exception("Failed to download jingle")
            return error_response(e)

    tools["jingle_download"] = jingle_download

    return tools
