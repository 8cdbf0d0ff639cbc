"""
Configuration tools - MCP tools for channel and measure range selection.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from chuk_mcp_jingle.constants import Channel, ErrorMessages, SuccessMessages
from chuk_mcp_jingle.errors import JingleError
from chuk_mcp_jingle.scores import ScoreManager
from chuk_mcp_jingle.tools.scores import error_response

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_configuration_tools(mcp: ChukMCPServer, manager: ScoreManager) -> dict[str, Any]:
    """
    Register channel configuration tools with the MCP server.

    Args:
        mcp: The MCP server instance
        manager: The score manager

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def jingle_set_channel_part(name: str, channel: str, part: int) -> str:
        """
        Choose which part a channel plays.

        Args:
            name: Score name
            channel: 'right' or 'left'
            part: Part index (see jingle_describe_score)

        Returns:
            JSON string with the updated configuration

        Example:
            jingle_set_channel_part(name="zelda", channel="left", part=1)
        """
        try:
            try:
                chan = Channel(channel)
            except ValueError:
                return json.dumps(
                    {
                        "status": "error",
                        "message": ErrorMessages.INVALID_CHANNEL.format(channel=channel),
                    }
                )

            score = await manager.set_channel_part(name, chan, part)
            return json.dumps(
                {
                    "status": "success",
                    "config": score.config.to_yaml_dict(),
                    "message": SuccessMessages.CHANNEL_SET.format(channel=chan.value, part=part),
                }
            )
        except (JingleError, ValueError) as e:
            return error_response(e)
        except Exception as e:
            logger.exception("Failed to set channel part")
            return error_response(e)

    tools["jingle_set_channel_part"] = jingle_set_channel_part

    @mcp.tool  # type: ignore[arg-type]
    async def jingle_set_measure_range(name: str, start: int, end: int | None = None) -> str:
        """
        Choose which measures are exported.

        The range is half-open: measures start..end-1 are exported on
        both channels. Both bounds must name an existing measure; leave
        end out to export through the last measure.

        Args:
            name: Score name
            start: First measure index
            end: Measure index after the last one (default: through the end)

        Returns:
            JSON string with the updated configuration
        """
        try:
            score = await manager.set_measure_range(name, start, end)
            measures = score.config.measure_range(score.timeline)
            return json.dumps(
                {
                    "status": "success",
                    "config": score.config.to_yaml_dict(),
                    "message": SuccessMessages.RANGE_SET.format(
                        start=measures.start, end=measures.stop
                    ),
                }
            )
        except (JingleError, ValueError) as e:
            return error_response(e)
        except Exception as e:
            logger.exception("Failed to set measure range")
            return error_response(e)

    tools["jingle_set_measure_range"] = jingle_set_measure_range

    @mcp.tool  # type: ignore[arg-type]
    async def jingle_save_config(name: str) -> str:
        """
        Save a score's channel configuration.

        The configuration is restored the next time the score is loaded.

        Args:
            name: Score name

        Returns:
            JSON string with the saved file path
        """
        try:
            path = await manager.save_config(name)
            return json.dumps({"status": "success", "path": str(path)})
        except ValueError as e:
            return error_response(e)
        except Exception as e:
            logger.exception("Failed to save config")
            return error_response(e)

    tools["jingle_save_config"] = jingle_save_config

    return tools
