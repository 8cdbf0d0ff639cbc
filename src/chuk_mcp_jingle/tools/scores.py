"""
Score tools - MCP tools for loading and inspecting scores.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from chuk_mcp_jingle.constants import ErrorMessages, SuccessMessages
from chuk_mcp_jingle.errors import JingleError
from chuk_mcp_jingle.scores import LoadedScore, ScoreManager

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def score_details(score: LoadedScore) -> dict[str, Any]:
    """JSON-friendly description of a loaded score and its configuration."""
    return {
        **score.timeline.summary(),
        "source": str(score.source),
        "config": score.config.to_yaml_dict(),
    }


def error_response(e: Exception) -> str:
    """JSON error payload, carrying the error kind for JingleErrors."""
    payload: dict[str, Any] = {"status": "error", "message": str(e)}
    if isinstance(e, JingleError):
        payload["kind"] = e.kind.value
        payload["message"] = e.message
        if e.location:
            payload["location"] = e.location
    return json.dumps(payload)


def register_score_tools(mcp: ChukMCPServer, manager: ScoreManager) -> dict[str, Any]:
    """
    Register score tools with the MCP server.

    Args:
        mcp: The MCP server instance
        manager: The score manager

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def jingle_load_score(path: str, name: str | None = None) -> str:
        """
        Parse a MusicXML score.

        Reads a .xml, .musicxml or compressed .mxl file and builds its
        part/measure/note timeline. Both channels start on part 0 over
        every measure unless a saved configuration exists.

        Args:
            path: Path to the MusicXML file
            name: Optional score name (default: file name without extension)

        Returns:
            JSON string with the parsed score summary

        Example:
            jingle_load_score(path="songs/zelda.musicxml")
        """
        try:
            score = await manager.load(Path(path), name)
            details = score_details(score)
            return json.dumps(
                {
                    "status": "success",
                    "score": details,
                    "message": SuccessMessages.SCORE_LOADED.format(
                        name=score.name,
                        parts=details["parts"],
                        measures=details["measures"],
                    ),
                }
            )
        except (JingleError, OSError) as e:
            return error_response(e)
        except Exception as e:
            logger.exception("Failed to load score")
            return error_response(e)

    tools["jingle_load_score"] = jingle_load_score

    @mcp.tool  # type: ignore[arg-type]
    async def jingle_describe_score(name: str) -> str:
        """
        Describe a loaded score.

        Args:
            name: Score name

        Returns:
            JSON string with parts, measures, notes per part, parse
            warnings and the channel configuration
        """
        try:
            score = await manager.get(name)
            if score is None:
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.SCORE_NOT_FOUND.format(name=name)}
                )

            return json.dumps(
                {
                    "status": "success",
                    "score": score_details(score),
                    "warnings": score.timeline.warnings,
                }
            )
        except Exception as e:
            logger.exception("Failed to describe score")
            return error_response(e)

    tools["jingle_describe_score"] = jingle_describe_score

    @mcp.tool  # type: ignore[arg-type]
    async def jingle_list_scores() -> str:
        """
        List loaded scores.

        Returns:
            JSON string with name, parts and measures of each score
        """
        try:
            scores = await manager.list_scores()
            return json.dumps(
                {
                    "status": "success",
                    "scores": [
                        {
                            "name": s.name,
                            "parts": s.timeline.part_count,
                            "measures": s.timeline.measure_count(),
                        }
                        for s in scores
                    ],
                    "count": len(scores),
                }
            )
        except Exception as e:
            logger.exception("Failed to list scores")
            return error_response(e)

    tools["jingle_list_scores"] = jingle_list_scores

    @mcp.tool  # type: ignore[arg-type]
    async def jingle_unload_score(name: str) -> str:
        """
        Drop a loaded score from memory.

        A saved channel configuration stays on disk and is picked up again
        the next time the score is loaded.

        Args:
            name: Score name

        Returns:
            JSON string with the unload status
        """
        try:
            if not await manager.remove(name):
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.SCORE_NOT_FOUND.format(name=name)}
                )

            logger.info(f"Unloaded score {name}")
            return json.dumps(
                {"status": "success", "message": SuccessMessages.SCORE_UNLOADED.format(name=name)}
            )
        except Exception as e:
            logger.exception("Failed to unload score")
            return error_response(e)

    tools["jingle_unload_score"] = jingle_unload_score

    @mcp.tool  # type: ignore[arg-type]
    async def jingle_largest_chord(
        name: str, part: int, start: int = 0, end: int | None = None
    ) -> str:
        """
        Find the largest chord of a part over a measure range.

        Useful when both channels should play the same part but different
        chord members.

        Args:
            name: Score name
            part: Part index
            start: First measure index (default: 0)
            end: Measure index after the last one (default: through the end)

        Returns:
            JSON string with the chord size (0 for an invalid range)
        """
        try:
            score = await manager.get(name)
            if score is None:
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.SCORE_NOT_FOUND.format(name=name)}
                )

            size = score.timeline.largest_chord_size(part, start, end)
            return json.dumps({"status": "success", "largest_chord": size})
        except Exception as e:
            logger.exception("Failed to compute largest chord")
            return error_response(e)

    tools["jingle_largest_chord"] = jingle_largest_chord

    return tools
