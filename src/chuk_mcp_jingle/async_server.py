#!/usr/bin/env python3
"""
Async Jingle MCP Server using chuk-mcp-server

This server compiles MusicXML scores into jingles for the Steam
Controller's haptic motors and programs them over the controller's
serial console.

The server provides tools for:
- Loading scores and inspecting their parts and measures
- Choosing the part each channel plays and the measure range
- Checking EEPROM usage and previewing commands or MIDI
- Downloading a jingle into a controller slot
"""

import logging

from chuk_mcp_server import ChukMCPServer

from chuk_mcp_jingle.scores import ScoreManager
from chuk_mcp_jingle.settings import JingleSettings
from chuk_mcp_jingle.tools import (
    register_configuration_tools,
    register_export_tools,
    register_score_tools,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
mcp = ChukMCPServer("chuk-mcp-jingle")

settings = JingleSettings.load()
score_manager = ScoreManager(settings.scores_dir)

# Register all tools
score_tools = register_score_tools(mcp, score_manager)
configuration_tools = register_configuration_tools(mcp, score_manager)
export_tools = register_export_tools(mcp, score_manager, settings)

# Export tool functions for direct access
jingle_load_score = score_tools["jingle_load_score"]
jingle_describe_score = score_tools["jingle_describe_score"]
jingle_list_scores = score_tools["jingle_list_scores"]
jingle_unload_score = score_tools["jingle_unload_score"]
jingle_largest_chord = score_tools["jingle_largest_chord"]

jingle_set_channel_part = configuration_tools["jingle_set_channel_part"]
jingle_set_measure_range = configuration_tools["jingle_set_measure_range"]
jingle_save_config = configuration_tools["jingle_save_config"]

jingle_estimate_memory = export_tools["jingle_estimate_memory"]
jingle_preview_commands = export_tools["jingle_preview_commands"]
jingle_export_midi = export_tools["jingle_export_midi"]
jingle_download = export_tools["jingle_download"]

logger.info("CHUK Jingle MCP Server initialized")
logger.info(f"  Scores dir: {settings.scores_dir}")
logger.info(f"  Output dir: {settings.output_dir}")
logger.info(f"  Serial port: {settings.serial_port or 'not configured'}")
