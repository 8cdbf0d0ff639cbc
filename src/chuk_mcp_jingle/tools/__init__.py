"""
MCP tool implementations.

Tools are organized by domain:
- scores - Loading and inspecting parsed scores
- configuration - Channel part selection and measure range
- export - Capacity estimate, command preview, MIDI preview, download
"""

from chuk_mcp_jingle.tools.configuration import register_configuration_tools
from chuk_mcp_jingle.tools.export import register_export_tools
from chuk_mcp_jingle.tools.scores import register_score_tools

__all__ = [
    "register_configuration_tools",
    "register_export_tools",
    "register_score_tools",
]
