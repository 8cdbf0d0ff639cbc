"""
Score management - parsed scores and their channel configurations.
"""

from chuk_mcp_jingle.scores.manager import LoadedScore, ScoreManager

__all__ = [
    "LoadedScore",
    "ScoreManager",
]
