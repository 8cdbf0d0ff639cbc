"""
Score Manager - handles parsed scores and their channel configurations.

Scores are parsed once and cached by name. The channel configuration of
each score is persisted as YAML next to the other project files so it
survives a restart; the timeline itself is always re-parsed from the
MusicXML source.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from chuk_mcp_jingle.compiler.builder import parse_musicxml
from chuk_mcp_jingle.constants import Channel
from chuk_mcp_jingle.errors import InvalidIndexError
from chuk_mcp_jingle.models.channels import ChannelConfig
from chuk_mcp_jingle.models.timeline import Timeline

logger = logging.getLogger(__name__)


@dataclass
class LoadedScore:
    """A parsed score with its channel configuration."""

    name: str
    source: Path
    timeline: Timeline
    config: ChannelConfig

    def __repr__(self) -> str:
        return f"LoadedScore({self.name!r}, {self.timeline.part_count} parts)"


class ScoreManager:
    """
    Manages loaded scores with config persistence.

    All operations are async-ready.
    """

    def __init__(self, scores_dir: Path):
        """
        Initialize the manager.

        Args:
            scores_dir: Directory for storing channel configuration files
        """
        self.scores_dir = scores_dir
        self._cache: dict[str, LoadedScore] = {}

    async def load(self, source: Path, name: str | None = None) -> LoadedScore:
        """
        Parse a MusicXML file and cache it under a name.

        A saved channel configuration is restored if it still fits the
        parsed timeline; otherwise the default configuration is used.

        Args:
            source: Path to a .xml/.musicxml/.mxl file
            name: Score name (default: file stem)

        Returns:
            The loaded score
        """
        name = name or source.stem
        timeline = parse_musicxml(source, name=name)
        config = self._load_config(name, timeline)

        score = LoadedScore(name=name, source=source, timeline=timeline, config=config)
        self._cache[name] = score
        return score

    async def get(self, name: str) -> LoadedScore | None:
        """Get a loaded score by name."""
        return self._cache.get(name)

    async def list_scores(self) -> list[LoadedScore]:
        """List loaded scores in name order."""
        return [self._cache[name] for name in sorted(self._cache)]

    async def set_channel_part(self, name: str, channel: Channel, part_index: int) -> LoadedScore:
        """
        Select the part a channel plays.

        Raises:
            ValueError: If the score is not loaded
            InvalidIndexError: If the part index is out of range
        """
        score = self._require(name)
        score.config.set_part_for_channel(score.timeline, channel, part_index)
        return score

    async def set_measure_range(self, name: str, start: int, end: int | None = None) -> LoadedScore:
        """
        Set the exported measure range.

        end=None exports through the last measure.

        Raises:
            ValueError: If the score is not loaded
            InvalidIndexError: If either bound is out of range
        """
        score = self._require(name)
        score.config.set_measure_range(score.timeline, start, end)
        return score

    async def save_config(self, name: str) -> Path:
        """
        Save a score's channel configuration to disk.

        Returns:
            Path to the saved file
        """
        score = self._require(name)
        self.scores_dir.mkdir(parents=True, exist_ok=True)

        path = self._get_path(name)
        with open(path, "w") as f:
            yaml.safe_dump(score.config.to_yaml_dict(), f, default_flow_style=False, sort_keys=False)
        return path

    async def remove(self, name: str) -> bool:
        """
        Drop a score from the cache.

        Returns True if removed, False if not loaded.
        """
        return self._cache.pop(name, None) is not None

    def _require(self, name: str) -> LoadedScore:
        score = self._cache.get(name)
        if score is None:
            raise ValueError(f"Score not found: {name}")
        return score

    def _load_config(self, name: str, timeline: Timeline) -> ChannelConfig:
        path = self._get_path(name)
        if not path.exists():
            return ChannelConfig.for_timeline(timeline)

        with open(path) as f:
            config = ChannelConfig.from_yaml_dict(yaml.safe_load(f) or {})
        try:
            config.check(timeline)
        except InvalidIndexError as e:
            logger.warning(f"Ignoring saved channel config for {name}: {e}")
            return ChannelConfig.for_timeline(timeline)
        return config

    def _get_path(self, name: str) -> Path:
        """Get the config file path for a score."""
        safe_name = name.replace(" ", "_").replace("/", "_")
        return self.scores_dir / f"{safe_name}.channels.yaml"
