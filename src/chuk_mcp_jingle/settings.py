"""
Settings - download and server configuration.

Settings come from an optional YAML file and are then overridden by
JINGLE_* environment variables.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from chuk_mcp_jingle.constants import DEFAULT_BAUD_RATE, DEFAULT_CAPACITY_BYTES, DUTY_CYCLE

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = "jingle.yaml"

# Environment variable -> settings field
ENV_OVERRIDES: dict[str, str] = {
    "JINGLE_SERIAL_PORT": "serial_port",
    "JINGLE_BAUD_RATE": "baud_rate",
    "JINGLE_OCTAVE_ADJUST": "octave_adjust",
    "JINGLE_CAPACITY_BYTES": "capacity_bytes",
}


class JingleSettings(BaseModel):
    """Configuration for compiling and downloading jingles."""

    octave_adjust: float = Field(1.0, gt=0.0, description="Frequency multiplier for every note")
    duty_cycle: int = Field(DUTY_CYCLE, ge=0, le=255, description="PWM duty cycle")
    capacity_bytes: int = Field(DEFAULT_CAPACITY_BYTES, gt=0, description="EEPROM budget")
    serial_port: str | None = Field(None, description="Controller serial device")
    baud_rate: int = Field(DEFAULT_BAUD_RATE, gt=0, description="Serial speed")
    serial_timeout: float = Field(2.0, gt=0.0, description="Response timeout in seconds")
    scores_dir: Path = Field(Path("scores"), description="Where channel configs are saved")
    output_dir: Path = Field(Path("output"), description="Where MIDI previews are written")

    @classmethod
    def from_yaml(cls, path: Path) -> JingleSettings:
        """Load settings from a YAML mapping."""
        with open(path) as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}
        return cls(**data)

    @classmethod
    def load(cls, path: Path | None = None) -> JingleSettings:
        """
        Load settings from a file (if present) and the environment.

        Args:
            path: Settings file (default: $JINGLE_SETTINGS_FILE, then ./jingle.yaml)

        Returns:
            The merged settings
        """
        if path is None:
            env_path = os.environ.get("JINGLE_SETTINGS_FILE")
            path = Path(env_path) if env_path else Path.cwd() / DEFAULT_SETTINGS_FILE
        data: dict[str, Any] = {}
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            logger.info(f"Loaded settings from {path}")

        for env_name, field_name in ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                data[field_name] = value

        return cls(**data)
