"""
Tests for the command-line preview mode.
"""

from pathlib import Path

import pytest

from chuk_mcp_jingle.server import preview_score


@pytest.fixture(autouse=True)
def no_settings_file(monkeypatch, temp_dir: Path):
    monkeypatch.setenv("JINGLE_SETTINGS_FILE", str(temp_dir / "none.yaml"))
    monkeypatch.delenv("JINGLE_OCTAVE_ADJUST", raising=False)


class TestPreviewScore:
    """Tests for preview_score."""

    def test_prints_commands(self, sample_score_path: Path, capsys) -> None:
        """Commands are printed one per line in send order."""
        assert preview_score(sample_score_path, left_part=1, slot=4) == 0

        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 7
        assert lines[0] == "jingle add 3 3"
        assert lines[1].startswith("jingle note 4 right 0 ")
        assert lines[2].startswith("jingle note 4 left 0 ")

    def test_bad_part(self, sample_score_path: Path, capsys) -> None:
        """Configuration errors give a non-zero status and no output."""
        assert preview_score(sample_score_path, left_part=5, slot=0) == 1
        assert capsys.readouterr().out == ""

    def test_missing_file(self, temp_dir: Path) -> None:
        """Missing scores give a non-zero status."""
        assert preview_score(temp_dir / "missing.musicxml", left_part=0, slot=0) == 1
