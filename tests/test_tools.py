"""
Tests for MCP tools.

Tests the MCP tool implementations for scores, channel configuration,
and export.
"""

import asyncio
import json
import time
from pathlib import Path

import pytest

from chuk_mcp_jingle.constants import ALLOCATE_SUCCESS, NOTE_SUCCESS
from chuk_mcp_jingle.scores import ScoreManager
from chuk_mcp_jingle.settings import JingleSettings
from chuk_mcp_jingle.tools import (
    register_configuration_tools,
    register_export_tools,
    register_score_tools,
)


# Mock MCP server for testing tools
class MockMCPServer:
    """Mock MCP server that just stores registered tools."""

    def __init__(self, name: str):
        self.name = name
        self.tools: dict = {}

    def tool(self, func):
        """Decorator to register a tool."""
        self.tools[func.__name__] = func
        return func


class RecordingTransport:
    """Fake controller that acknowledges every command."""

    def __init__(self):
        self.sent: list[str] = []
        self.closed = False

    def send(self, command: str) -> str:
        self.sent.append(command)
        success = ALLOCATE_SUCCESS if command.startswith("jingle add") else NOTE_SUCCESS
        return command + success

    def close(self) -> None:
        self.closed = True


class SlowTransport(RecordingTransport):
    """Fake controller that takes a while to answer each command."""

    def send(self, command: str) -> str:
        time.sleep(0.1)
        return super().send(command)


@pytest.fixture
def settings(temp_dir: Path) -> JingleSettings:
    return JingleSettings(scores_dir=temp_dir / "scores", output_dir=temp_dir / "output")


@pytest.fixture
def manager(settings: JingleSettings) -> ScoreManager:
    return ScoreManager(settings.scores_dir)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def tools(manager: ScoreManager, settings: JingleSettings, transport: RecordingTransport) -> dict:
    mcp = MockMCPServer("test")
    registered = {}
    registered.update(register_score_tools(mcp, manager))
    registered.update(register_configuration_tools(mcp, manager))
    registered.update(register_export_tools(mcp, manager, settings, lambda: transport))
    return registered


async def load_sample(tools: dict, path: Path) -> dict:
    return json.loads(await tools["jingle_load_score"](path=str(path)))


class TestScoreTools:
    """Tests for score tools."""

    @pytest.mark.asyncio
    async def test_load_score(self, tools: dict, sample_score_path: Path):
        """Load score tool."""
        data = await load_sample(tools, sample_score_path)
        assert data["status"] == "success"
        assert data["score"]["name"] == "sample"
        assert data["score"]["parts"] == 2
        assert data["score"]["measures"] == 2
        assert data["score"]["tempo"] == 90
        assert "2 parts" in data["message"]

    @pytest.mark.asyncio
    async def test_load_named(self, tools: dict, sample_score_path: Path):
        """Scores can be loaded under another name."""
        result = await tools["jingle_load_score"](path=str(sample_score_path), name="tune")
        assert json.loads(result)["score"]["name"] == "tune"

    @pytest.mark.asyncio
    async def test_load_missing_file(self, tools: dict, temp_dir: Path):
        """Missing files are reported as errors."""
        result = await tools["jingle_load_score"](path=str(temp_dir / "nope.musicxml"))
        assert json.loads(result)["status"] == "error"

    @pytest.mark.asyncio
    async def test_load_bad_score(self, tools: dict, temp_dir: Path):
        """Parse failures carry the error kind."""
        path = temp_dir / "bad.musicxml"
        path.write_text(
            "<score-partwise><part><measure>"
            "<note><duration>2</duration></note>"
            "<backup><duration>0</duration></backup>"
            "</measure></part></score-partwise>"
        )
        data = json.loads(await tools["jingle_load_score"](path=str(path)))
        assert data["status"] == "error"
        assert data["kind"] == "zero_backup"
        assert "location" in data

    @pytest.mark.asyncio
    async def test_describe_score(self, tools: dict, sample_score_path: Path):
        """Describe score tool."""
        await load_sample(tools, sample_score_path)
        data = json.loads(await tools["jingle_describe_score"](name="sample"))
        assert data["status"] == "success"
        assert data["score"]["notes_per_part"] == [3, 3]
        assert data["score"]["config"]["measures"] == {"start": 0, "end": None}
        assert data["warnings"] == []

    @pytest.mark.asyncio
    async def test_describe_unknown(self, tools: dict):
        """Unknown scores are errors."""
        data = json.loads(await tools["jingle_describe_score"](name="ghost"))
        assert data["status"] == "error"
        assert "ghost" in data["message"]

    @pytest.mark.asyncio
    async def test_list_scores(self, tools: dict, sample_score_path: Path):
        """List scores tool."""
        await load_sample(tools, sample_score_path)
        await tools["jingle_load_score"](path=str(sample_score_path), name="another")

        data = json.loads(await tools["jingle_list_scores"]())
        assert data["count"] == 2
        assert [s["name"] for s in data["scores"]] == ["another", "sample"]

    @pytest.mark.asyncio
    async def test_unload_score(self, tools: dict, sample_score_path: Path):
        """Unloaded scores leave the cache."""
        await load_sample(tools, sample_score_path)
        data = json.loads(await tools["jingle_unload_score"](name="sample"))
        assert data["status"] == "success"

        data = json.loads(await tools["jingle_list_scores"]())
        assert data["count"] == 0
        data = json.loads(await tools["jingle_describe_score"](name="sample"))
        assert data["status"] == "error"

    @pytest.mark.asyncio
    async def test_unload_unknown(self, tools: dict):
        """Unloading an unknown score is an error."""
        data = json.loads(await tools["jingle_unload_score"](name="ghost"))
        assert data["status"] == "error"
        assert "ghost" in data["message"]

    @pytest.mark.asyncio
    async def test_largest_chord(self, tools: dict, sample_score_path: Path):
        """Largest chord tool."""
        await load_sample(tools, sample_score_path)
        result = await tools["jingle_largest_chord"](name="sample", part=1)
        assert json.loads(result)["largest_chord"] == 2

        result = await tools["jingle_largest_chord"](name="sample", part=7)
        assert json.loads(result)["largest_chord"] == 0

        result = await tools["jingle_largest_chord"](name="sample", part=1, start=0, end=2)
        assert json.loads(result)["largest_chord"] == 0


class TestConfigurationTools:
    """Tests for configuration tools."""

    @pytest.mark.asyncio
    async def test_set_channel_part(self, tools: dict, sample_score_path: Path):
        """Set channel part tool."""
        await load_sample(tools, sample_score_path)
        result = await tools["jingle_set_channel_part"](name="sample", channel="left", part=1)
        data = json.loads(result)
        assert data["status"] == "success"
        assert data["config"]["parts"] == {"right": 0, "left": 1}

    @pytest.mark.asyncio
    async def test_set_invalid_channel(self, tools: dict, sample_score_path: Path):
        """Unknown channel names are rejected."""
        await load_sample(tools, sample_score_path)
        result = await tools["jingle_set_channel_part"](name="sample", channel="middle", part=0)
        data = json.loads(result)
        assert data["status"] == "error"
        assert "middle" in data["message"]

    @pytest.mark.asyncio
    async def test_set_invalid_part(self, tools: dict, sample_score_path: Path):
        """Out-of-range parts report invalid_index."""
        await load_sample(tools, sample_score_path)
        result = await tools["jingle_set_channel_part"](name="sample", channel="right", part=5)
        assert json.loads(result)["kind"] == "invalid_index"

    @pytest.mark.asyncio
    async def test_set_measure_range(self, tools: dict, sample_score_path: Path):
        """Set measure range tool."""
        await load_sample(tools, sample_score_path)
        result = await tools["jingle_set_measure_range"](name="sample", start=0, end=1)
        data = json.loads(result)
        assert data["status"] == "success"
        assert data["config"]["measures"] == {"start": 0, "end": 1}
        assert "[0, 1)" in data["message"]

    @pytest.mark.asyncio
    async def test_set_measure_range_to_end(self, tools: dict, sample_score_path: Path):
        """Leaving out the end exports through the last measure."""
        await load_sample(tools, sample_score_path)
        result = await tools["jingle_set_measure_range"](name="sample", start=1)
        data = json.loads(result)
        assert data["status"] == "success"
        assert data["config"]["measures"] == {"start": 1, "end": None}
        assert "[1, 2)" in data["message"]

    @pytest.mark.asyncio
    async def test_set_end_at_measure_count(self, tools: dict, sample_score_path: Path):
        """An end at the measure count is rejected."""
        await load_sample(tools, sample_score_path)
        result = await tools["jingle_set_measure_range"](name="sample", start=0, end=2)
        data = json.loads(result)
        assert data["status"] == "error"
        assert data["kind"] == "invalid_index"

    @pytest.mark.asyncio
    async def test_set_bad_measure_range(self, tools: dict, sample_score_path: Path):
        """A start at the measure count is rejected."""
        await load_sample(tools, sample_score_path)
        result = await tools["jingle_set_measure_range"](name="sample", start=2, end=2)
        data = json.loads(result)
        assert data["status"] == "error"
        assert data["kind"] == "invalid_index"

    @pytest.mark.asyncio
    async def test_set_range_unknown_score(self, tools: dict):
        """Configuring an unknown score is an error."""
        result = await tools["jingle_set_measure_range"](name="ghost", start=0, end=1)
        data = json.loads(result)
        assert data["status"] == "error"
        assert "ghost" in data["message"]

    @pytest.mark.asyncio
    async def test_save_config(self, tools: dict, sample_score_path: Path, settings):
        """Saved configurations are restored on the next load."""
        await load_sample(tools, sample_score_path)
        await tools["jingle_set_channel_part"](name="sample", channel="left", part=1)
        data = json.loads(await tools["jingle_save_config"](name="sample"))
        assert data["status"] == "success"
        assert Path(data["path"]).parent == settings.scores_dir

        reloaded = await load_sample(tools, sample_score_path)
        assert reloaded["score"]["config"]["parts"]["left"] == 1


class TestExportTools:
    """Tests for export tools."""

    @pytest.mark.asyncio
    async def test_estimate_memory(self, tools: dict, sample_score_path: Path):
        """Estimate memory tool."""
        await load_sample(tools, sample_score_path)
        await tools["jingle_set_channel_part"](name="sample", channel="left", part=1)

        data = json.loads(await tools["jingle_estimate_memory"](name="sample"))
        assert data["status"] == "success"
        assert data["bytes"] == 40
        assert data["capacity"] == 4096
        assert data["fits"] is True

    @pytest.mark.asyncio
    async def test_preview_commands(self, tools: dict, sample_score_path: Path):
        """Preview commands tool."""
        await load_sample(tools, sample_score_path)
        await tools["jingle_set_channel_part"](name="sample", channel="left", part=1)

        data = json.loads(await tools["jingle_preview_commands"](name="sample", slot=2))
        assert data["status"] == "success"
        assert data["count"] == 7
        assert data["commands"][0] == "jingle add 3 3"
        assert data["commands"][1].startswith("jingle note 2 right 0 128 ")

    @pytest.mark.asyncio
    async def test_preview_mismatch(self, tools: dict, temp_dir: Path):
        """Unequal channels report channel_mismatch."""
        path = temp_dir / "uneven.musicxml"
        path.write_text(
            "<score-partwise><part><measure>"
            "<note><pitch><step>C</step><octave>5</octave></pitch><duration>2</duration></note>"
            "<note><pitch><step>D</step><octave>5</octave></pitch><duration>2</duration></note>"
            "<backup><duration>4</duration></backup>"
            "<note><pitch><step>C</step><octave>3</octave></pitch><duration>4</duration></note>"
            "</measure></part></score-partwise>"
        )
        await tools["jingle_load_score"](path=str(path))
        await tools["jingle_set_channel_part"](name="uneven", channel="left", part=1)

        data = json.loads(await tools["jingle_preview_commands"](name="uneven"))
        assert data["status"] == "error"
        assert data["kind"] == "channel_mismatch"

    @pytest.mark.asyncio
    async def test_export_midi(self, tools: dict, sample_score_path: Path, settings):
        """Export MIDI tool."""
        await load_sample(tools, sample_score_path)
        data = json.loads(await tools["jingle_export_midi"](name="sample", output_name="demo"))
        assert data["status"] == "success"
        path = Path(data["path"])
        assert path == settings.output_dir / "demo.mid"
        assert path.exists()

    @pytest.mark.asyncio
    async def test_download(
        self, tools: dict, sample_score_path: Path, transport: RecordingTransport
    ):
        """Download tool sends every command and closes the transport."""
        await load_sample(tools, sample_score_path)
        await tools["jingle_set_channel_part"](name="sample", channel="left", part=1)

        data = json.loads(await tools["jingle_download"](name="sample", slot=1))
        assert data["status"] == "success"
        assert data["notes"] == 3
        assert data["commands_sent"] == 7
        assert transport.sent[0] == "jingle add 3 3\n"
        assert transport.closed

    @pytest.mark.asyncio
    async def test_download_unknown_score(self, tools: dict, transport: RecordingTransport):
        """Nothing is sent for unknown scores."""
        data = json.loads(await tools["jingle_download"](name="ghost", slot=0))
        assert data["status"] == "error"
        assert transport.sent == []

    @pytest.mark.asyncio
    async def test_download_without_port(
        self, manager: ScoreManager, settings: JingleSettings, sample_score_path: Path
    ):
        """The default serial transport needs a configured port."""
        mcp = MockMCPServer("test")
        score_tools = register_score_tools(mcp, manager)
        export_tools = register_export_tools(mcp, manager, settings)

        await score_tools["jingle_load_score"](path=str(sample_score_path))
        data = json.loads(await export_tools["jingle_download"](name="sample", slot=0))
        assert data["status"] == "error"
        assert "serial port" in data["message"]

    @pytest.mark.asyncio
    async def test_download_keeps_loop_responsive(
        self, manager: ScoreManager, settings: JingleSettings, sample_score_path: Path
    ):
        """A slow controller does not stall other tasks on the event loop."""
        transport = SlowTransport()
        mcp = MockMCPServer("test")
        score_tools = register_score_tools(mcp, manager)
        export_tools = register_export_tools(mcp, manager, settings, lambda: transport)
        await score_tools["jingle_load_score"](path=str(sample_score_path))

        gaps: list[float] = []
        done = asyncio.Event()

        async def ticker() -> None:
            last = time.monotonic()
            while not done.is_set():
                await asyncio.sleep(0.01)
                now = time.monotonic()
                gaps.append(now - last)
                last = now

        async def download() -> str:
            try:
                return await export_tools["jingle_download"](name="sample", slot=0)
            finally:
                done.set()

        result, _ = await asyncio.gather(download(), ticker())
        assert json.loads(result)["status"] == "success"
        assert len(transport.sent) == 7
        assert transport.closed
        assert max(gaps) < 0.08
