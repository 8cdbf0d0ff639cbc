#!/usr/bin/env python3
"""
Example: Compile a MusicXML score into a jingle.

Parses a two-voice score, puts the split-out second voice on the left
channel, checks the EEPROM budget, writes a MIDI preview and prints the
commands that would be sent to the controller. Pass a serial port to
actually program slot 0.

Usage:
    python examples/compile_jingle.py
    python examples/compile_jingle.py /dev/ttyACM0
    # Creates: examples/output/two_voices.mid
"""

import sys
from pathlib import Path

from chuk_mcp_jingle.compiler import check_capacity, export_preview_midi, parse_musicxml
from chuk_mcp_jingle.constants import Channel
from chuk_mcp_jingle.models import ChannelConfig
from chuk_mcp_jingle.protocol import JingleDownloader, render_commands
from chuk_mcp_jingle.protocol.serial_transport import SerialTransport

SCORE = b"""<?xml version="1.0" encoding="UTF-8"?>
<score-partwise version="3.1">
  <part id="P1">
    <measure number="1">
      <attributes><divisions>1</divisions></attributes>
      <direction><direction-type><metronome>
        <beat-unit>quarter</beat-unit><per-minute>120</per-minute>
      </metronome></direction-type></direction>
      <note><pitch><step>E</step><octave>5</octave></pitch><duration>1</duration></note>
      <note><pitch><step>D</step><octave>5</octave></pitch><duration>1</duration></note>
      <note><pitch><step>C</step><octave>5</octave></pitch><duration>2</duration></note>
      <backup><duration>4</duration></backup>
      <note><pitch><step>C</step><octave>3</octave></pitch><duration>1</duration></note>
      <note><pitch><step>G</step><octave>3</octave></pitch><duration>1</duration></note>
      <note><pitch><step>C</step><octave>3</octave></pitch><duration>2</duration></note>
    </measure>
  </part>
</score-partwise>
"""


def main() -> None:
    """Compile the example score."""
    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    timeline = parse_musicxml(SCORE, name="two_voices")
    print(f"Parsed {timeline.part_count} parts, {timeline.measure_count()} measures")

    # The backup moved the bass voice to part 1
    config = ChannelConfig.for_timeline(timeline)
    config.set_part_for_channel(timeline, Channel.LEFT, 1)

    usage = check_capacity(timeline, config)
    print(f"EEPROM usage: {usage} bytes")

    midi_path = output_dir / "two_voices.mid"
    export_preview_midi(timeline, config).save(str(midi_path))
    print(f"  Created: {midi_path}")

    print("\nCommands:")
    for command in render_commands(timeline, config, slot=0):
        print(f"  {command.text.rstrip()}")

    if len(sys.argv) > 1:
        with SerialTransport(sys.argv[1]) as transport:
            result = JingleDownloader(transport).download(timeline, config, slot=0)
        print(f"\nProgrammed slot {result.slot} with {result.note_count} notes per channel")


if __name__ == "__main__":
    main()
