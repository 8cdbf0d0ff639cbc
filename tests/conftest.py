"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import pytest

from chuk_mcp_jingle.models import Measure, Note, Part, Timeline

# One part, two measures. Measure 1 has a second voice (with a chord)
# written after a backup; measure 2 has a rest as its second voice.
SAMPLE_MUSICXML = """<?xml version="1.0" encoding="UTF-8" standalone="no"?>
<!DOCTYPE score-partwise PUBLIC "-//Recordare//DTD MusicXML 3.1 Partwise//EN"
  "http://www.musicxml.org/dtds/partwise.dtd">
<score-partwise version="3.1">
  <part-list>
    <score-part id="P1"><part-name>Piano</part-name></score-part>
  </part-list>
  <part id="P1">
    <measure number="1">
      <attributes><divisions>2</divisions></attributes>
      <direction>
        <direction-type>
          <metronome><beat-unit>quarter</beat-unit><per-minute>90</per-minute></metronome>
        </direction-type>
      </direction>
      <note><pitch><step>A</step><octave>4</octave></pitch><duration>4</duration><voice>1</voice></note>
      <note><pitch><step>C</step><alter>1</alter><octave>5</octave></pitch><duration>4</duration><voice>1</voice></note>
      <backup><duration>8</duration></backup>
      <note><pitch><step>A</step><octave>3</octave></pitch><duration>4</duration><voice>2</voice></note>
      <note><chord/><pitch><step>C</step><octave>4</octave></pitch><duration>4</duration><voice>2</voice></note>
      <note><pitch><step>E</step><octave>3</octave></pitch><duration>4</duration><voice>2</voice></note>
    </measure>
    <measure number="2">
      <note><pitch><step>D</step><octave>5</octave></pitch><duration>8</duration><voice>1</voice></note>
      <backup><duration>8</duration></backup>
      <note><rest/><duration>8</duration><voice>2</voice></note>
    </measure>
  </part>
</score-partwise>
"""


@pytest.fixture
def temp_dir() -> Path:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_musicxml() -> str:
    """A small two-voice MusicXML document."""
    return SAMPLE_MUSICXML


@pytest.fixture
def sample_score_path(temp_dir: Path) -> Path:
    """The sample document written to disk."""
    path = temp_dir / "sample.musicxml"
    path.write_text(SAMPLE_MUSICXML)
    return path


@pytest.fixture
def two_part_timeline() -> Timeline:
    """
    Two parts, two measures, three notes each, at 120 BPM.

    Part 0: [A4 (1 beat), C4+E4 chord (1/2 beat)], [rest (2 beats)]
    Part 1: [E5 (1 beat)], [C5 (1/2 beat), G4 (2 beats)]
    """
    return Timeline(
        name="two-part",
        tempo=120,
        parts=[
            Part(
                measures=[
                    Measure(
                        notes=[
                            Note(frequencies=[440.0], length=1.0),
                            Note(frequencies=[261.63, 329.63], length=0.5),
                        ]
                    ),
                    Measure(notes=[Note(frequencies=[0.0], length=2.0)]),
                ]
            ),
            Part(
                measures=[
                    Measure(notes=[Note(frequencies=[659.25], length=1.0)]),
                    Measure(
                        notes=[
                            Note(frequencies=[523.25], length=0.5),
                            Note(frequencies=[392.0], length=2.0),
                        ]
                    ),
                ]
            ),
        ],
    )
