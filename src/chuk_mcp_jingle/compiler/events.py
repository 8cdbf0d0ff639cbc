"""
Structural events - the input vocabulary of the score builder.

The builder consumes a forward-only stream of EnterElement, ExitElement
and Text events terminated by EndOfDocument. iter_events() produces that
stream from MusicXML (.xml/.musicxml text or compressed .mxl) with
xml.etree's pull parser, so any other tokenizer producing the same
events can be swapped in.
"""

from __future__ import annotations

import io
import logging
import zipfile
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO
from xml.etree import ElementTree

from chuk_mcp_jingle.errors import XmlStructureError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class EnterElement:
    """An element start tag."""

    name: str


@dataclass(frozen=True)
class ExitElement:
    """An element end tag."""

    name: str


@dataclass(frozen=True)
class Text:
    """Character content of the innermost open element."""

    content: str


@dataclass(frozen=True)
class EndOfDocument:
    """Marks the end of the event stream."""


Event = EnterElement | ExitElement | Text | EndOfDocument

ScoreSource = str | Path | bytes | BinaryIO


def local_name(tag: str) -> str:
    """Strip a '{namespace}' prefix from an element tag."""
    if tag.startswith("{"):
        return tag.rsplit("}", 1)[1]
    return tag


def iter_events(source: ScoreSource) -> Iterator[Event]:
    """
    Tokenize a MusicXML document into structural events.

    Leaf elements with non-whitespace content produce a single Text event
    between their EnterElement and ExitElement. Whitespace between
    elements is dropped.

    Args:
        source: Path to a .xml/.musicxml/.mxl file, raw document bytes,
            or a binary file object

    Yields:
        Structural events, ending with EndOfDocument

    Raises:
        XmlStructureError: If the markup is not well formed
    """
    parser = ElementTree.XMLPullParser(events=("start", "end"))
    try:
        for chunk in _read_chunks(source):
            parser.feed(chunk)
            yield from _drain(parser)
        parser.close()
    except ElementTree.ParseError as e:
        logger.error(f"Malformed score markup: {e}")
        raise XmlStructureError(f"Malformed markup: {e}") from e
    yield from _drain(parser)
    yield EndOfDocument()


def events_from_list(events: Iterable[Event]) -> Iterator[Event]:
    """Wrap prepared events as a stream, appending EndOfDocument if missing."""
    last: Event | None = None
    for event in events:
        last = event
        yield event
    if not isinstance(last, EndOfDocument):
        yield EndOfDocument()


def _drain(parser: ElementTree.XMLPullParser) -> Iterator[Event]:
    for kind, elem in parser.read_events():
        name = local_name(elem.tag)
        if kind == "start":
            yield EnterElement(name)
            continue

        if len(elem) == 0 and elem.text and elem.text.strip():
            yield Text(elem.text.strip())
        yield ExitElement(name)
        # Keep memory flat on long scores
        elem.clear()


def _read_chunks(source: ScoreSource) -> Iterator[bytes]:
    if isinstance(source, (bytes, bytearray)):
        yield bytes(source)
        return

    if isinstance(source, (str, Path)):
        path = Path(source)
        if path.suffix.lower() == ".mxl":
            yield _read_mxl_root(path)
            return
        with open(path, "rb") as f:
            yield from _read_stream(f)
        return

    yield from _read_stream(source)


def _read_stream(stream: BinaryIO) -> Iterator[bytes]:
    while True:
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            break
        yield chunk


def _read_mxl_root(path: Path) -> bytes:
    """
    Extract the score document from a compressed .mxl archive.

    Uses the rootfile named by META-INF/container.xml, falling back to the
    first non-META-INF .xml member.
    """
    with zipfile.ZipFile(path, "r") as z:
        names = z.namelist()
        root_name = None

        if "META-INF/container.xml" in names:
            container = ElementTree.parse(io.BytesIO(z.read("META-INF/container.xml")))
            rootfile = container.getroot().find(".//{*}rootfile")
            if rootfile is None:
                rootfile = container.getroot().find(".//rootfile")
            if rootfile is not None:
                root_name = rootfile.get("full-path")

        if root_name is None:
            for name in names:
                if name.endswith(".xml") and not name.startswith("META-INF"):
                    root_name = name
                    break

        if root_name is None:
            raise XmlStructureError(f"Invalid .mxl file: no root XML found in {path}")

        return z.read(root_name)
