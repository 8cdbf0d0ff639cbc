"""
Error hierarchy for the jingle compiler.

Every failure the compiler can raise is a JingleError carrying an
ErrorKind, so callers can branch on the kind without matching messages.
"""

from __future__ import annotations

from chuk_mcp_jingle.constants import ErrorKind


class JingleError(Exception):
    """Base class for all compiler errors."""

    kind: ErrorKind = ErrorKind.XML_STRUCTURE

    def __init__(self, message: str, location: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self) -> str:
        location = f" at {self.location}" if self.location else ""
        return f"[{self.kind.value}] {self.message}{location}"


class XmlStructureError(JingleError):
    """Element out of context, malformed value, or truncated document."""

    kind = ErrorKind.XML_STRUCTURE


class InvalidPitchError(JingleError):
    """Unrecognized diatonic step letter."""

    kind = ErrorKind.INVALID_PITCH


class ChordWithoutNoteError(JingleError):
    """Chord marker with no preceding note in the current measure."""

    kind = ErrorKind.CHORD_WITHOUT_NOTE


class ZeroBackupError(JingleError):
    """Backup that rewinds by nothing."""

    kind = ErrorKind.ZERO_BACKUP


class BackupUnderflowError(JingleError):
    """Note longer than the remaining backup duration."""

    kind = ErrorKind.BACKUP_UNDERFLOW


class UnresolvedBackupError(JingleError):
    """Backup scope still open at a measure, part or document boundary."""

    kind = ErrorKind.UNRESOLVED_BACKUP


class InvalidIndexError(JingleError):
    """Part or measure index outside the timeline."""

    kind = ErrorKind.INVALID_INDEX


class InvalidRangeError(JingleError):
    """Part or measure range outside the timeline."""

    kind = ErrorKind.INVALID_RANGE


class ChannelMismatchError(JingleError):
    """Right and left channels disagree on note count in the export range."""

    kind = ErrorKind.CHANNEL_MISMATCH


class CapacityExceededError(JingleError):
    """Configured export does not fit the device budget."""

    kind = ErrorKind.CAPACITY_EXCEEDED


class ProtocolError(JingleError):
    """Device response did not match, or the transport failed."""

    kind = ErrorKind.PROTOCOL

    def __init__(
        self,
        message: str,
        command: str | None = None,
        expected: str | None = None,
        actual: str | None = None,
    ) -> None:
        super().__init__(message, location=repr(command) if command else None)
        self.command = command
        self.expected = expected
        self.actual = actual
