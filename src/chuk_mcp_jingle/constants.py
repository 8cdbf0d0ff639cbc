"""
Constants and enums for the jingle compiler.

No magic strings - use enums for constrained values and named
constants for every number the device protocol depends on.
"""

from enum import Enum


class Channel(str, Enum):
    """
    Haptic/output channels on the controller.

    Declaration order is the download order: right, then left.
    """

    RIGHT = "right"
    LEFT = "left"


class ErrorKind(str, Enum):
    """Error taxonomy for parsing, configuration and download failures."""

    XML_STRUCTURE = "xml_structure"
    INVALID_PITCH = "invalid_pitch"
    CHORD_WITHOUT_NOTE = "chord_without_note"
    ZERO_BACKUP = "zero_backup"
    BACKUP_UNDERFLOW = "backup_underflow"
    UNRESOLVED_BACKUP = "unresolved_backup"
    INVALID_INDEX = "invalid_index"
    INVALID_RANGE = "invalid_range"
    CHANNEL_MISMATCH = "channel_mismatch"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    PROTOCOL = "protocol"


# Equal temperament (see http://pages.mtu.edu/~suits/NoteFreqCalcs.html)
C0_FREQUENCY = 16.35
TWELFTH_ROOT_OF_TWO = 1.059463094359
HALF_STEPS_PER_OCTAVE = 12

# Score defaults until the document says otherwise
DEFAULT_TEMPO_BPM = 100
DEFAULT_DIVISIONS = 1

# Device protocol
DUTY_CYCLE = 128
MS_PER_MINUTE = 60_000
JINGLE_HEADER_BYTES = 4  # Per slot: note counts for each channel
BYTES_PER_NOTE = 6  # Per note, per channel
DEFAULT_CAPACITY_BYTES = 4096  # Controller EEPROM

ALLOCATE_SUCCESS = "\rJingle added successfully.\n\r"
NOTE_SUCCESS = "\rNote updated successfully.\n\r"
RESPONSE_TERMINATOR = ".\n\r"

DEFAULT_BAUD_RATE = 115200


class ErrorMessages:
    """Standardized error messages."""

    SCORE_NOT_FOUND = "Score '{name}' not found. Load it first."
    INVALID_CHANNEL = "Invalid channel: '{channel}'. Expected 'right' or 'left'."
    NO_SERIAL_PORT = "No serial port configured. Set serial_port or JINGLE_SERIAL_PORT."


class SuccessMessages:
    """Standardized success messages."""

    SCORE_LOADED = "Loaded score '{name}' ({parts} parts, {measures} measures)."
    CHANNEL_SET = "Channel '{channel}' now plays part {part}."
    RANGE_SET = "Measure range set to [{start}, {end})."
    DOWNLOADED = "Programmed slot {slot} with {notes} notes per channel."
    SCORE_UNLOADED = "Unloaded score '{name}'."
