"""
Serial transport - talks to the controller's USB serial console.
"""

from __future__ import annotations

import logging
from types import TracebackType

import serial

from chuk_mcp_jingle.constants import DEFAULT_BAUD_RATE, RESPONSE_TERMINATOR

logger = logging.getLogger(__name__)


class SerialTransport:
    """
    Transport over a serial port.

    Each send writes one command and reads until the response terminator
    or the read timeout, whichever comes first. A timed-out read returns
    whatever arrived, which the downloader then rejects as a mismatch.
    """

    def __init__(
        self,
        port: str | None = None,
        baud_rate: int = DEFAULT_BAUD_RATE,
        timeout: float = 2.0,
        connection: serial.Serial | None = None,
    ):
        """
        Open the port.

        Args:
            port: Serial device path (e.g. '/dev/ttyACM0', 'COM3')
            baud_rate: Serial communication speed
            timeout: Read timeout in seconds per response
            connection: Already-open serial connection to use instead of port
        """
        if connection is None:
            if port is None:
                raise ValueError("Either port or connection is required")
            connection = serial.Serial(port, baud_rate, timeout=timeout)
            logger.info(f"Opened {port} at {baud_rate} baud")
        self._serial = connection

    def send(self, command: str) -> str:
        """Write a command and return the device's answer."""
        self._serial.reset_input_buffer()
        self._serial.write(command.encode("ascii"))
        self._serial.flush()
        data = self._serial.read_until(RESPONSE_TERMINATOR.encode("ascii"))
        return data.decode("ascii", errors="replace")

    def close(self) -> None:
        """Close the port."""
        self._serial.close()

    def __enter__(self) -> SerialTransport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
