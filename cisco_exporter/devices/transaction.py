"""
Transaction Engine

Turns the unframed shell line stream into command/response transactions.
Every command is followed by a comment line carrying a unique marker; the
command's output is everything between the command echo and the echoed
marker.

Outbound framing:  "<command>\\n!<marker>\\n"
"""

from typing import Callable, List
import logging
import threading
import time

from .errors import CommandTimeoutError
from .line_reader import LineReader


MARKER_TEMPLATE = "__END_{}__"

# Comment prefix understood by Cisco CLIs; needs no privilege and has no side effects
COMMENT_PREFIX = "!"


class MarkerClock:
    """
    Generates per-transaction markers from a nanosecond clock.

    Values are strictly increasing even when the clock has not advanced
    between two calls, so no marker can repeat on a session.
    """

    def __init__(self, clock: Callable[[], int] = time.monotonic_ns):
        self._clock = clock
        self._last = None
        self._lock = threading.Lock()

    def next_marker(self) -> str:
        with self._lock:
            value = self._clock()
            if self._last is not None and value <= self._last:
                value = self._last + 1
            self._last = value
        return MARKER_TEMPLATE.format(value)


class TransactionEngine:
    """
    Runs one command at a time over a live shell.

    A lock held for the whole exchange makes "one outstanding transaction
    per session" an enforced property; concurrent callers queue up instead
    of stealing each other's lines.
    """

    def __init__(
        self,
        send: Callable[[str], None],
        reader: LineReader,
        timeout: float,
        marker_clock: MarkerClock = None,
        name: str = "shell"
    ):
        """
        Initialize transaction engine.

        Args:
            send: Writes text to the shell's input
            reader: The session's line reader
            timeout: Seconds allowed per transaction, restarted on every call
            marker_clock: Marker source (one per session)
            name: Used for the logger (usually the host)
        """
        self.send = send
        self.reader = reader
        self.timeout = timeout
        self.marker_clock = marker_clock or MarkerClock()

        self._lock = threading.Lock()
        self.logger = logging.getLogger(f"{__name__}.{name}")

    def run(self, command: str) -> str:
        """
        Send a command and collect its output.

        Args:
            command: Command text without a line terminator

        Returns:
            Output with command echo and marker line removed and carriage
            returns converted to "\\n"

        Raises:
            CommandTimeoutError: If the marker was not seen in time
            StreamClosedError: If the shell stream ended
            TransportError: If the command could not be written
        """
        with self._lock:
            return self._run_locked(command)

    def _run_locked(self, command: str) -> str:
        marker = self.marker_clock.next_marker()
        terminator = COMMENT_PREFIX + marker

        self.logger.debug(f"Running {command!r} (marker {marker})")
        self.send(f"{command}\n{terminator}\n")

        buf: List[str] = []
        deadline = time.monotonic() + self.timeout

        while True:
            remaining = deadline - time.monotonic()
            line = self.reader.get_line(remaining) if remaining > 0 else None
            if line is None:
                self.logger.debug(f"Timeout waiting for {marker} after {command!r}")
                raise CommandTimeoutError("timeout reached")

            clean = line.strip()

            if clean.endswith(terminator):
                # Some firmware (NX-OS) echoes the marker before any output
                if not buf:
                    continue
                return "".join(buf).replace("\r\n", "\n").replace("\r", "\n")

            if clean.endswith(command):
                continue

            buf.append(line)
