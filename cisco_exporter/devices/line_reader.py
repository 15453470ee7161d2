"""
Line Reader

Sole consumer of a shell's output stream. Runs one background thread per
session that splits the stream into lines and publishes them, in order, onto
a small bounded queue. When the stream ends the queue is closed and every
waiting or later consumer fails with StreamClosedError instead of hanging.
"""

from typing import Optional
import logging
import queue
import threading

from paramiko import SSHException

from .errors import StreamClosedError


# Published once, after the last line, when the stream ends
_CLOSED = object()


class LineReader:
    """
    Single-producer side of the session's line queue.

    The stream only needs a recv(nbytes) method returning bytes, with b""
    meaning end of stream (paramiko.Channel behaves this way).
    """

    QUEUE_SIZE = 4

    # How often a reader blocked on a full queue re-checks for stop()
    PUBLISH_POLL_SECONDS = 0.5

    def __init__(
        self,
        stream,
        chunk_size: int = 10000,
        name: str = "shell",
        queue_size: int = QUEUE_SIZE
    ):
        """
        Initialize line reader.

        Args:
            stream: Shell output stream (paramiko.Channel)
            chunk_size: Maximum bytes requested per read
            name: Used for the thread name and logger (usually the host)
            queue_size: Line queue capacity
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.stream = stream
        self.chunk_size = chunk_size
        self.name = name

        self._queue: "queue.Queue" = queue.Queue(maxsize=queue_size)
        self._closed = threading.Event()
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.logger = logging.getLogger(f"{__name__}.{name}")

    @property
    def closed(self) -> bool:
        """True once the stream has ended"""
        return self._closed.is_set()

    def start(self):
        """Start the reader thread. A reader runs once and is never restarted."""
        if self._thread is not None:
            raise RuntimeError("LineReader already started")

        self._thread = threading.Thread(
            target=self._read_loop,
            name=f"line-reader-{self.name}",
            daemon=True
        )
        self._thread.start()

    def stop(self):
        """
        Release a reader blocked on a full queue.

        Used at session teardown, when nobody will consume the remaining
        lines. The reader still exits on its own once the stream closes.
        """
        self._stopped.set()

    def get_line(self, timeout: float) -> Optional[str]:
        """
        Wait for the next line.

        Args:
            timeout: Seconds to wait; zero or negative polls once

        Returns:
            The next line, or None if the timeout elapsed first

        Raises:
            StreamClosedError: If the stream has ended and all lines were consumed
        """
        if self._closed.is_set() and self._queue.empty():
            raise StreamClosedError(f"{self.name}: shell output stream closed")

        try:
            item = self._queue.get(timeout=max(timeout, 0))
        except queue.Empty:
            return None

        if item is _CLOSED:
            raise StreamClosedError(f"{self.name}: shell output stream closed")

        return item

    def _read_loop(self):
        pending = b""

        try:
            while True:
                chunk = self.stream.recv(self.chunk_size)
                if not chunk:
                    self.logger.debug("Shell stream reached EOF")
                    break

                pending += chunk
                *lines, pending = pending.split(b"\n")

                for raw in lines:
                    if not self._publish(_decode(raw + b"\n")):
                        return
        except (OSError, EOFError, SSHException) as e:
            self.logger.debug(f"Shell stream read failed: {e}")
        finally:
            self._closed.set()
            self._publish_closed()

    def _publish(self, item) -> bool:
        # Blocks while the queue is full; lines are never dropped for capacity
        while not self._stopped.is_set():
            try:
                self._queue.put(item, timeout=self.PUBLISH_POLL_SECONDS)
                return True
            except queue.Full:
                continue
        return False

    def _publish_closed(self):
        # Consumers may be blocked on get() even after stop()
        try:
            self._queue.put_nowait(_CLOSED)
        except queue.Full:
            # Lines are still queued; get_line sees _closed once they are drained
            self._publish(_CLOSED)


def _decode(raw: bytes) -> str:
    line = raw.decode("utf-8", errors="replace")
    # Wrapped terminal output leaves a stray CR at the start of a line
    if line.startswith("\r"):
        line = line[1:]
    return line
