"""
Device Session

An interactive SSH shell on one network device. Owns the transport, the
shell channel and the line reader for its whole life, and runs commands
through the transaction engine.
"""

from enum import Enum
from typing import Callable, Optional
import logging
import socket

import paramiko

from cisco_exporter.config.exporter_config import ResolvedConfig
from .algorithms import apply_legacy_algorithms
from .auth import AuthMethod
from .errors import PromptTimeoutError, StreamClosedError, TransportError
from .line_reader import LineReader
from .transaction import MarkerClock, TransactionEngine


class SessionState(Enum):
    """Session states"""
    CONSTRUCTED = "constructed"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSED = "closed"


class SSHConnection:
    """
    Interactive shell session to a device.

    Lifecycle: constructed → connecting → connected → closed. close() is
    idempotent and safe before connect() succeeded.
    """

    TERM_TYPE = "vt100"
    # Wide enough that device output never wraps
    TERM_WIDTH = 2000
    TERM_HEIGHT = 80

    PAGER_OFF_COMMAND = "terminal length 0"

    def __init__(
        self,
        host: str,
        port: int,
        auth: AuthMethod,
        config: ResolvedConfig,
        marker_clock: Optional[MarkerClock] = None,
        dial: Callable[..., socket.socket] = socket.create_connection
    ):
        """
        Initialize session (does not connect).

        Args:
            host: Device hostname or IP
            port: SSH port
            auth: Authentication method
            config: Resolved timeout / legacy cipher / batch size settings
            marker_clock: Marker source for transactions
            dial: Opens the TCP socket; (address, timeout) -> socket
        """
        self.host = host
        self.port = port
        self.auth = auth
        self.config = config
        self.marker_clock = marker_clock or MarkerClock()
        self._dial = dial

        self.state = SessionState.CONSTRUCTED
        self.transport: Optional[paramiko.Transport] = None
        self.channel: Optional[paramiko.Channel] = None
        self.reader: Optional[LineReader] = None
        self.engine: Optional[TransactionEngine] = None

        self.logger = logging.getLogger(f"{__name__}.{host}")

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def timeout(self) -> float:
        return self.config.timeout

    def connect(self):
        """
        Dial, authenticate, open the shell and confirm it responds.

        Raises:
            TransportError: On dial, negotiation, authentication or channel failure
            PromptTimeoutError: If the shell produced no line within the timeout
        """
        if self.state != SessionState.CONSTRUCTED:
            raise RuntimeError(f"Cannot connect session in state {self.state.value}")

        self.state = SessionState.CONNECTING
        self.logger.debug(f"Connecting to {self.address}")

        try:
            self._open_shell()
            self._start_reader()
            self._await_prompt()
        except Exception:
            self.close()
            raise

        self.state = SessionState.CONNECTED
        self.logger.info(f"Connected to {self.address}")

        self._disable_paging()

    def _open_shell(self):
        try:
            sock = self._dial((self.host, self.port), self.timeout)
        except OSError as e:
            raise TransportError(f"could not connect to {self.address}: {e}") from e

        try:
            self.transport = paramiko.Transport(sock)
        except (OSError, paramiko.SSHException) as e:
            sock.close()
            raise TransportError(f"could not set up transport to {self.address}: {e}") from e

        self.transport.banner_timeout = self.timeout
        self.transport.handshake_timeout = self.timeout
        self.transport.auth_timeout = self.timeout

        if self.config.legacy_ciphers:
            apply_legacy_algorithms(self.transport)

        try:
            # Host key is accepted without verification
            self.transport.start_client(timeout=self.timeout)
            self.auth.authenticate(self.transport)

            self.channel = self.transport.open_session(timeout=self.timeout)
            # paramiko sends an empty terminal-mode list (no ECHO 0, no speed
            # hints); commands are echoed and the echo rule drops them
            self.channel.get_pty(
                term=self.TERM_TYPE,
                width=self.TERM_WIDTH,
                height=self.TERM_HEIGHT
            )
            self.channel.invoke_shell()
        except (OSError, EOFError, paramiko.SSHException) as e:
            raise TransportError(f"SSH session to {self.address} failed: {e}") from e

    def _start_reader(self):
        self.reader = LineReader(
            self.channel,
            chunk_size=self.config.batch_size,
            name=self.host
        )
        self.reader.start()

        self.engine = TransactionEngine(
            send=self._send,
            reader=self.reader,
            timeout=self.timeout,
            marker_clock=self.marker_clock,
            name=self.host
        )

    def _await_prompt(self):
        # Some devices (NX-OS) print nothing until they get input
        self._send("\n")

        try:
            line = self.reader.get_line(self.timeout)
        except StreamClosedError as e:
            raise TransportError(f"{self.address} closed the shell before presenting a prompt") from e

        if line is None:
            raise PromptTimeoutError("device never presented a prompt")

    def _disable_paging(self):
        try:
            self.engine.run(self.PAGER_OFF_COMMAND)
        except (TimeoutError, ConnectionError) as e:
            self.logger.warning(f"Could not disable paging on {self.address}: {e}")

    def _send(self, data: str):
        try:
            self.channel.sendall(data.encode("utf-8"))
        except (OSError, paramiko.SSHException) as e:
            raise TransportError(f"write to {self.address} failed: {e}") from e

    def run_command(self, command: str) -> str:
        """
        Run one command and return its output.

        Only one command runs at a time per session; concurrent callers wait.

        Raises:
            CommandTimeoutError: If the command did not finish within the timeout
            StreamClosedError: If the session is closed or the shell ended
            TransportError: If the command could not be sent
        """
        if self.state == SessionState.CLOSED:
            raise StreamClosedError(f"session to {self.address} is closed")
        if self.engine is None:
            raise RuntimeError("connect() must be called before run_command()")

        return self.engine.run(command)

    def is_alive(self) -> bool:
        """True while connected and the shell stream is still open"""
        return (
            self.state == SessionState.CONNECTED and
            self.reader is not None and
            not self.reader.closed
        )

    def close(self):
        """Release the transport and shell. Safe to call repeatedly."""
        if self.state == SessionState.CLOSED:
            return

        was_connected = self.state == SessionState.CONNECTED
        self.state = SessionState.CLOSED

        if self.reader is not None:
            self.reader.stop()

        if self.channel is not None:
            self.channel.close()

        if self.transport is not None:
            self.transport.close()

        if was_connected:
            self.logger.info(f"Session closed for {self.address}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
