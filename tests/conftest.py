"""
Shared test fixtures

FakeChannel stands in for paramiko.Channel; FakeShell scripts how a Cisco
CLI answers the session engine's writes.
"""

import threading
from typing import Callable, Dict, List, Optional

import pytest

from cisco_exporter.config.exporter_config import ResolvedConfig
from cisco_exporter.monitoring.metrics import MetricRegistry


class FakeChannel:
    """In-memory shell channel: bytes fed in are returned by recv()"""

    def __init__(self, respond: Optional[Callable[[str], bytes]] = None):
        self.respond = respond
        self.sent: List[str] = []
        self.pty = None
        self.shell_invoked = False
        self.closed = False
        self.recv_sizes: List[int] = []

        self._buffer = bytearray()
        self._eof = False
        self._cond = threading.Condition()

    def feed(self, data: bytes):
        with self._cond:
            self._buffer += data
            self._cond.notify_all()

    def recv(self, nbytes: int) -> bytes:
        self.recv_sizes.append(nbytes)
        with self._cond:
            while not self._buffer and not self._eof:
                self._cond.wait()
            if not self._buffer:
                return b""
            chunk = bytes(self._buffer[:nbytes])
            del self._buffer[:nbytes]
            return chunk

    def sendall(self, data: bytes):
        if self.closed:
            raise OSError("Socket is closed")
        text = data.decode("utf-8")
        self.sent.append(text)
        if self.respond:
            reply = self.respond(text)
            if reply:
                self.feed(reply)

    def get_pty(self, term="vt100", width=80, height=24, **kwargs):
        self.pty = (term, width, height)

    def invoke_shell(self):
        self.shell_invoked = True

    def end_stream(self):
        """Device hung up: reads see EOF, writes still succeed"""
        with self._cond:
            self._eof = True
            self._cond.notify_all()

    def close(self):
        self.closed = True
        self.end_stream()


class FakeShell:
    """
    Scripted Cisco CLI.

    Answers the wake-up newline with a prompt, and each framed command with
    its echo, its output and the echoed marker comment.
    """

    def __init__(
        self,
        outputs: Optional[Dict[str, str]] = None,
        prompt: str = "switch#",
        answer_wakeup: bool = True,
        echo_marker_first: bool = False,
        complete: bool = True
    ):
        self.outputs = outputs or {}
        self.prompt = prompt
        self.answer_wakeup = answer_wakeup
        self.echo_marker_first = echo_marker_first
        self.complete = complete
        self.commands: List[str] = []
        self.markers: List[str] = []

    def __call__(self, data: str) -> bytes:
        if data == "\n":
            return f"{self.prompt} \r\n".encode() if self.answer_wakeup else b""

        command, marker_line, _ = data.split("\n")
        self.commands.append(command)
        self.markers.append(marker_line)

        out = ""
        if self.echo_marker_first:
            out += f"{marker_line}\r\n"
        out += f"{self.prompt} {command}\r\n"

        output = self.outputs.get(command, "")
        for line in output.splitlines():
            out += f"{line}\r\n"
        if not output:
            out += "\r\n"

        if self.complete:
            out += f"{self.prompt} {marker_line}\r\n"
        return out.encode()


NXOS_SHOW_VERSION = """Cisco Nexus Operating System (NX-OS) Software
TAC support: http://www.cisco.com/tac
  NXOS: version 9.3(8)"""

VLAN_BRIEF = """1    default                          active    Eth1/1, Eth1/2
100  Engineering                      active    Eth1/3"""

MAC_COUNT_VLAN_1 = "Total MAC Addresses in Use:     76"
MAC_COUNT_VLAN_100 = "Total MAC Addresses in Use:     5"


@pytest.fixture
def resolved_config():
    return ResolvedConfig(timeout=1.0, legacy_ciphers=False, batch_size=10000)


@pytest.fixture
def metrics():
    """Fresh metric registry per test"""
    return MetricRegistry()


@pytest.fixture
def nxos_outputs():
    return {
        "show version": NXOS_SHOW_VERSION,
        "show vlan brief | include active | no-more": VLAN_BRIEF,
        "show mac address-table count dynamic vlan 1": MAC_COUNT_VLAN_1,
        "show mac address-table count dynamic vlan 100": MAC_COUNT_VLAN_100,
    }
