"""
RPC Client

Thin wrapper around a device session that knows which OS family the device
runs. Collectors use it to pick the right commands and parsers.
"""

from typing import Optional
import logging


IOS = "IOS"
IOSXE = "IOSXE"
NXOS = "NXOS"

SHOW_VERSION_COMMAND = "show version"


def detect_os_type(show_version: str) -> str:
    """
    Classify a device from its "show version" output.

    Raises:
        ValueError: If the output matches no known OS family
    """
    if "IOS XE" in show_version or "IOS-XE" in show_version:
        return IOSXE
    if "NX-OS" in show_version:
        return NXOS
    if "IOS Software" in show_version:
        return IOS
    raise ValueError("Unknown OSType")


class RPCClient:
    """Runs commands on a connected session on behalf of collectors"""

    def __init__(self, connection, os_type: Optional[str] = None):
        """
        Args:
            connection: Connected SSHConnection (anything with run_command)
            os_type: Known OS family; detected by identify() when omitted
        """
        self.connection = connection
        self.os_type = os_type
        self.logger = logging.getLogger(f"{__name__}.{getattr(connection, 'host', 'device')}")

    def identify(self) -> str:
        """Detect and remember the device's OS family"""
        output = self.connection.run_command(SHOW_VERSION_COMMAND)
        self.os_type = detect_os_type(output)
        self.logger.debug(f"Detected OS type {self.os_type}")
        return self.os_type

    def run_command(self, command: str) -> str:
        return self.connection.run_command(command)
