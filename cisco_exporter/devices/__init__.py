"""
Device Session Module

SSH session engine used by all collectors:
- ConnectionFactory: resolves settings and connects sessions
- SSHConnection: interactive shell session
- LineReader / TransactionEngine: line framing and command transactions

Usage:
    from cisco_exporter.devices import ConnectionFactory

    factory = ConnectionFactory(config)
    session = factory.connect(device)
    try:
        output = session.run_command("show version")
    finally:
        session.close()
"""

from .auth import AuthMethod, PasswordAuth, PublicKeyAuth, load_private_key
from .connection_factory import ConnectionFactory, auth_from_config
from .errors import (
    CommandTimeoutError,
    ConnectorError,
    PromptTimeoutError,
    StreamClosedError,
    TransportError,
)
from .line_reader import LineReader
from .session import SessionState, SSHConnection
from .transaction import MarkerClock, TransactionEngine

__all__ = [
    "AuthMethod",
    "PasswordAuth",
    "PublicKeyAuth",
    "load_private_key",
    "ConnectionFactory",
    "auth_from_config",
    "CommandTimeoutError",
    "ConnectorError",
    "PromptTimeoutError",
    "StreamClosedError",
    "TransportError",
    "LineReader",
    "SessionState",
    "SSHConnection",
    "MarkerClock",
    "TransactionEngine",
]
