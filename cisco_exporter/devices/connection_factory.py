"""
Connection Factory

Builds the effective settings for a device (global defaults overridden per
device), constructs its SSH session and drives the initial connect.
"""

from typing import Callable, Optional
import logging

from cisco_exporter.config.exporter_config import DeviceConfig, ExporterConfig
from .auth import AuthMethod, PasswordAuth, PublicKeyAuth, load_private_key_file
from .session import SSHConnection


def auth_from_config(config: ExporterConfig, device: DeviceConfig) -> AuthMethod:
    """
    Build an auth method from configured credentials.

    A key file wins over a password. Device values override global ones.

    Raises:
        ValueError: If no username or no credential is configured, or the key
            file cannot be parsed
    """
    username = device.username or config.username
    password = device.password if device.password is not None else config.password
    key_file = device.key_file or config.key_file

    if not username:
        raise ValueError(f"No username configured for {device.host}")

    if key_file:
        try:
            pkey = load_private_key_file(key_file, passphrase=password)
        except OSError as e:
            raise ValueError(f"could not read key file {key_file}: {e}") from e
        return PublicKeyAuth(username, pkey)

    if password is not None:
        return PasswordAuth(username, password)

    raise ValueError(f"No password or key file configured for {device.host}")


class ConnectionFactory:
    """
    Create connected sessions for configured devices.
    """

    def __init__(
        self,
        config: ExporterConfig,
        auth_provider: Callable[[ExporterConfig, DeviceConfig], AuthMethod] = auth_from_config,
        session_class: type = SSHConnection
    ):
        """
        Initialize connection factory.

        Args:
            config: Exporter configuration (global defaults)
            auth_provider: Returns the auth method for a device
            session_class: Session implementation to construct
        """
        self.config = config
        self.auth_provider = auth_provider
        self.session_class = session_class

        self.logger = logging.getLogger(__name__)

    def create_session(self, device: DeviceConfig, auth: Optional[AuthMethod] = None) -> SSHConnection:
        """Construct a session for a device without connecting it"""
        resolved = self.config.resolve(device)

        if auth is None:
            auth = self.auth_provider(self.config, device)

        return self.session_class(
            host=device.host,
            port=device.port,
            auth=auth,
            config=resolved
        )

    def connect(self, device: DeviceConfig) -> SSHConnection:
        """
        Create and connect a session.

        Returns:
            Connected session; the caller must close() it

        Raises:
            TransportError, PromptTimeoutError: If the session could not be established
            ValueError: If credentials are missing
        """
        session = self.create_session(device)

        try:
            session.connect()
        except Exception as e:
            self.logger.error(f"Connection to {device.address} failed: {e}")
            raise

        return session
