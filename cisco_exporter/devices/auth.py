"""
Authentication Methods

Opaque auth objects handed to the session engine. The session only calls
authenticate(); it never sees how credentials were obtained.
"""

from abc import ABC, abstractmethod
from typing import IO, Optional
import io
import logging

import paramiko


logger = logging.getLogger(__name__)

# Tried in order when the key type is not known up front
KEY_CLASSES = (paramiko.Ed25519Key, paramiko.ECDSAKey, paramiko.RSAKey)


class AuthMethod(ABC):
    """Authenticates an already-negotiated transport"""

    def __init__(self, username: str):
        self.username = username

    @abstractmethod
    def authenticate(self, transport: paramiko.Transport):
        """
        Authenticate on the transport.

        Raises:
            paramiko.AuthenticationException: If the device rejects the credentials
        """


class PasswordAuth(AuthMethod):
    """Password authentication"""

    def __init__(self, username: str, password: str):
        super().__init__(username)
        self.password = password

    def authenticate(self, transport: paramiko.Transport):
        transport.auth_password(self.username, self.password)

    def __repr__(self):
        return f"PasswordAuth(username={self.username!r})"


class PublicKeyAuth(AuthMethod):
    """Private key authentication"""

    def __init__(self, username: str, pkey: paramiko.PKey):
        super().__init__(username)
        self.pkey = pkey

    def authenticate(self, transport: paramiko.Transport):
        transport.auth_publickey(self.username, self.pkey)

    def __repr__(self):
        return f"PublicKeyAuth(username={self.username!r}, key={self.pkey.get_name()})"


def load_private_key(reader: IO[str], passphrase: Optional[str] = None) -> paramiko.PKey:
    """
    Parse a PEM/OpenSSH private key of any supported type.

    Args:
        reader: Text stream holding the key
        passphrase: Passphrase for encrypted keys

    Returns:
        Parsed key

    Raises:
        ValueError: If the key cannot be read or parsed
    """
    try:
        data = reader.read()
    except OSError as e:
        raise ValueError(f"could not read from reader: {e}") from e

    for key_class in KEY_CLASSES:
        try:
            return key_class.from_private_key(io.StringIO(data), password=passphrase)
        except paramiko.PasswordRequiredException:
            raise ValueError("could not parse private key: passphrase required") from None
        except (paramiko.SSHException, ValueError):
            continue

    raise ValueError("could not parse private key")


def load_private_key_file(path: str, passphrase: Optional[str] = None) -> paramiko.PKey:
    """Load a private key from a file path"""
    with open(path, 'r') as f:
        return load_private_key(f, passphrase)
