"""
SSH Algorithm Selection

Legacy-cipher mode widens the negotiable cipher, key-exchange and host-key
sets so older firmware can still be reached. Legacy entries are appended
after the transport's defaults; the default sets are never reordered or
narrowed.
"""

from typing import Iterable, Tuple
import logging

import paramiko


logger = logging.getLogger(__name__)

LEGACY_CIPHERS = ("aes128-cbc", "3des-cbc")
LEGACY_KEX = ("diffie-hellman-group1-sha1", "diffie-hellman-group14-sha1")
LEGACY_HOST_KEYS = ("ssh-rsa", "ssh-dss")


def widen_algorithms(
    defaults: Iterable[str],
    legacy: Iterable[str],
    supported: Iterable[str]
) -> Tuple[str, ...]:
    """
    Append legacy algorithms to a default preference list.

    Args:
        defaults: Current preference list, kept in order
        legacy: Algorithms to add at the end
        supported: Algorithms the installed transport implements. Legacy
            names outside this set are skipped since the transport would
            reject them.

    Returns:
        defaults followed by the supported legacy names not already present
    """
    result = list(defaults)
    supported = set(supported)

    for name in legacy:
        if name in result:
            continue
        if name not in supported:
            logger.debug(f"Legacy algorithm {name} not available in this paramiko build")
            continue
        result.append(name)

    return tuple(result)


def apply_legacy_algorithms(transport: paramiko.Transport) -> paramiko.SecurityOptions:
    """
    Enable legacy ciphers, key exchanges and host-key algorithms on a
    transport that has not started negotiating yet.

    Returns:
        The transport's updated security options
    """
    options = transport.get_security_options()

    options.ciphers = widen_algorithms(
        options.ciphers, LEGACY_CIPHERS, transport._cipher_info.keys()
    )
    options.kex = widen_algorithms(
        options.kex, LEGACY_KEX, transport._kex_info.keys()
    )
    options.key_types = widen_algorithms(
        options.key_types, LEGACY_HOST_KEYS, transport._key_info.keys()
    )

    return options
