"""
RPC Module

Device command client with OS family detection.
"""

from .client import IOS, IOSXE, NXOS, RPCClient, detect_os_type

__all__ = ['IOS', 'IOSXE', 'NXOS', 'RPCClient', 'detect_os_type']
