"""
cisco_exporter: Prometheus exporter for Cisco devices over interactive SSH

Scrapes operational metrics by running show commands in a device shell and
parsing the text output.
"""

__version__ = "0.3.0"

__all__ = [
    '__version__',
    'collectors',
    'config',
    'devices',
    'logging',
    'monitoring',
    'rpc',
    'utils'
]
