"""
Configuration Module

Exporter settings: global defaults, per-device overrides, and the resolved
settings handed to each SSH session.
"""

from cisco_exporter.config.exporter_config import (
    DeviceConfig,
    ExporterConfig,
    ResolvedConfig,
    load_config,
    resolve_config,
)

__all__ = [
    "DeviceConfig",
    "ExporterConfig",
    "ResolvedConfig",
    "load_config",
    "resolve_config",
]
