"""
Collectors Module

Turn show-command output into Prometheus samples.

Usage:
    from cisco_exporter.collectors import CollectorFactory

    collectors = CollectorFactory.create_all(metrics)
    samples = collectors['mactable'].collect(client, [target])
"""

from .base import RPCCollector
from .factory import CollectorFactory
from .mactable import MactableCollector

__all__ = [
    'RPCCollector',
    'CollectorFactory',
    'MactableCollector',
]
