"""
Collector Factory

Creates collector instances by feature name.
"""

from typing import Dict, List
import logging

from cisco_exporter.monitoring.metrics import MetricRegistry
from .base import RPCCollector
from .mactable import MactableCollector


logger = logging.getLogger(__name__)


class CollectorFactory:
    """Factory for creating collectors from feature switches"""

    # Registry: feature name -> Collector class
    COLLECTORS = {
        'mactable': MactableCollector,
    }

    @classmethod
    def create_collector(cls, name: str, metrics: MetricRegistry) -> RPCCollector:
        """
        Create a collector by feature name.

        Raises:
            ValueError: If no collector is registered under that name
        """
        collector_class = cls.COLLECTORS.get(name.lower())

        if not collector_class:
            available = ', '.join(sorted(cls.COLLECTORS))
            raise ValueError(f"No collector found for {name}. Available: {available}")

        return collector_class(metrics)

    @classmethod
    def create_all(cls, metrics: MetricRegistry) -> Dict[str, RPCCollector]:
        """One instance of every registered collector, keyed by name"""
        return {name: cls.create_collector(name, metrics) for name in cls.COLLECTORS}

    @classmethod
    def enabled(cls, features: Dict[str, bool]) -> List[str]:
        """Names of registered collectors switched on in a feature map"""
        unknown = [name for name in features if name.lower() not in cls.COLLECTORS]
        for name in unknown:
            logger.warning(f"Ignoring unknown feature {name}")

        return [name for name in cls.COLLECTORS if features.get(name)]

    @classmethod
    def register_collector(cls, name: str, collector_class: type):
        """
        Register custom collector.

        Allows users to add support for new metrics.
        """
        cls.COLLECTORS[name.lower()] = collector_class

    @classmethod
    def list_collectors(cls) -> list:
        """List all registered collector names"""
        return list(cls.COLLECTORS.keys())
