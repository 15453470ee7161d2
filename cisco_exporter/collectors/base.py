"""
Base Collector Interface

Defines the contract that all RPC collectors must implement.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence
import logging

from cisco_exporter.monitoring.metrics import MetricRegistry, MetricSample
from cisco_exporter.rpc.client import RPCClient


class RPCCollector(ABC):
    """
    Base class for all collectors.

    A collector runs show commands through an RPCClient, parses the text
    and returns samples for the metrics it described on the registry.
    Collectors know nothing about marker framing or echo filtering.
    """

    NAME: str = "generic"

    def __init__(self, metrics: MetricRegistry):
        """
        Initialize collector and describe its metrics.

        Args:
            metrics: Process-wide metric registry
        """
        self.metrics = metrics
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.describe()

    def name(self) -> str:
        return self.NAME

    @abstractmethod
    def describe(self):
        """Describe this collector's metrics on self.metrics"""

    @abstractmethod
    def collect(self, client: RPCClient, label_values: Sequence[str]) -> List[MetricSample]:
        """
        Collect metrics from one device.

        Args:
            client: Connected client with os_type set
            label_values: Leading label values (the target)

        Returns:
            Samples for the described metrics

        Raises:
            Any connector error, or ValueError when output cannot be parsed
        """
