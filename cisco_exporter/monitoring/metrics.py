"""
Prometheus metrics for cisco_exporter.

MetricRegistry is created once at process start and passed to the exporter
and to every collector. Collectors describe their metrics on it and report
plain samples; the registry turns samples into metric families at scrape time.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import threading

from prometheus_client import CollectorRegistry, Counter, start_http_server
from prometheus_client.core import GaugeMetricFamily


METRIC_PREFIX = "cisco_"


@dataclass(frozen=True)
class MetricDescriptor:
    """Name, help text and label names of a gauge emitted at scrape time"""
    name: str
    documentation: str
    labels: Tuple[str, ...]

    def new_family(self) -> GaugeMetricFamily:
        return GaugeMetricFamily(self.name, self.documentation, labels=list(self.labels))


@dataclass(frozen=True)
class MetricSample:
    """One observed value for a described metric"""
    name: str
    label_values: Tuple[str, ...]
    value: float


class MetricRegistry:
    """
    Explicit home for every metric the exporter emits.

    Holds the prometheus_client CollectorRegistry served on /metrics, the
    scrape-time gauge descriptors, and the exporter's own counters.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None, prefix: str = METRIC_PREFIX):
        self.registry = registry if registry is not None else CollectorRegistry()
        self.prefix = prefix

        self._descriptors: Dict[str, MetricDescriptor] = {}
        self._lock = threading.Lock()
        self._server_started = False

        self.up = self.describe(
            "up", "Scrape of target was successful", ["target"]
        )
        self.scrape_duration = self.describe(
            "scrape_duration_seconds", "Duration of a scrape by target", ["target"]
        )
        self.collector_duration = self.describe(
            "collector_duration_seconds", "Duration of a collector scrape for one target",
            ["target", "collector"]
        )

        self.collector_errors = Counter(
            f"{prefix}collector_errors",
            "Total collector failures",
            ["target", "collector"],
            registry=self.registry
        )
        self.connection_errors = Counter(
            f"{prefix}connection_errors",
            "Total failed connection attempts",
            ["target", "error_type"],
            registry=self.registry
        )

    def describe(self, name: str, documentation: str, labels: Sequence[str]) -> MetricDescriptor:
        """
        Register a gauge descriptor, or return the existing one.

        Args:
            name: Metric name without the exporter prefix
            documentation: Help text
            labels: Label names

        Raises:
            ValueError: If the name is already described with different labels
        """
        descriptor = MetricDescriptor(self.prefix + name, documentation, tuple(labels))

        with self._lock:
            existing = self._descriptors.get(descriptor.name)
            if existing is None:
                self._descriptors[descriptor.name] = descriptor
                return descriptor

        if existing.labels != descriptor.labels:
            raise ValueError(
                f"Metric {descriptor.name} already described with labels {existing.labels}"
            )
        return existing

    def get(self, name: str) -> MetricDescriptor:
        """Look up a descriptor by full metric name"""
        with self._lock:
            return self._descriptors[name]

    def build_families(self, samples: Iterable[MetricSample]) -> List[GaugeMetricFamily]:
        """
        Group samples into gauge families.

        Raises:
            ValueError: If a sample refers to an undescribed metric or has the
                wrong number of label values
        """
        families: Dict[str, GaugeMetricFamily] = {}

        for sample in samples:
            try:
                descriptor = self.get(sample.name)
            except KeyError:
                raise ValueError(f"Metric {sample.name} was never described") from None

            if len(sample.label_values) != len(descriptor.labels):
                raise ValueError(
                    f"Metric {sample.name} expects labels {descriptor.labels}, "
                    f"got {sample.label_values}"
                )

            family = families.get(sample.name)
            if family is None:
                family = families[sample.name] = descriptor.new_family()
            family.add_metric(list(sample.label_values), sample.value)

        return list(families.values())

    def register_collector(self, collector):
        """Register a custom prometheus_client collector on this registry"""
        self.registry.register(collector)

    def start_server(self, port: int = 9362, addr: str = "0.0.0.0"):
        """Serve this registry over HTTP if not already running."""
        if self._server_started:
            return

        start_http_server(port, addr=addr, registry=self.registry)
        self._server_started = True
