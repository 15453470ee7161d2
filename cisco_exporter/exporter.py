"""
Cisco Exporter

Custom prometheus_client collector that scrapes every configured device on
each /metrics request. Devices are scraped in parallel, each over its own
session, and every session is closed once its scrape ends.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterator, List, Optional
import logging
import time

from cisco_exporter.collectors import CollectorFactory, RPCCollector
from cisco_exporter.config.exporter_config import DeviceConfig, ExporterConfig
from cisco_exporter.devices import ConnectionFactory, ConnectorError
from cisco_exporter.monitoring.metrics import MetricRegistry, MetricSample
from cisco_exporter.rpc import RPCClient


class CiscoExporter:
    """Scrape orchestrator registered on the MetricRegistry"""

    def __init__(
        self,
        config: ExporterConfig,
        metrics: MetricRegistry,
        connection_factory: Optional[ConnectionFactory] = None,
        collectors: Optional[Dict[str, RPCCollector]] = None,
        max_workers: int = 4
    ):
        """
        Initialize exporter.

        Args:
            config: Exporter configuration
            metrics: Process-wide metric registry
            connection_factory: Session factory (built from config if omitted)
            collectors: Collectors by feature name (all registered if omitted)
            max_workers: Devices scraped concurrently
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {max_workers}")

        self.config = config
        self.metrics = metrics
        self.connection_factory = connection_factory or ConnectionFactory(config)
        self.collectors = collectors if collectors is not None else CollectorFactory.create_all(metrics)
        self.max_workers = max_workers

        self.logger = logging.getLogger(__name__)

    def describe(self) -> list:
        # Metric names depend on device output; skip describe-time collection
        return []

    def collect(self) -> Iterator:
        """Scrape all devices and yield metric families"""
        devices = self.config.devices
        if not devices:
            return

        workers = min(self.max_workers, len(devices))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scrape") as pool:
            results = list(pool.map(self.scrape_device, devices))

        samples = [sample for result in results for sample in result]
        yield from self.metrics.build_families(samples)

    def scrape_device(self, device: DeviceConfig) -> List[MetricSample]:
        """
        Scrape one device.

        Never raises for device failures: a device that cannot be reached
        or identified reports up=0.
        """
        target = device.host
        start = time.monotonic()
        samples: List[MetricSample] = []
        up = 0

        try:
            session = self.connection_factory.connect(device)
        except (ConnectorError, ValueError) as e:
            self.logger.error(f"Could not connect to {device.address}: {e}")
            self.metrics.connection_errors.labels(
                target=target, error_type=type(e).__name__
            ).inc()
        else:
            try:
                client = RPCClient(session)
                client.identify()
                up = 1
                samples.extend(self._run_collectors(client, device))
            except (ConnectorError, ValueError) as e:
                self.logger.error(f"Could not identify {device.address}: {e}")
            finally:
                session.close()

        samples.append(MetricSample(self.metrics.up.name, (target,), float(up)))
        samples.append(MetricSample(
            self.metrics.scrape_duration.name, (target,), time.monotonic() - start
        ))
        return samples

    def _run_collectors(self, client: RPCClient, device: DeviceConfig) -> List[MetricSample]:
        target = device.host
        samples = []

        for name in CollectorFactory.enabled(self.config.features_for(device)):
            collector = self.collectors.get(name)
            if collector is None:
                continue

            start = time.monotonic()
            try:
                samples.extend(collector.collect(client, [target]))
            except (ConnectorError, ValueError) as e:
                self.logger.error(f"Collector {name} failed on {target}: {e}")
                self.metrics.collector_errors.labels(target=target, collector=name).inc()

            samples.append(MetricSample(
                self.metrics.collector_duration.name,
                (target, name),
                time.monotonic() - start
            ))

        return samples
