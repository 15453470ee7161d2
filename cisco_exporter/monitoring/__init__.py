"""
Monitoring utilities for cisco_exporter.
"""

from .metrics import (
    MetricDescriptor,
    MetricRegistry,
    MetricSample,
)

__all__ = [
    "MetricDescriptor",
    "MetricRegistry",
    "MetricSample",
]
