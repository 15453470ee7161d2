"""
cisco_exporter Logging Module

Provides structured JSON logging.
"""

from .logger import configure_logging, StructuredFormatter

__all__ = ['configure_logging', 'StructuredFormatter']
