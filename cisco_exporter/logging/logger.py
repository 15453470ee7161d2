"""
cisco_exporter Structured Logging

JSON-formatted structured logging for all exporter components.
Every log entry includes timestamp, level, component, logger and message.
"""

import logging
import logging.config
import json
import os
from datetime import datetime, timezone
from typing import Optional

import yaml


class StructuredFormatter(logging.Formatter):
    """Custom formatter that outputs JSON-structured log entries"""

    def __init__(self, component: str = "exporter"):
        super().__init__()
        self.component = component

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": self.component,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add any extra fields from the record
        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data)


def configure_logging(
    config_path: Optional[str] = None,
    default_level: int = logging.INFO,
    structured: bool = True
) -> bool:
    """
    Configure logging from a YAML file. Falls back to a console handler on
    the root logger when no usable file is given.

    Args:
        config_path: Path to YAML logging config (logging.config.dictConfig schema)
        default_level: Level for the fallback config
        structured: Use StructuredFormatter in the fallback config

    Returns:
        True if YAML config loaded, False otherwise
    """
    if config_path and os.path.isfile(config_path):
        try:
            with open(config_path, "r", encoding="utf-8") as handle:
                config = yaml.safe_load(handle)

            if not config:
                raise ValueError("Logging config is empty")

            for handler in config.get("handlers", {}).values():
                filename = handler.get("filename")
                if filename:
                    os.makedirs(os.path.dirname(filename) or ".", exist_ok=True)

            logging.config.dictConfig(config)
            return True
        except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
            logging.basicConfig(level=default_level)
            logging.getLogger(__name__).warning(
                f"Could not load logging config {config_path}: {e}"
            )
            return False

    handler = logging.StreamHandler()
    if structured:
        handler.setFormatter(StructuredFormatter())
    logging.basicConfig(level=default_level, handlers=[handler])

    # paramiko logs every negotiation step at INFO
    logging.getLogger("paramiko").setLevel(max(default_level, logging.WARNING))
    return False
