"""
cisco_exporter Main Entry Point

Usage:
    # Devices from a config file
    cisco-exporter --config.file /etc/cisco_exporter/config.yml

    # Ad-hoc targets, password from CISCO_EXPORTER_PASSWORD
    cisco-exporter --ssh.targets 10.0.0.1,10.0.0.2 --ssh.user monitor

    # Older firmware that only offers CBC ciphers / SHA1 key exchange
    cisco-exporter --ssh.targets 10.0.0.1 --ssh.user monitor --legacy.ciphers
"""

import argparse
import logging
import os
import signal
import sys
import threading
from typing import List, Optional, Tuple

import yaml

from cisco_exporter import __version__
from cisco_exporter.config.exporter_config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_TIMEOUT,
    DeviceConfig,
    ExporterConfig,
    load_config,
)
from cisco_exporter.exporter import CiscoExporter
from cisco_exporter.logging.logger import configure_logging
from cisco_exporter.monitoring.metrics import MetricRegistry


PASSWORD_ENV = "CISCO_EXPORTER_PASSWORD"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog='cisco-exporter',
        description='Prometheus exporter for Cisco devices over SSH',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'cisco_exporter {__version__}'
    )
    parser.add_argument(
        '--config.file',
        dest='config_file',
        help='Path to YAML config file with devices and defaults'
    )
    parser.add_argument(
        '--web.listen-address',
        dest='listen_address',
        default=':9362',
        help='Address to serve metrics on (default: :9362)'
    )

    # Used only when no config file is given
    parser.add_argument(
        '--ssh.targets',
        dest='targets',
        default='',
        help='Comma separated hosts to scrape (host or host:port)'
    )
    parser.add_argument(
        '--ssh.user',
        dest='username',
        help='Username for SSH login'
    )
    parser.add_argument(
        '--ssh.keyfile',
        dest='key_file',
        help='Private key file for SSH login'
    )

    # Override global defaults
    parser.add_argument(
        '--ssh.timeout',
        dest='timeout',
        type=float,
        help=f'Timeout in seconds per command (default: {DEFAULT_TIMEOUT})'
    )
    parser.add_argument(
        '--ssh.batch-size',
        dest='batch_size',
        type=int,
        help=f'Bytes read from the shell per receive call (default: {DEFAULT_BATCH_SIZE})'
    )
    parser.add_argument(
        '--legacy.ciphers',
        dest='legacy_ciphers',
        action='store_true',
        default=None,
        help='Allow legacy CBC ciphers, SHA1 key exchange and ssh-rsa/ssh-dss host keys'
    )

    # Operational
    parser.add_argument(
        '--workers',
        type=int,
        default=4,
        help='Devices scraped in parallel (default: 4)'
    )
    parser.add_argument(
        '--log-config',
        help='YAML logging config (logging.config.dictConfig schema)'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


def parse_listen_address(address: str) -> Tuple[str, int]:
    """
    Split "host:port" (host optional) into its parts.

    Raises:
        ValueError: If the port is missing or not a number
    """
    host, sep, port = address.rpartition(':')
    if not sep or not port.isdigit():
        raise ValueError(f"Invalid listen address: {address}")
    return host or "0.0.0.0", int(port)


def parse_target(target: str) -> DeviceConfig:
    """Build a device entry from "host" or "host:port" """
    host, sep, port = target.strip().rpartition(':')
    if sep and port.isdigit():
        return DeviceConfig(host=host, port=int(port))
    return DeviceConfig(host=target.strip())


def build_config(args: argparse.Namespace) -> ExporterConfig:
    """
    Load the config file (or build one from --ssh.targets) and apply CLI
    overrides to the global defaults.

    Raises:
        FileNotFoundError, ValueError, yaml.YAMLError: On bad configuration
    """
    if args.config_file:
        config = load_config(args.config_file)
    else:
        targets = [t for t in args.targets.split(',') if t.strip()]
        if not targets:
            raise ValueError("Either --config.file or --ssh.targets is required")
        config = ExporterConfig(devices=[parse_target(t) for t in targets])

    if args.username:
        config.username = args.username
    if args.key_file:
        config.key_file = args.key_file
    if config.password is None and os.environ.get(PASSWORD_ENV):
        config.password = os.environ[PASSWORD_ENV]

    if args.timeout is not None:
        if args.timeout <= 0:
            raise ValueError(f"--ssh.timeout must be positive, got {args.timeout}")
        config.timeout = args.timeout
    if args.batch_size is not None:
        if args.batch_size < 1:
            raise ValueError(f"--ssh.batch-size must be positive, got {args.batch_size}")
        config.batch_size = args.batch_size
    if args.legacy_ciphers is not None:
        config.legacy_ciphers = args.legacy_ciphers

    return config


def main(argv: Optional[List[str]] = None):
    """Main entry point"""
    args = parse_args(argv)

    log_level = logging.DEBUG if args.debug else logging.INFO
    configure_logging(args.log_config, default_level=log_level)
    logger = logging.getLogger(__name__)

    try:
        config = build_config(args)
        host, port = parse_listen_address(args.listen_address)
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in configuration file: {e}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    metrics = MetricRegistry()
    exporter = CiscoExporter(config, metrics, max_workers=args.workers)
    metrics.register_collector(exporter)

    logger.info(
        f"cisco_exporter v{__version__} serving {len(config.devices)} device(s) "
        f"on http://{host}:{port}/metrics"
    )
    metrics.start_server(port, addr=host)

    stop = threading.Event()

    def signal_handler(signum, frame):
        logger.info("Shutting down...")
        stop.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    stop.wait()


if __name__ == "__main__":
    main()
