"""
Exporter Configuration

Global defaults and per-device overrides, loaded from YAML. The session
engine only ever sees a ResolvedConfig: each value is the device override
when one is set, otherwise the global default.

Example:
    timeout: 5
    batch_size: 10000
    legacy_ciphers: false
    username: monitor
    key_file: /etc/cisco_exporter/id_ed25519
    features:
      mactable: true
    devices:
      - host: 10.0.0.1
      - host: 10.0.0.2
        port: 2222
        legacy_ciphers: true
        timeout: 10
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cisco_exporter.utils.config_loader import ConfigLoader


DEFAULT_TIMEOUT = 5
DEFAULT_BATCH_SIZE = 10000
DEFAULT_PORT = 22
DEFAULT_FEATURES = {"mactable": True}


@dataclass(frozen=True)
class ResolvedConfig:
    """Effective per-session settings"""
    timeout: float
    legacy_ciphers: bool
    batch_size: int


@dataclass
class DeviceConfig:
    """One device; None means "use the global value" """
    host: str
    port: int = DEFAULT_PORT
    timeout: Optional[float] = None
    legacy_ciphers: Optional[bool] = None
    batch_size: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = None
    key_file: Optional[str] = None
    features: Dict[str, bool] = field(default_factory=dict)

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeviceConfig":
        if not isinstance(data, dict):
            raise ValueError(f"Device entry must be a mapping, got {data!r}")
        if not data.get('host'):
            raise ValueError(f"Device entry is missing 'host': {data!r}")

        return cls(
            host=str(data['host']),
            port=_as_int(data.get('port', DEFAULT_PORT), 'port'),
            timeout=_optional(data.get('timeout'), _as_float, 'timeout'),
            legacy_ciphers=_optional(data.get('legacy_ciphers'), _as_bool, 'legacy_ciphers'),
            batch_size=_optional(data.get('batch_size'), _as_int, 'batch_size'),
            username=data.get('username'),
            password=data.get('password'),
            key_file=data.get('key_file'),
            features=_as_features(data.get('features')),
        )


@dataclass
class ExporterConfig:
    """Global settings and the device list"""
    timeout: float = DEFAULT_TIMEOUT
    legacy_ciphers: bool = False
    batch_size: int = DEFAULT_BATCH_SIZE
    username: Optional[str] = None
    password: Optional[str] = None
    key_file: Optional[str] = None
    features: Dict[str, bool] = field(default_factory=lambda: dict(DEFAULT_FEATURES))
    devices: List[DeviceConfig] = field(default_factory=list)

    def __post_init__(self):
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExporterConfig":
        features = dict(DEFAULT_FEATURES)
        features.update(_as_features(data.get('features')))

        devices = data.get('devices') or []
        if not isinstance(devices, list):
            raise ValueError("'devices' must be a list")

        return cls(
            timeout=_as_float(data.get('timeout', DEFAULT_TIMEOUT), 'timeout'),
            legacy_ciphers=_as_bool(data.get('legacy_ciphers', False), 'legacy_ciphers'),
            batch_size=_as_int(data.get('batch_size', DEFAULT_BATCH_SIZE), 'batch_size'),
            username=data.get('username'),
            password=data.get('password'),
            key_file=data.get('key_file'),
            features=features,
            devices=[DeviceConfig.from_dict(d) for d in devices],
        )

    def resolve(self, device: DeviceConfig) -> ResolvedConfig:
        """Effective session settings for a device"""
        return resolve_config(self, device)

    def features_for(self, device: DeviceConfig) -> Dict[str, bool]:
        """Global feature switches with the device's switches applied on top"""
        features = dict(self.features)
        features.update(device.features)
        return features


def resolve_config(global_config: ExporterConfig, device: DeviceConfig) -> ResolvedConfig:
    """Prefer the device override for each setting, else the global default"""
    return ResolvedConfig(
        timeout=device.timeout if device.timeout is not None else global_config.timeout,
        legacy_ciphers=(
            device.legacy_ciphers if device.legacy_ciphers is not None
            else global_config.legacy_ciphers
        ),
        batch_size=device.batch_size if device.batch_size is not None else global_config.batch_size,
    )


def load_config(config_path: str, env_prefix: str = "CISCO_EXPORTER_") -> ExporterConfig:
    """
    Load exporter configuration from YAML with environment overrides.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If a value has the wrong type
        yaml.YAMLError: If YAML is invalid
    """
    data = ConfigLoader.load_with_env_override(config_path, env_prefix)
    return ExporterConfig.from_dict(data)


def _optional(value, convert, name):
    return None if value is None else convert(value, name)


def _as_int(value, name) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def _as_float(value, name) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def _as_bool(value, name) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('true', 'yes', '1', 'on'):
            return True
        if lowered in ('false', 'no', '0', 'off'):
            return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _as_features(value) -> Dict[str, bool]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"features must be a mapping, got {value!r}")
    return {str(k): _as_bool(v, f"features.{k}") for k, v in value.items()}
