"""
Configuration management for mfictl.

Loads configuration from YAML files with environment variable overrides.
Credentials are never read from or written to configuration files.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml


# Default configuration paths
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "mfictl"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
SYSTEM_CONFIG_FILE = Path("/etc/mfictl/config.yaml")


@dataclass
class DeviceConfig:
    """Device connection configuration."""

    scheme: str = "http"
    default_port: int = 1
    timeout: Optional[float] = None


@dataclass
class Config:
    """Main configuration for mfictl."""

    device: DeviceConfig = field(default_factory=DeviceConfig)
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        device_data = data.get("device") or {}
        if not isinstance(device_data, dict):
            device_data = {}

        device = DeviceConfig(
            scheme=str(device_data.get("scheme") or "http"),
            default_port=_as_number(int, device_data.get("default_port"), 1),
            timeout=_as_number(float, device_data.get("timeout"), None),
        )

        return cls(
            device=device,
            log_level=str(data.get("log_level") or "WARNING"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert Config to dictionary."""
        return {
            "device": {
                "scheme": self.device.scheme,
                "default_port": self.device.default_port,
                "timeout": self.device.timeout,
            },
            "log_level": self.log_level,
        }


def _as_number(kind, value, default):
    """Convert a config value with int or float, ignoring invalid values."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return kind(value)
    except (TypeError, ValueError):
        return default


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from YAML file.

    Search order:
    1. Explicit path if provided
    2. MFICTL_CONFIG environment variable
    3. ~/.config/mfictl/config.yaml
    4. /etc/mfictl/config.yaml
    5. Default values

    Environment variable overrides:
    - MFICTL_SCHEME: Override device.scheme
    - MFICTL_DEFAULT_PORT: Override device.default_port
    - MFICTL_TIMEOUT: Override device.timeout
    - MFICTL_LOG_LEVEL: Override log_level

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Loaded configuration
    """
    if config_path:
        paths_to_try = [config_path]
    else:
        env_path = os.environ.get("MFICTL_CONFIG")
        paths_to_try = []
        if env_path:
            paths_to_try.append(Path(env_path))
        paths_to_try.extend([DEFAULT_CONFIG_FILE, SYSTEM_CONFIG_FILE])

    config_data = {}
    for path in paths_to_try:
        if path.exists():
            try:
                with open(path) as f:
                    config_data = yaml.safe_load(f) or {}
                break
            except (OSError, yaml.YAMLError):
                continue

    if not isinstance(config_data, dict):
        config_data = {}

    config = Config.from_dict(config_data)
    return _apply_env_overrides(config)


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    if "MFICTL_SCHEME" in os.environ:
        config.device.scheme = os.environ["MFICTL_SCHEME"]

    if "MFICTL_DEFAULT_PORT" in os.environ:
        try:
            config.device.default_port = int(os.environ["MFICTL_DEFAULT_PORT"])
        except ValueError:
            pass

    if "MFICTL_TIMEOUT" in os.environ:
        try:
            config.device.timeout = float(os.environ["MFICTL_TIMEOUT"])
        except ValueError:
            pass

    if "MFICTL_LOG_LEVEL" in os.environ:
        config.log_level = os.environ["MFICTL_LOG_LEVEL"]

    return config


def save_config(config: Config, path: Path) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration to save
        path: Path to save to
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        f.write("# mfictl configuration\n")
        f.write("# Credentials are passed on the command line, never stored here\n\n")
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)

