"""Configuration management for the restarter."""

import math
import os
import re
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from restarter.core.exceptions import ConfigError

_DURATION_RE = re.compile(r"(?:(?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|µs|ms|s|m|h))+")
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str | float | int) -> float:
    """Parse a Go-style duration into seconds.

    Accepts strings such as "10m", "1m30s", "500ms" or a bare number of seconds.

    Args:
        value: Duration string or number of seconds

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the value is not a valid non-negative duration
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")

    if isinstance(value, int | float):
        seconds = float(value)
    else:
        text = str(value).strip()
        if not text:
            raise ValueError("empty duration")

        try:
            seconds = float(text)
        except ValueError:
            if not _DURATION_RE.fullmatch(text):
                raise ValueError(f"invalid duration: {value!r}") from None
            seconds = sum(
                float(number) * _UNIT_SECONDS[unit]
                for number, unit in _DURATION_PART_RE.findall(text)
            )

    if not math.isfinite(seconds):
        raise ValueError(f"duration must be finite: {value!r}")
    if seconds < 0:
        raise ValueError(f"duration must not be negative: {value!r}")
    return seconds


def format_duration(seconds: float) -> str:
    """Render seconds as a Go-style duration (e.g. 600 -> "10m0s")."""
    if seconds == 0:
        return "0s"
    if seconds < 1:
        return f"{seconds * 1000:g}ms"

    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    text = f"{secs:g}s"
    if hours or minutes:
        text = f"{int(minutes)}m{text}"
    if hours:
        text = f"{int(hours)}h{text}"
    return text


def default_kubeconfig_path() -> str:
    """Return <HOME>/.kube/config."""
    home = os.environ.get("HOME") or str(Path.home())
    return str(Path(home) / ".kube" / "config")


class Driver(str, Enum):
    """How restarts and deletion waits are carried out."""

    API = "api"
    KUBECTL = "kubectl"


class ClusterConfig(BaseModel):
    """Cluster access configuration."""

    kubeconfig: str = Field(default_factory=default_kubeconfig_path)
    context: str | None = None


class LinkerdConfig(BaseModel):
    """Where to find the desired proxy version and how pods are labelled."""

    control_plane_namespace: str = "linkerd"
    proxy_injector_deployment: str = "linkerd-proxy-injector"
    version_label: str = "app.kubernetes.io/version"
    created_by_annotation: str = "linkerd.io/created-by"
    created_by_prefix: str = "linkerd/proxy-injector"
    app_label: str = "app"
    namespace: str = "default"


class RolloutConfig(BaseModel):
    """Rollout pacing configuration. Durations are stored in seconds."""

    timeout: float = 600.0
    sleep: float = 60.0
    poll_interval: float = 2.0
    driver: Driver = Driver.API
    assume_yes: bool = False

    @field_validator("timeout", "sleep", "poll_interval", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> float:
        return parse_duration(value)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"
    output: str = "stderr"


class RestarterConfig(BaseModel):
    """Main restarter configuration, built once at startup."""

    cluster: ClusterConfig = Field(default_factory=ClusterConfig)
    linkerd: LinkerdConfig = Field(default_factory=LinkerdConfig)
    rollout: RolloutConfig = Field(default_factory=RolloutConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: str | Path) -> "RestarterConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            RestarterConfig instance

        Raises:
            ConfigError: If file cannot be loaded or parsed
        """
        config_path = Path(path).expanduser()

        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
        except Exception as e:
            raise ConfigError(f"Failed to load configuration: {e}") from e

        try:
            return cls(**data)
        except Exception as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def with_overrides(self, overrides: dict[str, dict[str, Any]]) -> "RestarterConfig":
        """Return a copy with per-section overrides applied.

        ``None`` values are ignored so unset command-line flags keep file values.

        Args:
            overrides: Mapping of section name to field values

        Returns:
            New RestarterConfig instance

        Raises:
            ConfigError: If an override produces an invalid configuration
        """
        data = self.model_dump()
        for section, values in overrides.items():
            data[section].update({k: v for k, v in values.items() if v is not None})

        try:
            return self.__class__(**data)
        except Exception as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

