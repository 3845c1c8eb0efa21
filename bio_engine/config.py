"""Configuration helpers for the bio engine service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

import os

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8081
DEFAULT_API_PREFIX = "/api/v1/bio"


def _parse_flag(raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    return str(raw).strip().lower() not in {"0", "false", "no"}


def parse_address(raw: str | None, default_port: int = DEFAULT_PORT) -> Tuple[str, int]:
    """Split a ``host:port`` string, falling back to the defaults on bad input.

    ``"[::1]:9000"`` style IPv6 literals are supported; a bare host keeps the
    default port and a bare ``":9000"`` binds all interfaces.
    """

    if not raw or not raw.strip():
        return DEFAULT_HOST, default_port
    value = raw.strip()
    host, sep, port_text = value.rpartition(":")
    if not sep or (host.count(":") and not host.startswith("[")):
        return value, default_port
    host = host.strip("[]") or DEFAULT_HOST
    try:
        port = int(port_text)
    except ValueError:
        return host, default_port
    if not 0 < port < 65536:
        return host, default_port
    return host, port


@dataclass(slots=True)
class ServerConfig:
    """Runtime settings for the HTTP boundary.

    ``BIO_ADDR`` keeps the ``host:port`` syntax used by existing deployments.
    ``CORS_ORIGINS`` is a comma separated allow-list; ``*`` (the default)
    accepts any origin.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    api_prefix: str = DEFAULT_API_PREFIX
    log_level: str = "info"
    cors_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))
    version: Optional[str] = None

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def __post_init__(self) -> None:
        prefix = "/" + self.api_prefix.strip().strip("/") if self.api_prefix.strip("/ ") else ""
        self.api_prefix = prefix
        self.log_level = (self.log_level or "info").lower()

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        prefix: str = "BIO_",
    ) -> "ServerConfig":
        """Create a configuration object from environment variables."""

        env = env or os.environ
        host, port = parse_address(env.get(f"{prefix}ADDR"))
        origins_raw = env.get("CORS_ORIGINS", "*")
        origins = tuple(origin.strip() for origin in origins_raw.split(",") if origin.strip()) or ("*",)
        return cls(
            host=host,
            port=port,
            api_prefix=env.get(f"{prefix}API_PREFIX", DEFAULT_API_PREFIX),
            log_level=env.get(f"{prefix}LOG_LEVEL", "info"),
            cors_origins=origins,
            version=env.get(f"{prefix}VERSION") or None,
        )


def _parse_ratio(raw: str | None, default: float) -> float:
    """Parse a sampling ratio, clamping it into ``[0, 1]``."""

    try:
        parsed = float(raw) if raw is not None else default
    except ValueError:
        return default
    return min(1.0, max(0.0, parsed))


@dataclass(slots=True)
class TelemetryConfig:
    """OTLP export settings for the bio engine.

    Export is off unless ``OTEL_ENABLED`` is truthy or an OTLP endpoint is
    configured; traces and metrics can then be switched off individually.
    """

    enabled: bool = False
    service_name: str = "bio-engine"
    environment: str = "development"
    exporter_endpoint: Optional[str] = None
    sampling_ratio: float = 0.1
    capture_metrics: bool = True
    capture_traces: bool = True

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        prefix: str = "OTEL_",
    ) -> "TelemetryConfig":
        env = env or os.environ
        endpoint = env.get(f"{prefix}EXPORTER_OTLP_ENDPOINT") or None
        return cls(
            enabled=_parse_flag(env.get(f"{prefix}ENABLED"), False) or endpoint is not None,
            service_name=env.get(f"{prefix}SERVICE_NAME", "bio-engine"),
            environment=env.get("DEPLOYMENT_ENV", "development"),
            exporter_endpoint=endpoint,
            sampling_ratio=_parse_ratio(env.get(f"{prefix}SAMPLING_RATIO"), 0.1),
            capture_metrics=_parse_flag(env.get(f"{prefix}CAPTURE_METRICS"), True),
            capture_traces=_parse_flag(env.get(f"{prefix}CAPTURE_TRACES"), True),
        )


DEFAULT_SERVER_CONFIG = ServerConfig.from_env()
DEFAULT_TELEMETRY_CONFIG = TelemetryConfig.from_env()
