"""Configuration module — frozen dataclass loaded from YAML, env vars and overrides."""

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Callable, Optional

import yaml

logger = logging.getLogger(__name__)

INGEST_PATH = "/api/diagnostics/ingest"

EVICTION_POLICIES = ("oldest", "newest")

# Upper bound on flush_interval; larger values are almost always milliseconds.
MAX_FLUSH_INTERVAL = 600.0

# Keys accepted under ``aliases:`` in the YAML file, mapped to config fields.
ALIAS_KEYS = {
    "assembly": "assembly_field",
    "type": "type_field",
    "code": "code_field",
    "group": "group_field",
    "message": "message_field",
    "exception": "exception_field",
    "metadata": "metadata_field",
    "trace_name": "trace_name_field",
    "trace_data": "trace_data_field",
    "tags": "tags_field",
    "ignore": "ignore_field",
}

_ENV_VARS = {
    "endpoint": ("DIAGNOSTICS_ENDPOINT", str),
    "environment": ("DIAGNOSTICS_ENVIRONMENT", str),
    "name": ("DIAGNOSTICS_NAME", str),
    "port": ("DIAGNOSTICS_PORT", int),
    "flush_interval": ("DIAGNOSTICS_FLUSH_INTERVAL", float),
    "buffer_size": ("DIAGNOSTICS_BUFFER_SIZE", int),
    "eviction": ("DIAGNOSTICS_EVICTION", str),
    "application": ("DIAGNOSTICS_APPLICATION", str),
}


class ConfigError(ValueError):
    """Raised when a required option is missing or an option is invalid."""


@dataclass(frozen=True)
class SinkConfig:
    """Sink options. ``flush_interval`` is in seconds, not milliseconds."""

    endpoint: Optional[str] = None
    environment: Optional[str] = None
    name: str = "diagnostics"
    port: int = 80
    flush_interval: float = 5.0
    buffer_size: int = 5000
    eviction: str = "oldest"

    machine: Optional[str] = None
    application: Optional[str] = None
    process_name: Optional[str] = None

    assembly_field: tuple[str, ...] = ("assembly", "assemblyName")
    type_field: tuple[str, ...] = ("type", "typeName")
    code_field: tuple[str, ...] = ("code",)
    group_field: tuple[str, ...] = ("group", "groupName")
    message_field: tuple[str, ...] = ("message", "msg")
    exception_field: tuple[str, ...] = ("exception",)
    metadata_field: tuple[str, ...] = ("metadata",)
    trace_name_field: tuple[str, ...] = ("traceName", "name")
    trace_data_field: tuple[str, ...] = ("traceData", "data")
    tags_field: tuple[str, ...] = ("traceTags", "tags")
    ignore_field: tuple[str, ...] = ()

    group_resolver: Optional[Callable[[Any], Optional[str]]] = None

    def __post_init__(self):
        if not self.endpoint:
            raise ConfigError("Missing required option: `endpoint`")
        if not self.environment:
            raise ConfigError("Missing required option: `environment`")
        if self.buffer_size < 1:
            raise ConfigError(f"buffer_size must be positive, got {self.buffer_size}")
        if self.flush_interval <= 0:
            raise ConfigError(f"flush_interval must be positive, got {self.flush_interval}")
        if self.flush_interval > MAX_FLUSH_INTERVAL:
            raise ConfigError(
                f"flush_interval is in seconds (max {MAX_FLUSH_INTERVAL:g}), got {self.flush_interval}"
            )
        if self.eviction not in EVICTION_POLICIES:
            raise ConfigError(f"Unsupported eviction policy: {self.eviction}")

    @property
    def url(self) -> str:
        return f"http://{self.endpoint}:{self.port}{INGEST_PATH}"


def load_yaml_config(path: Optional[str]) -> dict:
    """Load options from a YAML file. Returns empty dict if no path or missing file."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    logger.info("Loaded YAML config from %s", path)
    return data


def _options_from_yaml(data: dict) -> dict:
    known = {f.name for f in fields(SinkConfig)}
    options = {}
    for key, value in data.items():
        if key == "aliases":
            for alias_key, aliases in (value or {}).items():
                if alias_key not in ALIAS_KEYS:
                    raise ConfigError(f"Unknown alias list: {alias_key}")
                options[ALIAS_KEYS[alias_key]] = tuple(aliases or ())
        elif key in known:
            options[key] = value
        else:
            logger.warning("Ignoring unknown config option %r", key)
    return options


def _options_from_env() -> dict:
    options = {}
    for option, (var, cast) in _ENV_VARS.items():
        raw = os.environ.get(var)
        if raw is None:
            continue
        try:
            options[option] = cast(raw)
        except ValueError as exc:
            raise ConfigError(f"Invalid value for {var}: {raw!r}") from exc
    return options


def load_config(path: Optional[str] = None, **overrides) -> SinkConfig:
    """Build SinkConfig from YAML (``DIAGNOSTICS_CONFIG`` if *path* is None),
    then environment variables, then keyword overrides."""
    path = path if path is not None else os.environ.get("DIAGNOSTICS_CONFIG")
    options = _options_from_yaml(load_yaml_config(path))
    options.update(_options_from_env())
    options.update(overrides)
    return SinkConfig(**options)
