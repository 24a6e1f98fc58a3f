"""Configuration provider following Black Box Design principles."""
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import yaml

logger = logging.getLogger(__name__)

IMAGE_PULL_POLICIES = ("Always", "IfNotPresent", "Never")
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class ControllerConfig:
    """Controller configuration."""
    group: str
    version: str
    plural: str
    watch_namespace: Optional[str]
    image: str
    image_pull_policy: str
    skip_existing: bool
    watch_timeout_seconds: int
    watch_retry_seconds: int
    kubeconfig: Optional[str]
    log_level: str

    @property
    def resource(self) -> str:
        """Fully qualified resource name, e.g. ``healthchecks.example.com/v1``."""
        return f"{self.plural}.{self.group}/{self.version}"


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_controller_config(self) -> ControllerConfig:
        """Get controller configuration."""
        ...


# Environment variable -> (YAML overlay key, default)
_SETTINGS = {
    "HEALTHMON_GROUP": ("group", "example.com"),
    "HEALTHMON_VERSION": ("version", "v1"),
    "HEALTHMON_PLURAL": ("plural", "healthchecks"),
    "HEALTHMON_WATCH_NAMESPACE": ("watchNamespace", ""),
    "HEALTHMON_IMAGE": ("image", "docker.io/library/healthcheck-monitor:latest"),
    "HEALTHMON_IMAGE_PULL_POLICY": ("imagePullPolicy", "Never"),
    "HEALTHMON_SKIP_EXISTING": ("skipExisting", "false"),
    "HEALTHMON_WATCH_TIMEOUT": ("watchTimeoutSeconds", "300"),
    "HEALTHMON_WATCH_RETRY_SECONDS": ("watchRetrySeconds", "5"),
    "HEALTHMON_KUBECONFIG": ("kubeconfig", ""),
    "LOG_LEVEL": ("logLevel", "INFO"),
}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.lower()
    if value not in ("true", "false"):
        raise ValueError(f"{name} must be true or false, got: {raw!r}")
    return value == "true"


def _parse_int(name: str, raw: str, minimum: int) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got: {raw!r}") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got: {value}")
    return value


class EnvConfigProvider:
    """Environment-based configuration provider.

    An optional YAML file named by ``HEALTHMON_CONFIG_FILE`` supplies
    defaults; environment variables always take precedence over it.
    """

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self._environ = os.environ if environ is None else environ

    def _load_overlay(self) -> Dict[str, Any]:
        path = self._environ.get("HEALTHMON_CONFIG_FILE")
        if not path:
            return {}

        with open(path) as f:
            overlay = yaml.safe_load(f) or {}

        if not isinstance(overlay, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        logger.info(f"Loaded controller config overlay from {path}")
        return overlay

    def _raw(self, overlay: Dict[str, Any]) -> Dict[str, str]:
        values = {}
        for env_name, (key, default) in _SETTINGS.items():
            value = self._environ.get(env_name)
            if value is None:
                value = overlay.get(key, default)
            if isinstance(value, bool):
                value = "true" if value else "false"
            values[env_name] = str(value).strip()
        return values

    def get_controller_config(self) -> ControllerConfig:
        """Get controller configuration from the environment."""
        raw = self._raw(self._load_overlay())

        for name in ("HEALTHMON_GROUP", "HEALTHMON_VERSION", "HEALTHMON_PLURAL"):
            if not raw[name]:
                raise ValueError(f"{name} must be a non-empty string")

        pull_policy = raw["HEALTHMON_IMAGE_PULL_POLICY"]
        if pull_policy not in IMAGE_PULL_POLICIES:
            raise ValueError(
                f"HEALTHMON_IMAGE_PULL_POLICY must be one of {', '.join(IMAGE_PULL_POLICIES)}, "
                f"got: {pull_policy!r}"
            )

        log_level = raw["LOG_LEVEL"].upper()
        if log_level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got: {raw['LOG_LEVEL']!r}")

        return ControllerConfig(
            group=raw["HEALTHMON_GROUP"],
            version=raw["HEALTHMON_VERSION"],
            plural=raw["HEALTHMON_PLURAL"],
            watch_namespace=raw["HEALTHMON_WATCH_NAMESPACE"] or None,
            image=raw["HEALTHMON_IMAGE"],
            image_pull_policy=pull_policy,
            skip_existing=_parse_bool("HEALTHMON_SKIP_EXISTING", raw["HEALTHMON_SKIP_EXISTING"]),
            watch_timeout_seconds=_parse_int(
                "HEALTHMON_WATCH_TIMEOUT", raw["HEALTHMON_WATCH_TIMEOUT"], minimum=1
            ),
            watch_retry_seconds=_parse_int(
                "HEALTHMON_WATCH_RETRY_SECONDS", raw["HEALTHMON_WATCH_RETRY_SECONDS"], minimum=0
            ),
            kubeconfig=raw["HEALTHMON_KUBECONFIG"] or None,
            log_level=log_level,
        )
