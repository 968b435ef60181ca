"""
Configuration module for the nebularr reconciler.

Loads configuration from environment variables. Instance definitions
themselves live in a YAML file (see ``instances``).
"""

import os
from dataclasses import dataclass
from typing import Optional


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass
class ControllerConfig:
    """Reconciliation loop configuration."""

    reconcile_interval: int = 300  # seconds
    max_concurrent_reconciles: int = 4
    apply_timeout: int = 120  # seconds, deadline for one Apply

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(
            reconcile_interval=int(os.getenv("RECONCILE_INTERVAL", "300")),
            max_concurrent_reconciles=int(os.getenv("MAX_CONCURRENT_RECONCILES", "4")),
            apply_timeout=int(os.getenv("APPLY_TIMEOUT", "120")),
        )


@dataclass
class HTTPConfig:
    """Settings for talking to *arr backends."""

    timeout: float = 30.0
    user_agent: str = "nebularr"

    @classmethod
    def from_env(cls):
        return cls(
            timeout=float(os.getenv("ARR_HTTP_TIMEOUT", "30")),
            user_agent=os.getenv("ARR_USER_AGENT", "nebularr"),
        )


@dataclass
class APIConfig:
    """Status API server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    enabled: bool = True

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(
            host=os.getenv("API_HOST", "0.0.0.0"),
            port=int(os.getenv("API_PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            enabled=_env_bool("API_ENABLED", "true"),
        )


@dataclass
class InstancesConfig:
    """Where instance definitions come from."""

    path: str = "/etc/nebularr/instances.yaml"
    # Only environment variables with this prefix may be referenced as secrets
    secrets_prefix: str = ""

    @classmethod
    def from_env(cls):
        return cls(
            path=os.getenv("NEBULARR_INSTANCES_FILE", "/etc/nebularr/instances.yaml"),
            secrets_prefix=os.getenv("NEBULARR_SECRETS_PREFIX", ""),
        )


@dataclass
class Config:
    """Main configuration object."""

    controller: ControllerConfig
    http: HTTPConfig
    api: APIConfig
    instances: InstancesConfig

    @classmethod
    def from_env(cls):
        """Load all configuration from environment variables."""
        return cls(
            controller=ControllerConfig.from_env(),
            http=HTTPConfig.from_env(),
            api=APIConfig.from_env(),
            instances=InstancesConfig.from_env(),
        )

    @classmethod
    def default(cls):
        """Return default configuration."""
        return cls(
            controller=ControllerConfig(),
            http=HTTPConfig(),
            api=APIConfig(),
            instances=InstancesConfig(),
        )


# Global config instance
config: Optional[Config] = None


def load_config() -> Config:
    """Load configuration (singleton pattern)."""
    global config
    if config is None:
        config = Config.from_env()
    return config


def get_config() -> Config:
    """Get the current configuration."""
    if config is None:
        return load_config()
    return config


def reset_config() -> None:
    """Reset configuration (mainly for testing)."""
    global config
    config = None
