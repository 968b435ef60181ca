"""Unit tests for config.py - Configuration management."""

import os
import pytest
from unittest.mock import patch

import config
from config import (
    APIConfig,
    Config,
    ControllerConfig,
    HTTPConfig,
    InstancesConfig,
    get_config,
    load_config,
    reset_config,
)


class TestControllerConfig:
    """Tests for ControllerConfig class."""

    def test_default_values(self):
        cfg = ControllerConfig()
        assert cfg.reconcile_interval == 300
        assert cfg.max_concurrent_reconciles == 4
        assert cfg.apply_timeout == 120

    def test_from_env(self):
        env_vars = {
            "RECONCILE_INTERVAL": "60",
            "MAX_CONCURRENT_RECONCILES": "8",
            "APPLY_TIMEOUT": "30",
        }
        with patch.dict(os.environ, env_vars):
            cfg = ControllerConfig.from_env()
        assert cfg.reconcile_interval == 60
        assert cfg.max_concurrent_reconciles == 8
        assert cfg.apply_timeout == 30

    def test_from_env_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            cfg = ControllerConfig.from_env()
        assert cfg == ControllerConfig()

    def test_invalid_integer(self):
        with patch.dict(os.environ, {"RECONCILE_INTERVAL": "soon"}):
            with pytest.raises(ValueError):
                ControllerConfig.from_env()


class TestHTTPConfig:
    """Tests for HTTPConfig class."""

    def test_default_values(self):
        cfg = HTTPConfig()
        assert cfg.timeout == 30.0
        assert cfg.user_agent == "nebularr"

    def test_from_env(self):
        with patch.dict(os.environ, {"ARR_HTTP_TIMEOUT": "12.5", "ARR_USER_AGENT": "custom/1.0"}):
            cfg = HTTPConfig.from_env()
        assert cfg.timeout == 12.5
        assert cfg.user_agent == "custom/1.0"


class TestAPIConfig:
    """Tests for APIConfig class."""

    def test_default_values(self):
        cfg = APIConfig()
        assert cfg.host == "0.0.0.0"
        assert cfg.port == 8000
        assert cfg.log_level == "INFO"
        assert cfg.enabled is True

    def test_from_env(self):
        env_vars = {
            "API_HOST": "127.0.0.1",
            "API_PORT": "9000",
            "LOG_LEVEL": "DEBUG",
            "API_ENABLED": "false",
        }
        with patch.dict(os.environ, env_vars):
            cfg = APIConfig.from_env()
        assert cfg.host == "127.0.0.1"
        assert cfg.port == 9000
        assert cfg.log_level == "DEBUG"
        assert cfg.enabled is False

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes"])
    def test_enabled_truthy(self, value):
        with patch.dict(os.environ, {"API_ENABLED": value}):
            assert APIConfig.from_env().enabled is True


class TestInstancesConfig:
    """Tests for InstancesConfig class."""

    def test_default_values(self):
        cfg = InstancesConfig()
        assert cfg.path == "/etc/nebularr/instances.yaml"
        assert cfg.secrets_prefix == ""

    def test_from_env(self):
        env_vars = {
            "NEBULARR_INSTANCES_FILE": "/config/instances.yaml",
            "NEBULARR_SECRETS_PREFIX": "NEBULARR_",
        }
        with patch.dict(os.environ, env_vars):
            cfg = InstancesConfig.from_env()
        assert cfg.path == "/config/instances.yaml"
        assert cfg.secrets_prefix == "NEBULARR_"


class TestConfig:
    """Tests for the main Config class and the singleton helpers."""

    def setup_method(self):
        reset_config()

    def teardown_method(self):
        reset_config()

    def test_default(self):
        cfg = Config.default()
        assert cfg.controller == ControllerConfig()
        assert cfg.http == HTTPConfig()
        assert cfg.api == APIConfig()
        assert cfg.instances == InstancesConfig()

    def test_from_env(self):
        with patch.dict(os.environ, {"API_PORT": "8081", "RECONCILE_INTERVAL": "10"}):
            cfg = Config.from_env()
        assert cfg.api.port == 8081
        assert cfg.controller.reconcile_interval == 10

    def test_load_config_is_singleton(self):
        first = load_config()
        second = load_config()
        assert first is second
        assert config.config is first

    def test_get_config_loads_when_missing(self):
        assert config.config is None
        cfg = get_config()
        assert cfg is config.config

    def test_reset_config(self):
        load_config()
        reset_config()
        assert config.config is None
