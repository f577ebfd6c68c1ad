"""
Unit tests for server configuration.
"""

import pytest

from compreflex.config import BackendConfig, FacadeConfig, ServerConfig, parse_allowed_types


class TestDefaults:

    def test_backend(self):
        config = BackendConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 45000
        assert config.workers == 1
        assert config.allowed_types is None
        config.validate()

    def test_facade(self):
        config = FacadeConfig()

        assert config.port == 35000
        assert config.backend_url == "http://localhost:45000"
        assert config.backend_timeout == 10.0
        config.validate()


class TestFromEnv:
    """Tests for from_env() with COMPREFLEX_* variables."""

    def test_backend_variables(self, monkeypatch):
        monkeypatch.setenv("COMPREFLEX_BACKEND_PORT", "9000")
        monkeypatch.setenv("COMPREFLEX_WORKERS", "4")
        monkeypatch.setenv("COMPREFLEX_LOG_LEVEL", "debug")
        monkeypatch.setenv("COMPREFLEX_ALLOWED_TYPES", "math, collections")

        config = BackendConfig.from_env()

        assert config.port == 9000
        assert config.workers == 4
        assert config.log_level == "DEBUG"
        assert config.allowed_types == ("math", "collections")

    def test_facade_variables(self, monkeypatch):
        monkeypatch.setenv("COMPREFLEX_FACADE_PORT", "8000")
        monkeypatch.setenv("COMPREFLEX_BACKEND_URL", "http://backend:45000")
        monkeypatch.setenv("COMPREFLEX_BACKEND_TIMEOUT", "2.5")
        monkeypatch.setenv("COMPREFLEX_LOG_FORMAT", "JSON")

        config = FacadeConfig.from_env()

        assert config.port == 8000
        assert config.backend_url == "http://backend:45000"
        assert config.backend_timeout == 2.5
        assert config.log_format == "json"

    def test_roles_use_their_own_port_variable(self, monkeypatch):
        monkeypatch.setenv("COMPREFLEX_BACKEND_PORT", "9000")

        assert FacadeConfig.from_env().port == 35000

    def test_unset_means_defaults(self, monkeypatch):
        for name in ("HOST", "WORKERS", "TIMEOUT", "LOG_LEVEL", "LOG_FORMAT",
                     "BACKEND_PORT", "ALLOWED_TYPES"):
            monkeypatch.delenv(f"COMPREFLEX_{name}", raising=False)

        assert BackendConfig.from_env() == BackendConfig()


class TestValidate:
    """validate() raises ValueError naming the bad setting."""

    @pytest.mark.parametrize("config, fragment", [
        (ServerConfig(port=70000), "Invalid port"),
        (ServerConfig(port=-1), "Invalid port"),
        (ServerConfig(workers=0), "workers"),
        (ServerConfig(queue_size=0), "queue_size"),
        (ServerConfig(backlog=0), "backlog"),
        (ServerConfig(timeout=0), "timeout"),
        (ServerConfig(max_request_size=10), "max_request_size"),
        (ServerConfig(log_level="LOUD"), "log_level"),
        (ServerConfig(log_format="xml"), "log_format"),
        (BackendConfig(allowed_types=("math", "")), "allowed type"),
        (BackendConfig(allowed_types=("a..b",)), "allowed type"),
        (FacadeConfig(backend_url="ftp://host"), "backend_url"),
        (FacadeConfig(backend_url="localhost:45000"), "backend_url"),
        (FacadeConfig(backend_timeout=0), "backend_timeout"),
    ])
    def test_invalid(self, config, fragment: str):
        with pytest.raises(ValueError) as exc_info:
            config.validate()
        assert fragment in str(exc_info.value)

    def test_port_zero_allowed(self):
        BackendConfig(port=0).validate()

    def test_no_timeout_allowed(self):
        ServerConfig(timeout=None).validate()


class TestParseAllowedTypes:

    @pytest.mark.parametrize("value, expected", [
        (None, None),
        ("", None),
        (" , ", None),
        ("math", ("math",)),
        (" math ,collections.OrderedDict,", ("math", "collections.OrderedDict")),
    ])
    def test_parse(self, value, expected):
        assert parse_allowed_types(value) == expected
