"""Tests for settings, logging and metrics helpers."""

import json
import logging

import pytest

from trip_planner.core import config as config_module
from trip_planner.core.config import Settings, validate_settings_for_production
from trip_planner.core.logging import GATEWAY_LOGGER_NAME, JSONFormatter, get_gateway_logger, setup_logging
from trip_planner.core.metrics import metrics_text, record_result


class TestSettings:
    def test_defaults(self, monkeypatch):
        for var in ("OPENROUTER_API_KEY", "OPENROUTER_TIMEOUT", "OPENROUTER_MAX_RETRIES", "OPENROUTER_API_URL"):
            monkeypatch.delenv(var, raising=False)
        s = Settings(_env_file=None)
        assert s.openrouter_api_key == ""
        assert s.openrouter_api_url == "https://openrouter.ai/api/v1/chat/completions"
        assert s.openrouter_timeout == 60
        assert s.openrouter_max_retries == 3
        assert s.openrouter_default_model == "perplexity/sonar-pro-search"
        assert s.log_json is False

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-env")
        monkeypatch.setenv("OPENROUTER_MAX_RETRIES", "5")
        monkeypatch.setenv("LOG_JSON", "true")
        s = Settings(_env_file=None)
        assert s.openrouter_api_key == "sk-or-env"
        assert s.openrouter_max_retries == 5
        assert s.log_json is True


class TestValidateSettings:
    def test_missing_api_key(self):
        # isolated_config blanks the key
        with pytest.raises(SystemExit, match="OPENROUTER_API_KEY must be set"):
            validate_settings_for_production()

    def test_invalid_retry_budget(self, monkeypatch):
        monkeypatch.setattr(config_module.settings, "openrouter_api_key", "sk-or-1")
        monkeypatch.setattr(config_module.settings, "openrouter_max_retries", -1)
        with pytest.raises(SystemExit, match="OPENROUTER_MAX_RETRIES"):
            validate_settings_for_production()

    def test_production_requires_https(self, monkeypatch):
        monkeypatch.setattr(config_module.settings, "openrouter_api_key", "sk-or-1")
        monkeypatch.setattr(config_module.settings, "app_env", "production")
        monkeypatch.setattr(config_module.settings, "openrouter_api_url", "http://openrouter.local/chat")
        with pytest.raises(SystemExit, match="https"):
            validate_settings_for_production()

    def test_valid(self, monkeypatch):
        monkeypatch.setattr(config_module.settings, "openrouter_api_key", "sk-or-1")
        validate_settings_for_production()


class TestLogging:
    def test_json_formatter(self):
        record = logging.LogRecord(
            name="trip_planner.gateway",
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg="Retrying in %ss",
            args=(2,),
            exc_info=None,
        )
        record.attempt = 2
        record.error_kind = "server"
        data = json.loads(JSONFormatter().format(record))
        assert data["level"] == "WARNING"
        assert data["logger"] == "trip_planner.gateway"
        assert data["message"] == "Retrying in 2s"
        assert data["attempt"] == 2
        assert data["error_kind"] == "server"
        assert "wait_seconds" not in data

    def test_setup_logging_installs_single_handler(self, monkeypatch):
        monkeypatch.setattr(config_module.settings, "log_json", True)
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging()
            setup_logging()
            own = [h for h in root.handlers if isinstance(h.formatter, JSONFormatter)]
            assert len(own) == 1
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

    def test_setup_logging_explicit_arguments(self, monkeypatch):
        monkeypatch.setattr(config_module.settings, "log_json", True)
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging("debug", json_output=False)
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert not isinstance(root.handlers[0].formatter, JSONFormatter)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

    def test_gateway_logger(self):
        assert get_gateway_logger().name == GATEWAY_LOGGER_NAME


class TestMetrics:
    def test_record_result_exported(self):
        record_result(False, "authentication")
        record_result(True)
        text = metrics_text().decode()
        assert 'openrouter_results_total{outcome="failure",error_kind="authentication"}' in text
        assert 'openrouter_results_total{outcome="success",error_kind="none"}' in text
