import logging
import os

import pytest

_KEYS = ["API_BASE_ROUTE", "API_TOKEN", "API_TIMEOUT", "API_MAX_WORKERS", "API_STRICT", "LOG_LEVEL"]


class TestConfigDefaults:
    def test_defaults(self):
        env_backup = os.environ.copy()
        for key in _KEYS:
            os.environ.pop(key, None)

        try:
            from api_provider.config import Config

            cfg = Config()
            assert cfg.API_BASE_ROUTE == ""
            assert cfg.API_TOKEN == ""
            assert cfg.API_TIMEOUT == 30
            assert cfg.API_MAX_WORKERS == 4
            assert cfg.API_STRICT is False
            assert cfg.LOG_LEVEL == "INFO"
        finally:
            os.environ.clear()
            os.environ.update(env_backup)

    def test_custom_values(self):
        env_backup = os.environ.copy()
        os.environ["API_BASE_ROUTE"] = "https://music.example.com/api"
        os.environ["API_TOKEN"] = "test-token-123"
        os.environ["API_TIMEOUT"] = "2.5"
        os.environ["API_MAX_WORKERS"] = "8"
        os.environ["API_STRICT"] = "yes"
        os.environ["LOG_LEVEL"] = "debug"

        try:
            from api_provider.config import Config

            cfg = Config()
            assert cfg.API_BASE_ROUTE == "https://music.example.com/api"
            assert cfg.API_TOKEN == "test-token-123"
            assert cfg.API_TIMEOUT == 2.5
            assert cfg.API_MAX_WORKERS == 8
            assert cfg.API_STRICT is True
            assert cfg.LOG_LEVEL == "DEBUG"
        finally:
            os.environ.clear()
            os.environ.update(env_backup)


class TestValidate:
    def test_defaults_pass(self):
        from api_provider.config import Config

        Config().validate()  # should not raise

    def test_bad_timeout(self):
        from api_provider.config import Config

        cfg = Config()
        cfg.API_TIMEOUT = 0
        with pytest.raises(ValueError, match="API_TIMEOUT"):
            cfg.validate()

    def test_bad_workers(self):
        from api_provider.config import Config

        cfg = Config()
        cfg.API_MAX_WORKERS = -1
        with pytest.raises(ValueError, match="API_MAX_WORKERS"):
            cfg.validate()


class TestSetupLogging:
    def test_passes_level(self, monkeypatch):
        from api_provider import config

        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
        config.setup_logging("warning")
        assert calls[0]["level"] == "WARNING"
