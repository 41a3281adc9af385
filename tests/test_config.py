import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from openapi_guard.config import Settings
from openapi_guard.logs import configure_logging
from openapi_guard.report import log_violation
from openapi_guard.validation.verdict import HttpRequest, HttpResponse, request_violation, response_violation


class TestSettings:
    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        for name in ("CONTRACT_PATH", "PATH_PREFIX", "LOG_LEVEL"):
            monkeypatch.delenv(f"OPENAPI_GUARD_{name}", raising=False)
        settings = Settings()
        assert settings.CONTRACT_PATH is None
        assert settings.PATH_PREFIX == ""
        assert settings.LOG_LEVEL == "INFO"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAPI_GUARD_CONTRACT_PATH", "/etc/api.yaml")
        monkeypatch.setenv("OPENAPI_GUARD_PATH_PREFIX", "/api")
        monkeypatch.setenv("OPENAPI_GUARD_LOG_LEVEL", "debug")
        settings = Settings()
        assert settings.CONTRACT_PATH == Path("/etc/api.yaml")
        assert settings.path_prefix_bytes == b"/api"
        assert settings.LOG_LEVEL == "DEBUG"

    def test_bad_log_level(self):
        with pytest.raises(ValidationError):
            Settings(LOG_LEVEL="loud")


class TestLogging:
    def test_repeated_configuration_keeps_one_handler(self):
        logger = configure_logging("DEBUG")
        configure_logging("WARNING")
        ours = [h for h in logger.handlers if getattr(h, "_openapi_guard", False)]
        assert len(ours) == 1
        assert logger.level == logging.WARNING
        logger.removeHandler(ours[0])


class TestLogViolation:
    def test_request_violation(self, caplog):
        request = HttpRequest(method="POST", raw_path=b"/articles")
        with caplog.at_level(logging.WARNING, logger="openapi_guard.report"):
            log_violation(request, None, request_violation("no such path: /articles", 404))

        [record] = caplog.records
        assert record.getMessage() == "POST /articles: Request invalid: no such path: /articles"
        assert record.status is None
        assert record.provenance == "request"

    def test_response_violation(self, caplog):
        request = HttpRequest(method="GET", raw_path=b"/articles/1")
        response = HttpResponse(status=500, headers=[])
        with caplog.at_level(logging.WARNING, logger="openapi_guard.report"):
            log_violation(request, response, response_violation("no response for that status code"))

        [record] = caplog.records
        assert record.status == 500
        assert "Response invalid" in record.getMessage()
