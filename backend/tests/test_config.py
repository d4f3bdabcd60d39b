"""
ChatGuard Backend — Settings and Middleware Helper Tests
==========================================================

What we test:
    ✅ Defaults match the documented service behavior
    ✅ Environment parsing (origins list, log level, port range)
    ✅ Production-only checks
    ✅ Security header set and request ID sanitizing
    ✅ Access log level selection
    ✅ Startup fails fast on invalid production configuration
"""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from chatguard import __version__
from chatguard.config import Settings
from chatguard.exceptions import ConfigurationError
from chatguard.main import create_app, lifespan
from chatguard.middleware.logging import level_for_status
from chatguard.middleware.request_id import resolve_request_id
from chatguard.middleware.security_headers import security_headers


class TestSettings:

    def test_defaults(self):
        cfg = Settings(_env_file=None, app_env="development", log_level="INFO", allowed_origins="")
        assert cfg.port == 3000
        assert cfg.rate_limit_requests == 5
        assert cfg.rate_limit_window_ms == 15_000
        assert cfg.max_message_length == 500
        assert cfg.preview_length == 50
        assert cfg.max_body_bytes == 1_048_576

    def test_origins_split_and_blanks_dropped(self):
        cfg = Settings(allowed_origins=" https://a.example , ,https://b.example,")
        assert cfg.allowed_origins_list == ["https://a.example", "https://b.example"]

    def test_env_variables_read(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("RATE_LIMIT_REQUESTS", "10")
        cfg = Settings()
        assert cfg.port == 8080
        assert cfg.rate_limit_requests == 10

    def test_non_numeric_port_rejected(self, monkeypatch):
        monkeypatch.setenv("PORT", "abc")
        with pytest.raises(ValidationError):
            Settings()

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_invalid_app_env(self):
        with pytest.raises(ValidationError):
            Settings(app_env="staging")

    def test_production_requires_origins(self):
        cfg = Settings(app_env="production", allowed_origins="")
        with pytest.raises(ValueError, match="ALLOWED_ORIGINS"):
            cfg.validate_required_for_production()

    def test_production_with_origins_ok(self):
        cfg = Settings(app_env="production", allowed_origins="https://app.example.com")
        cfg.validate_required_for_production()

    def test_development_needs_nothing(self):
        Settings(app_env="development", allowed_origins="").validate_required_for_production()


class TestMiddlewareHelpers:

    def test_security_headers_without_hsts(self):
        headers = security_headers(include_hsts=False)
        assert headers["X-Content-Type-Options"] == "nosniff"
        assert headers["Referrer-Policy"] == "no-referrer"
        assert "Strict-Transport-Security" not in headers

    def test_security_headers_with_hsts(self):
        headers = security_headers(include_hsts=True)
        assert headers["Strict-Transport-Security"].startswith("max-age=")

    def test_request_id_reused_when_safe(self):
        assert resolve_request_id("3f2b-ab12") == "3f2b-ab12"

    @pytest.mark.parametrize("incoming", ["", "has space", "x" * 10, "a" * 65, "abc\ndef"])
    def test_request_id_regenerated_when_unsafe(self, incoming):
        rid = resolve_request_id(incoming)
        assert rid != incoming
        assert len(rid) == 36

    @pytest.mark.parametrize(
        "status, level",
        [(200, logging.INFO), (304, logging.INFO), (413, logging.WARNING), (500, logging.ERROR)],
    )
    def test_access_log_level(self, status, level):
        assert level_for_status(status) == level


class TestLifespan:
    """Startup refuses to serve with an invalid production configuration."""

    @pytest.mark.asyncio
    async def test_production_without_origins_fails_startup(self, manual_clock):
        app = create_app(
            settings=Settings(app_env="production", allowed_origins=""),
            clock=manual_clock,
        )

        with patch("chatguard.main.setup_logging"):
            with pytest.raises(ConfigurationError, match="ALLOWED_ORIGINS"):
                async with lifespan(app):
                    pass

    @pytest.mark.asyncio
    async def test_development_starts_and_stops(self, app):
        with patch("chatguard.main.setup_logging") as setup:
            async with lifespan(app):
                pass

        setup.assert_called_once_with("WARNING")


class TestPackaging:

    def test_project_metadata(self):
        tomllib = pytest.importorskip("tomllib")
        pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
        project = tomllib.loads(pyproject.read_text(encoding="utf-8"))["project"]

        assert project["version"] == __version__
        # Only the code is packaged; design notes stay in the repository
        assert "readme" not in project
