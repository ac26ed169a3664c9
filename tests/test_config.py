"""Tests for settings defaults and timeout validation."""

import pytest
from pydantic import ValidationError

from tests.conftest import make_settings


class TestTimeouts:
    def test_defaults(self):
        settings = make_settings()
        assert settings.response_header_timeout == 10.0
        assert settings.request_timeout == 15.0

    @pytest.mark.parametrize("field", ["response_header_timeout", "request_timeout"])
    @pytest.mark.parametrize("value", [0, -1.5])
    def test_non_positive_rejected(self, field, value):
        with pytest.raises(ValidationError, match=f"Timeouts must be positive. Invalid: {field}"):
            make_settings(**{field: value})

    def test_all_invalid_named(self):
        with pytest.raises(ValidationError, match="response_header_timeout, request_timeout"):
            make_settings(response_header_timeout=0, request_timeout=0)

    def test_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("LLU_REQUEST_TIMEOUT", "30")
        monkeypatch.setenv("LLU_RESPONSE_HEADER_TIMEOUT", "5")
        settings = make_settings()
        assert settings.request_timeout == 30.0
        assert settings.response_header_timeout == 5.0


class TestDefaults:
    def test_client_identification(self):
        settings = make_settings()
        assert settings.version == "4.2.2"
        assert settings.product == "llu.ios"
        assert settings.region == "EU"

    def test_password_not_in_repr(self):
        assert "hunter2" not in repr(make_settings())
