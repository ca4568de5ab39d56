import pytest
from pydantic import ValidationError

from explain_core.config.settings import Settings, require_endpoint
from explain_core.domain.exceptions import ConfigurationError


def test_defaults(monkeypatch):
    monkeypatch.delenv("API_ENDPOINT", raising=False)
    cfg = Settings(api_endpoint="https://llm.example.test/v1/chat/completions")
    assert cfg.chat_model == "gpt-3.5-turbo"
    assert cfg.http_timeout == 60.0
    assert cfg.surface_failures is True
    assert cfg.record_assistant_replies is False


def test_endpoint_from_environment(monkeypatch):
    monkeypatch.setenv("API_ENDPOINT", "http://localhost:8080/v1/chat/completions")
    cfg = Settings()
    assert require_endpoint(cfg) == "http://localhost:8080/v1/chat/completions"


def test_invalid_endpoint_rejected():
    with pytest.raises(ValidationError):
        Settings(api_endpoint="ftp://files.example.test")


def test_blank_endpoint_is_missing():
    cfg = Settings(api_endpoint="   ")
    with pytest.raises(ConfigurationError):
        require_endpoint(cfg)


def test_yaml_config_source(tmp_path, monkeypatch):
    path = tmp_path / "explain.yaml"
    path.write_text("chat_model: gpt-4o-mini\nhttp_timeout: 30\n", encoding="utf-8")
    monkeypatch.setenv("EXPLAIN_CONFIG_FILE", str(path))
    monkeypatch.delenv("CHAT_MODEL", raising=False)
    monkeypatch.delenv("HTTP_TIMEOUT", raising=False)
    cfg = Settings()
    assert cfg.chat_model == "gpt-4o-mini"
    assert cfg.http_timeout == 30.0
