"""Tests for layered configuration."""

import pytest

from yumeoi.config import Configuration


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("YUMEOI_CONFIG", "GEMINI_API_KEY", "REDIS_URL"):
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the tests
    monkeypatch.setattr(Configuration, "load_env", staticmethod(lambda: None))


def _override(tmp_path, text):
    path = tmp_path / "override.yaml"
    path.write_text(text)
    return str(path)


def test_packaged_defaults():
    config = Configuration()

    assert config.get_active_provider() == "ollama"
    llm = config.get_llm_config()
    assert llm["provider"] == "ollama"
    assert llm["model"] == "phi3"
    assert llm["tools_enabled"] is True
    assert config.get_conversation_ttl_seconds() == 86400
    assert config.get_history_limit() == 20
    assert config.get_chat_storage_config()["type"] == "memory"
    assert config.llm_api_key == ""


def test_override_file_is_deep_merged(tmp_path):
    config = Configuration(
        _override(tmp_path, "llm:\n  providers:\n    ollama:\n      model: llama3\n")
    )

    llm = config.get_llm_config()
    assert llm["model"] == "llama3"
    assert llm["base_url"] == "http://localhost:11434"


def test_override_path_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("YUMEOI_CONFIG", _override(tmp_path, "chat:\n  storage:\n    ttl_seconds: 60\n"))

    assert Configuration().get_conversation_ttl_seconds() == 60


@pytest.mark.parametrize("ttl", ["0", "-5", "'soon'", "true"])
def test_invalid_ttl_rejected(tmp_path, ttl):
    config = Configuration(_override(tmp_path, f"chat:\n  storage:\n    ttl_seconds: {ttl}\n"))

    with pytest.raises(ValueError):
        config.get_conversation_ttl_seconds()


def test_invalid_history_limit_rejected(tmp_path):
    config = Configuration(_override(tmp_path, "chat:\n  service:\n    history_limit: -1\n"))

    with pytest.raises(ValueError):
        config.get_history_limit()


def test_missing_provider_block_rejected(tmp_path):
    config = Configuration(_override(tmp_path, "llm:\n  active: nowhere\n"))

    with pytest.raises(ValueError, match="not found in providers"):
        config.get_llm_config()


def test_gemini_key_comes_from_environment(tmp_path, monkeypatch):
    config = Configuration(_override(tmp_path, "llm:\n  active: gemini\n"))

    with pytest.raises(ValueError, match="GEMINI_API_KEY"):
        _ = config.llm_api_key

    monkeypatch.setenv("GEMINI_API_KEY", "secret")
    assert config.llm_api_key == "secret"


def test_redis_url_environment_override(monkeypatch):
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/2")

    storage = Configuration().get_chat_storage_config()

    assert storage["redis"]["url"] == "redis://cache:6379/2"


def test_non_mapping_yaml_rejected(tmp_path):
    with pytest.raises(ValueError, match="dictionary"):
        Configuration(_override(tmp_path, "- just\n- a list\n"))
