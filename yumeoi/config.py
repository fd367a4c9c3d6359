"""Configuration management for the generation backend."""

from __future__ import annotations

import logging
import os
from typing import Any, cast

import yaml
from dotenv import load_dotenv

CONFIG_ENV_VAR = "YUMEOI_CONFIG"

# Map provider names to environment variable names
PROVIDER_KEY_MAP: dict[str, str | None] = {
    "ollama": None,
    "gemini": "GEMINI_API_KEY",
}


class Configuration:
    """Layered configuration: packaged YAML defaults, optional override file, .env secrets."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables."""
        self.load_env()  # Load .env for API keys
        self._default_config = self._load_yaml_config(
            os.path.join(os.path.dirname(__file__), "config.yaml")
        )

        override_path = config_path or os.getenv(CONFIG_ENV_VAR)
        override: dict[str, Any] = {}
        if override_path:
            override = self._load_yaml_config(override_path)
            logging.info(f"Loaded configuration overrides from {override_path}")

        self._current_config = self._deep_merge(self._default_config, override)

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    @staticmethod
    def _load_yaml_config(config_path: str) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(config_path) as file:
            config = yaml.safe_load(file)
            if config is None:
                return {}
            if not isinstance(config, dict):
                raise ValueError("Configuration file must contain a dictionary")
            return cast(dict[str, Any], config)

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(
                    cast(dict[str, Any], result[key]), cast(dict[str, Any], value)
                )
            else:
                result[key] = value

        return result

    def _get_current_config(self) -> dict[str, Any]:
        return self._current_config

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full configuration dictionary.

        Returns:
            The complete configuration dictionary.
        """
        return self._get_current_config()

    def get_active_provider(self) -> str:
        llm_config = self._get_current_config().get("llm", {})
        return llm_config.get("active", "ollama")

    def get_llm_config(self) -> dict[str, Any]:
        """Get active LLM provider configuration from YAML.

        Returns:
            Active provider configuration dictionary, tagged with its provider name.

        Raises:
            ValueError: If the active provider has no configuration block.
        """
        active_provider = self.get_active_provider()
        providers = self._get_current_config().get("llm", {}).get("providers", {})

        if active_provider not in providers:
            raise ValueError(f"Active provider '{active_provider}' not found in providers config")

        return {**providers[active_provider], "provider": active_provider}

    @property
    def llm_api_key(self) -> str:
        """Get the API key for the active LLM provider.

        Returns:
            The API key as a string, empty for providers that need none.

        Raises:
            ValueError: If the provider is unknown or its key is missing.
        """
        active_provider = self.get_active_provider()
        if active_provider not in PROVIDER_KEY_MAP:
            raise ValueError(f"Unknown provider '{active_provider}' - no API key mapping found")

        env_key = PROVIDER_KEY_MAP[active_provider]
        if env_key is None:
            return ""

        api_key = os.getenv(env_key)
        if not api_key:
            raise ValueError(
                f"API key '{env_key}' not found in environment variables "
                f"for provider '{active_provider}'"
            )
        return api_key

    def get_chat_service_config(self) -> dict[str, Any]:
        """Get chat service configuration from YAML."""
        return self._get_current_config().get("chat", {}).get("service", {})

    def get_chat_storage_config(self) -> dict[str, Any]:
        """Get chat storage configuration, with REDIS_URL taking precedence."""
        storage = dict(self._get_current_config().get("chat", {}).get("storage", {}))
        redis_url = os.getenv("REDIS_URL")
        if redis_url:
            storage["redis"] = {**storage.get("redis", {}), "url": redis_url}
        return storage

    def get_conversation_ttl_seconds(self) -> int:
        """Get the rolling expiry applied on every conversation save.

        Returns:
            Expiry in seconds (default: 24 hours).
        """
        ttl = self.get_chat_storage_config().get("ttl_seconds", 24 * 60 * 60)

        if not isinstance(ttl, int) or isinstance(ttl, bool) or ttl < 1:
            raise ValueError("ttl_seconds must be a positive integer")

        return ttl

    def get_history_limit(self) -> int:
        limit = self.get_chat_service_config().get("history_limit", 20)
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 0:
            raise ValueError("history_limit must be a non-negative integer")
        return limit

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML."""
        return self._get_current_config().get("logging", {})
