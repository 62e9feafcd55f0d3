"""
Configuration management for the AI Show Marketer application.
Handles API keys, storage locations, and edge service settings.
"""

import os
import streamlit as st
from typing import Optional
from dataclasses import dataclass
from dotenv import load_dotenv

# Load environment variables from a local .env file when present
load_dotenv()

RUNTIME_KEY_PLACEHOLDER = "__RUNTIME_API_KEY__"


@dataclass
class AppConfig:
    """Application configuration settings."""
    openai_api_key: Optional[str] = None
    runtime_api_key: Optional[str] = None
    history_dir: str = ".history"
    history_max_items: int = 20
    auto_retry_on_credential_update: bool = False
    analytics_base_url: Optional[str] = None
    analytics_enabled: bool = True


@dataclass
class EdgeConfig:
    """Settings for the edge web service."""
    assets_dir: str = "dist"
    kv_path: str = ".edge/analytics.json"
    api_key: Optional[str] = None
    ip_header: str = "CF-Connecting-IP"
    placeholder: str = RUNTIME_KEY_PLACEHOLDER


class ConfigManager:
    """Manages application configuration and settings."""

    def __init__(self):
        self._config: Optional[AppConfig] = None
        self._edge_config: Optional[EdgeConfig] = None

    def load_config(self) -> AppConfig:
        """Load configuration from Streamlit secrets and environment.

        A missing API key is not treated as an error here; the generator
        reports it as ``AuthMissing`` when a call is attempted.
        """
        if self._config is not None:
            return self._config

        self._config = AppConfig(
            openai_api_key=self._get_secret_or_env("OPENAI_API_KEY"),
            runtime_api_key=self._get_secret_or_env("RUNTIME_API_KEY"),
            history_dir=self._get_setting("HISTORY_DIR", ".history"),
            history_max_items=self._get_int_setting("HISTORY_MAX_ITEMS", 20),
            auto_retry_on_credential_update=self._get_bool_setting(
                "AUTO_RETRY_ON_CREDENTIAL_UPDATE", False
            ),
            analytics_base_url=self._get_secret_or_env("ANALYTICS_BASE_URL"),
            analytics_enabled=self._get_bool_setting("ANALYTICS_ENABLED", True),
        )

        return self._config

    def load_edge_config(self) -> EdgeConfig:
        """Load edge service configuration from the environment."""
        if self._edge_config is not None:
            return self._edge_config

        self._edge_config = EdgeConfig(
            assets_dir=self._get_setting("EDGE_ASSETS_DIR", "dist"),
            kv_path=self._get_setting("EDGE_KV_PATH", ".edge/analytics.json"),
            api_key=self._get_secret_or_env("EDGE_API_KEY"),
            ip_header=self._get_setting("EDGE_IP_HEADER", "CF-Connecting-IP"),
        )
        return self._edge_config

    def reset(self):
        """Drop cached configuration so the next load re-reads settings."""
        self._config = None
        self._edge_config = None

    def _get_secret_or_env(self, key: str) -> Optional[str]:
        """Get value from Streamlit secrets or environment variables."""
        # Try Streamlit secrets first
        try:
            if hasattr(st, 'secrets') and key in st.secrets:
                return st.secrets[key]
        except Exception:
            # No secrets.toml outside of `streamlit run`
            pass

        # Fall back to environment variables
        value = os.getenv(key)
        if value is not None and not value.strip():
            return None
        return value

    def _get_setting(self, key: str, default: str) -> str:
        """Get string setting with default value."""
        value = self._get_secret_or_env(key)
        return value if value is not None else default

    def _get_int_setting(self, key: str, default: int) -> int:
        """Get integer setting with default value."""
        value = self._get_secret_or_env(key)
        if value is not None:
            try:
                return int(value)
            except ValueError:
                pass
        return default

    def _get_bool_setting(self, key: str, default: bool) -> bool:
        value = self._get_secret_or_env(key)
        if value is None:
            return default
        return str(value).strip().lower() in {"1", "true", "yes", "on"}

    def get_build_time_api_key(self) -> Optional[str]:
        """Get the API key embedded with the local build (.env / secrets)."""
        return self.load_config().openai_api_key

    def get_runtime_api_key(self) -> Optional[str]:
        """Get the API key injected at serve time, if any."""
        return self.load_config().runtime_api_key


# Global configuration manager instance
config_manager = ConfigManager()
