from pydantic import BaseModel, ValidationError
import os
import json
import logging
from pathlib import Path
from typing import Dict, List, Literal

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env file if it exists (env vars take precedence)
load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=False)


class ConfigError(Exception):
    """Invalid or unreadable tool-provider configuration."""


def _sanitize_ascii(val: str) -> str:
    """Strip non-ASCII characters from config values (prevents encoding errors)"""
    return val.encode('ascii', errors='ignore').decode('ascii').strip()


class Settings(BaseModel):
    # Network
    ws_host: str = os.getenv("BRIDGE_WS_HOST", "0.0.0.0")
    ws_port: int = int(os.getenv("BRIDGE_WS_PORT", "8080"))
    ws_path: str = "/ws"

    # Completion API (OpenAI-compatible)
    openai_api_key: str = _sanitize_ascii(os.getenv("OPENAI_API_KEY", ""))
    openai_base_url: str = _sanitize_ascii(os.getenv("OPENAI_API_BASE", ""))
    openai_model: str = _sanitize_ascii(os.getenv("OPENAI_API_MODEL", ""))

    # Tool providers
    mcp_config_path: str = os.getenv("MCP_CONFIG_PATH", "config.json")
    provider_connect_timeout: float = float(os.getenv("PROVIDER_CONNECT_TIMEOUT", "30"))

    # One query: registry build + both completions + dispatch
    query_timeout: float = float(os.getenv("QUERY_TIMEOUT", "60"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def missing_completion_settings(self) -> List[str]:
        """Names of required completion settings that are empty."""
        required = {
            "OPENAI_API_KEY": self.openai_api_key,
            "OPENAI_API_BASE": self.openai_base_url,
            "OPENAI_API_MODEL": self.openai_model,
        }
        return [name for name, value in required.items() if not value]


class ProviderConfig(BaseModel):
    """One tool server entry: transport type plus launch/connect target.

    For "stdio" the command is an executable started with args;
    for "http" and "sse" it is the server URL.
    """
    type: str
    command: str
    args: List[str] = []

    @property
    def transport(self) -> Literal["stdio", "http", "sse", ""]:
        kind = self.type.strip().lower()
        return kind if kind in ("stdio", "http", "sse") else ""


class ProvidersConfig(BaseModel):
    mcpServers: Dict[str, ProviderConfig] = {}


def load_provider_config(path: str) -> ProvidersConfig:
    """Read and validate the tool server list (config.json)."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read provider config {path}: {e}") from e

    try:
        config = ProvidersConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid provider config {path}: {e}") from e

    for name, entry in config.mcpServers.items():
        if not entry.type.strip() or not entry.command.strip():
            raise ConfigError(f"[{name}] type and command are required")
    return config


settings = Settings()

# Log config for debugging
_oai_key = '***' + settings.openai_api_key[-4:] if len(settings.openai_api_key) > 4 else 'EMPTY'
logger.info(f"Config: completion → {settings.openai_base_url or 'UNSET'} (key={_oai_key}), model={settings.openai_model or 'UNSET'}")
