"""YAML configuration loader with env var resolution and Pydantic validation.

Loads config from (priority order):
1. explicit path (--config CLI flag or WIRING_ANALYST_CONFIG_PATH)
2. ./wiring-analyst.yaml (working directory)
3. ~/.wiring-analyst/config.yaml (user home)

Environment variables override YAML: WIRING_ANALYST_<SECTION>_<KEY>.
${VAR} references in YAML values resolve from environment at load time.
The conventional OPENAI_* variables fill values left unset by both.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from src.errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "WIRING_ANALYST_"
CONFIG_PATH_ENV = "WIRING_ANALYST_CONFIG_PATH"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

# Field → conventional environment variable used when the field is unset.
_OPENAI_ENV_FALLBACKS = {
    "api_key": "OPENAI_API_KEY",
    "base_url": "OPENAI_BASE_URL",
    "analyze_assistant_id": "OPENAI_ASSISTANT_ID_ANALYZE",
    "chat_assistant_id": "OPENAI_ASSISTANT_ID_CHAT",
}


def resolve_env_vars(value: str) -> str:
    """Resolve ${VAR} references in a string from environment variables.

    Missing env vars resolve to empty string.
    """
    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), "")

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    """Recursively resolve ${VAR} references in a nested data structure."""
    if isinstance(data, str):
        return resolve_env_vars(data)
    elif isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    return data


class OpenAIConfig(BaseModel):
    """Assistant service credentials and assistant identities."""

    api_key: str = ""
    base_url: str | None = None
    analyze_assistant_id: str = ""
    chat_assistant_id: str = ""
    request_timeout_seconds: float = 60.0
    allow_chat_assistant_override: bool = True

    def require_api_key(self) -> str:
        """Return the API key or raise ConfigurationError naming it."""
        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY")
        return self.api_key

    def require_analyze_assistant(self) -> str:
        """Return the analysis assistant id or raise ConfigurationError."""
        if not self.analyze_assistant_id:
            raise ConfigurationError("OPENAI_ASSISTANT_ID_ANALYZE")
        return self.analyze_assistant_id

    def require_chat_assistant(self) -> str:
        """Return the chat assistant id or raise ConfigurationError."""
        if not self.chat_assistant_id:
            raise ConfigurationError("OPENAI_ASSISTANT_ID_CHAT")
        return self.chat_assistant_id


class RunsConfig(BaseModel):
    """Run polling budget."""

    poll_interval_seconds: float = Field(default=1.0, ge=0)
    max_poll_attempts: int = Field(default=120, ge=1)
    recent_turn_limit: int = Field(default=15, ge=1, le=100)


class UploadsConfig(BaseModel):
    """Upload batch policy."""

    max_files: int = Field(default=50, ge=1)
    max_file_bytes: int = Field(default=50 * 1024 * 1024, ge=1)
    purpose: str = "assistants"


class ExtractionConfig(BaseModel):
    """Structured table extraction settings.

    ``shallow`` only checks that ``controller`` and a ``rows`` list are
    present; ``strict`` validates every row field and enum value.
    """

    strictness: Literal["shallow", "strict"] = "shallow"


class ServerConfig(BaseModel):
    """HTTP server settings."""

    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "info"
    allowed_origins: list[str] = []
    serialize_thread_runs: bool = False


class AppConfig(BaseModel):
    """Top-level configuration for Wiring Analyst."""

    openai: OpenAIConfig = OpenAIConfig()
    runs: RunsConfig = RunsConfig()
    uploads: UploadsConfig = UploadsConfig()
    extraction: ExtractionConfig = ExtractionConfig()
    server: ServerConfig = ServerConfig()


def _find_config_file() -> Path | None:
    """Search for config file in standard locations."""
    candidates = [
        Path.cwd() / "wiring-analyst.yaml",
        Path.cwd() / "wiring-analyst.yml",
        Path.home() / ".wiring-analyst" / "config.yaml",
        Path.home() / ".wiring-analyst" / "config.yml",
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def _coerce_env_value(value: str) -> Any:
    """Coerce an override string to int, float, bool, list or keep as string."""
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if "," in value:
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply WIRING_ANALYST_<SECTION>_<KEY> env var overrides to config data.

    For example, ``WIRING_ANALYST_RUNS_MAX_POLL_ATTEMPTS`` maps to section
    ``runs``, field ``max_poll_attempts``.
    """
    known_sections = sorted(AppConfig.model_fields.keys(), key=len, reverse=True)
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX) or key == CONFIG_PATH_ENV:
            continue
        suffix = key[len(ENV_PREFIX):].lower()
        matched_section = None
        matched_field = None
        for section in known_sections:
            section_prefix = section + "_"
            if suffix.startswith(section_prefix):
                matched_section = section
                matched_field = suffix[len(section_prefix):]
                break
        if matched_section is None or not matched_field:
            continue
        section_data = data.setdefault(matched_section, {})
        if not isinstance(section_data, dict):
            continue
        if matched_field == "allowed_origins":
            section_data[matched_field] = [o.strip() for o in value.split(",") if o.strip()]
        elif matched_field in ("api_key", "analyze_assistant_id", "chat_assistant_id", "base_url"):
            section_data[matched_field] = value
        else:
            section_data[matched_field] = _coerce_env_value(value)
    return data


def _apply_openai_fallbacks(data: dict[str, Any]) -> dict[str, Any]:
    """Fill unset openai fields from the conventional OPENAI_* variables."""
    section = data.setdefault("openai", {})
    if not isinstance(section, dict):
        return data
    for field_name, env_name in _OPENAI_ENV_FALLBACKS.items():
        if section.get(field_name):
            continue
        env_value = os.environ.get(env_name, "").strip()
        if env_value:
            section[field_name] = env_value
    return data


def load_config(config_path: str | None = None) -> AppConfig:
    """Load configuration from YAML file, environment overrides and defaults.

    Unlike a missing explicit path, a missing default config file is not an
    error: the environment alone can configure the service.

    Args:
        config_path: Explicit path to config file. Falls back to
            WIRING_ANALYST_CONFIG_PATH, then standard locations.

    Returns:
        Parsed and validated AppConfig.

    Raises:
        FileNotFoundError: If an explicit config path does not exist.
    """
    explicit = config_path or os.environ.get(CONFIG_PATH_ENV)
    if explicit:
        path: Path | None = Path(explicit).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {explicit}")
    else:
        path = _find_config_file()

    raw_data: dict[str, Any] = {}
    if path is not None:
        logger.info("Loading config from %s", path)
        with open(path) as f:
            raw_data = yaml.safe_load(f) or {}

    data = _resolve_env_vars_recursive(raw_data)
    data = _apply_env_overrides(data)
    data = _apply_openai_fallbacks(data)
    return AppConfig(**data)


def mask_secret(value: str) -> str:
    """Mask a secret for display, keeping only the last four characters."""
    if not value:
        return "(not set)"
    if len(value) <= 4:
        return "****"
    return "****" + value[-4:]
