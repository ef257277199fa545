"""
Configuration for healthmem.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class StoreConfig(BaseModel):
    """Node store configuration."""

    backend: str = "memory"  # memory, sqlite
    db_path: str = "data/healthmem.db"


class LocalModelConfig(BaseModel):
    """Locally hosted model (Ollama) configuration."""

    enabled: bool = True
    model: str = "phi3:mini"
    base_url: str = "http://localhost:11434"
    timeout: float = 120.0


class CloudModelConfig(BaseModel):
    """Cloud model (OpenAI-compatible API) configuration."""

    api_key: str | None = None
    model: str = "gemini-1.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    timeout: float = 60.0


class RouterConfig(BaseModel):
    """Adaptive local/cloud routing configuration."""

    strategy: str = "hybrid"  # local_only, cloud_only, hybrid
    max_monthly_tokens: int = Field(default=1_000_000, ge=0)
    prefer_local_under_tokens: int = Field(default=2048, ge=0)
    request_timeout: float = Field(default=90.0, gt=0)


class RetrievalConfig(BaseModel):
    """Ranking and multi-hop traversal configuration."""

    bm25_k1: float = 1.5
    bm25_b: float = 0.75
    mmr_lambda: float = Field(default=0.7, ge=0.0, le=1.0)
    diversity_relevance_floor: float = Field(default=0.1, ge=0.0, le=1.0)
    diversity_type_bonus: float = 0.5
    recency_half_life_days: float = Field(default=30.0, gt=0)
    max_hops: int = Field(default=2, ge=0)
    top_k: int = Field(default=3, ge=1)


class TokenizerConfig(BaseModel):
    """Prompt size counting configuration."""

    provider: str = "tiktoken"  # tiktoken, approximate
    model: str = "cl100k_base"
    chars_per_token: float = 4.0


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class Config(BaseModel):
    """Main configuration."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    local_model: LocalModelConfig = Field(default_factory=LocalModelConfig)
    cloud_model: CloudModelConfig = Field(default_factory=CloudModelConfig)
    router: RouterConfig = Field(default_factory=RouterConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    tokenizer: TokenizerConfig = Field(default_factory=TokenizerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Patient used when a caller does not pass one
    default_patient_id: str = "default"

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in project root)

        Returns:
            Config instance

        Environment variables:
            See ENV_VARS; unset or empty variables keep the default.
        """
        return cls(**cls.env_overrides(env_file=env_file))

    @classmethod
    def env_overrides(cls, env_file: str | Path | None = None) -> dict[str, Any]:
        """
        Settings given by environment variables, as a nested dict.

        Only variables that are set and non-empty appear, converted to the
        type of the field they override.

        Args:
            env_file: Optional path to .env file

        Returns:
            Dict shaped like Config.model_dump(), holding only overridden fields
        """
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        defaults = cls().model_dump()
        overrides: dict[str, Any] = {}
        for key, path in ENV_VARS.items():
            value = os.getenv(key)
            if value is None or value == "":
                continue

            default = defaults
            for part in path:
                default = default[part]

            target = overrides
            for part in path[:-1]:
                target = target.setdefault(part, {})
            target[path[-1]] = _convert_env_value(value, default)

        return overrides

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Merged field by field: an environment variable replaces only the
        field it names, other YAML values of the same section are kept.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        return cls(**_deep_merge(config_dict, cls.env_overrides(env_file=env_file)))


# Environment variable -> field path in Config
ENV_VARS: dict[str, tuple[str, ...]] = {
    "HEALTHMEM_STORE_BACKEND": ("store", "backend"),
    "HEALTHMEM_STORE_DB_PATH": ("store", "db_path"),
    "HEALTHMEM_LOCAL_ENABLED": ("local_model", "enabled"),
    "HEALTHMEM_LOCAL_MODEL": ("local_model", "model"),
    "HEALTHMEM_LOCAL_BASE_URL": ("local_model", "base_url"),
    "HEALTHMEM_LOCAL_TIMEOUT": ("local_model", "timeout"),
    "HEALTHMEM_CLOUD_API_KEY": ("cloud_model", "api_key"),
    "HEALTHMEM_CLOUD_MODEL": ("cloud_model", "model"),
    "HEALTHMEM_CLOUD_BASE_URL": ("cloud_model", "base_url"),
    "HEALTHMEM_CLOUD_TIMEOUT": ("cloud_model", "timeout"),
    "HEALTHMEM_ROUTER_STRATEGY": ("router", "strategy"),
    "HEALTHMEM_ROUTER_MAX_MONTHLY_TOKENS": ("router", "max_monthly_tokens"),
    "HEALTHMEM_ROUTER_PREFER_LOCAL_UNDER_TOKENS": ("router", "prefer_local_under_tokens"),
    "HEALTHMEM_ROUTER_REQUEST_TIMEOUT": ("router", "request_timeout"),
    "HEALTHMEM_TOKENIZER_PROVIDER": ("tokenizer", "provider"),
    "HEALTHMEM_LOG_LEVEL": ("logging", "level"),
    "HEALTHMEM_LOG_TO_FILE": ("logging", "log_to_file"),
    "HEALTHMEM_LOG_DIR": ("logging", "log_dir"),
    "HEALTHMEM_LOG_SERIALIZE": ("logging", "serialize"),
    "HEALTHMEM_DEFAULT_PATIENT_ID": ("default_patient_id",),
}


def _convert_env_value(value: str, default: Any) -> Any:
    """Convert an environment string to the type of the field's default."""
    if isinstance(default, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return value


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# Default config instance
default_config = Config()
