"""Configuration management for keepson."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


# Default paths
DEFAULT_KEEPSON_DIR = Path.home() / ".keepson"
DEFAULT_DB_PATH = DEFAULT_KEEPSON_DIR / "records.db"
DEFAULT_CONFIG_PATH = DEFAULT_KEEPSON_DIR / "config.yaml"

DEFAULT_OWNER = "local"


def _resolve_env(value: Optional[str]) -> Optional[str]:
    """Resolve ``${ENV_VAR}`` references to the environment value."""
    if value and value.startswith("${") and value.endswith("}"):
        return os.environ.get(value[2:-1])
    return value


@dataclass
class SearchConfig:
    """Search configuration."""
    default_limit: int = 20
    max_limit: int = 100
    max_query_length: int = 500


@dataclass
class LLMConfig:
    """LLM backend configuration shared by the query oracle and summaries."""
    backend: Optional[str] = None  # "anthropic", "openai", or None (disabled)
    model: Optional[str] = None  # e.g., "claude-3-haiku-20240307", "gpt-4o-mini"
    api_key: Optional[str] = None
    timeout: float = 10.0

    def __post_init__(self):
        self.api_key = _resolve_env(self.api_key)

    @property
    def enabled(self) -> bool:
        """Check if the backend is configured."""
        return bool(self.backend and self.model)

    @classmethod
    def from_dict(cls, data: dict) -> "LLMConfig":
        return cls(
            backend=data.get("backend"),
            model=data.get("model"),
            api_key=data.get("api_key"),
            timeout=float(data.get("timeout", 10.0)),
        )

    def to_dict(self) -> dict:
        data = {
            "backend": self.backend,
            "model": self.model,
            "timeout": self.timeout,
        }
        if self.api_key:
            data["api_key"] = self.api_key
        return data


@dataclass
class Config:
    """Main configuration."""
    db_path: Path = DEFAULT_DB_PATH
    default_owner: str = DEFAULT_OWNER
    search: SearchConfig = field(default_factory=SearchConfig)
    oracle: LLMConfig = field(default_factory=LLMConfig)
    summaries: LLMConfig = field(default_factory=LLMConfig)
    tag_aliases: dict[str, str] = field(default_factory=dict)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load configuration from YAML file."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        search_data = data.get("search", {})
        search = SearchConfig(
            default_limit=search_data.get("default_limit", 20),
            max_limit=search_data.get("max_limit", 100),
            max_query_length=search_data.get("max_query_length", 500),
        )

        db_path = DEFAULT_DB_PATH
        if "db_path" in data:
            db_path = Path(data["db_path"]).expanduser()

        return cls(
            db_path=db_path,
            default_owner=data.get("default_owner", DEFAULT_OWNER),
            search=search,
            oracle=LLMConfig.from_dict(data.get("oracle", {})),
            summaries=LLMConfig.from_dict(data.get("summaries", {})),
            tag_aliases=data.get("tag_aliases", {}),
        )

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save configuration to YAML file."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "db_path": str(self.db_path),
            "default_owner": self.default_owner,
            "search": {
                "default_limit": self.search.default_limit,
                "max_limit": self.search.max_limit,
                "max_query_length": self.search.max_query_length,
            },
        }

        # Only write LLM sections that are actually configured
        if self.oracle.enabled:
            data["oracle"] = self.oracle.to_dict()
        if self.summaries.enabled:
            data["summaries"] = self.summaries.to_dict()

        if self.tag_aliases:
            data["tag_aliases"] = self.tag_aliases

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


# Global config instance (lazy loaded)
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


def reload_config() -> Config:
    """Reload configuration from disk."""
    global _config
    _config = Config.load()
    return _config
