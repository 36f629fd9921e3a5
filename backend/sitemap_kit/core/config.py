"""Application configuration handling."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, field_validator

from sitemap_kit.entries.types import ErrorLevel

ENV_PREFIX = "SITEMAP_"
DEFAULT_CONFIG_PATH = Path("~/.config/sitemap-kit/config.yaml")

# Protocol ceiling per sitemap file, see https://www.sitemaps.org/protocol.html#index
MAX_SITEMAP_SIZE = 50_000

_YAML_KEY_MAP: Mapping[tuple[str, ...], str] = {
    ("sitemap", "hostname"): "hostname",
    ("sitemap", "cache_time"): "cache_time",
    ("sitemap", "xsl_url"): "xsl_url",
    ("sitemap", "xml_ns"): "xml_ns",
    ("validation", "level"): "level",
    ("index", "sitemap_size"): "sitemap_size",
    ("index", "sitemap_name"): "sitemap_name",
    ("index", "target_folder"): "target_folder",
    ("index", "gzip"): "gzip",
}


class Settings(BaseModel):
    """Runtime configuration loaded from YAML file and environment variables."""

    hostname: str | None = None
    cache_time: int = Field(default=0, ge=0, description="Serialization cache TTL in milliseconds")
    xsl_url: str | None = None
    xml_ns: str | None = None
    level: ErrorLevel = ErrorLevel.WARN
    sitemap_size: int = Field(default=MAX_SITEMAP_SIZE, ge=1)
    sitemap_name: str = "sitemap"
    target_folder: Path | None = None
    gzip: bool = False

    model_config = {
        "validate_assignment": True,
        "extra": "ignore",
    }

    @field_validator("target_folder", mode="before")
    @classmethod
    def _expand_target_folder(cls, value: Any) -> Path | None:
        if value is None or value == "":
            return None
        if isinstance(value, Path):
            return value.expanduser()
        if isinstance(value, str):
            return Path(value).expanduser()
        raise TypeError("target_folder must be a path or string")

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> "Settings":
        """Load YAML config and overlay env vars; fall back to defaults."""
        config_path = cls._resolve_config_path(path)
        data: dict[str, Any] = {}
        if config_path and config_path.exists():
            with config_path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
            data.update(_flatten_yaml(raw))
        data.update(_load_env_overrides())
        return cls(**data)

    @staticmethod
    def _resolve_config_path(path: Path | None) -> Path | None:
        if path is not None:
            return path.expanduser()
        env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
        if env_path:
            return Path(env_path).expanduser()
        resolved_default = DEFAULT_CONFIG_PATH.expanduser()
        return resolved_default if resolved_default.exists() else None


def _flatten_yaml(raw: Mapping[str, Any], prefix: tuple[str, ...] = ()) -> dict[str, Any]:
    """Flatten nested YAML configuration to Settings field names."""
    flat: dict[str, Any] = {}
    for key, value in raw.items():
        next_prefix = prefix + (key,)
        if isinstance(value, Mapping):
            flat.update(_flatten_yaml(value, prefix=next_prefix))
        else:
            mapped_key = _YAML_KEY_MAP.get(next_prefix)
            if mapped_key:
                flat[mapped_key] = value
            elif key in Settings.model_fields:
                flat[key] = value
    return flat


def _load_env_overrides() -> dict[str, Any]:
    """Map environment variables with SITEMAP_ prefix into Settings fields."""
    overrides: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in Settings.model_fields:
            overrides[field_name] = value
    return overrides


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor."""
    return Settings.from_yaml()


__all__ = ["MAX_SITEMAP_SIZE", "Settings", "get_settings"]
