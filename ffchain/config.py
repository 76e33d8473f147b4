"""
Configuration management for ffchain.

Settings come from an optional YAML file (``ffchain.yaml`` in the working
directory, or the file named by ``FFCHAIN_CONFIG``) with environment
variable overrides applied on top.
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field

# Global configuration instance
_config: Optional["FFChainConfig"] = None


class FFmpegConfig(BaseModel):
    """FFmpeg executable settings."""
    path: Optional[str] = None  # None searches PATH
    timeout: Optional[float] = None  # Seconds; None waits indefinitely


class CatalogConfig(BaseModel):
    """Filter catalog settings."""
    dirs: list[str] = Field(default_factory=list)  # Extra catalog directories
    strict: bool = True  # Validate typed options on build()


class FFChainConfig(BaseModel):
    """Top-level configuration."""
    ffmpeg: FFmpegConfig = Field(default_factory=FFmpegConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)


def load_config(config_path: Optional[str] = None) -> FFChainConfig:
    """
    Load configuration from file.

    Args:
        config_path: Path to config file. Defaults to ``$FFCHAIN_CONFIG`` or
            ``ffchain.yaml`` in the current directory.

    Returns:
        Loaded and validated configuration.
    """
    global _config

    if config_path is None:
        config_path = os.environ.get("FFCHAIN_CONFIG")
    if config_path is None and Path("ffchain.yaml").exists():
        config_path = "ffchain.yaml"

    config_data: dict[str, Any] = {}

    if config_path and Path(config_path).exists():
        with open(config_path, encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

    # Apply environment variable overrides
    _deep_merge(config_data, _get_env_overrides())

    _config = FFChainConfig(**config_data)
    return _config


def get_config() -> FFChainConfig:
    """
    Get the current configuration.

    Returns:
        Current configuration (loads default if not yet loaded).
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> FFChainConfig:
    """Reload configuration from disk and the environment."""
    global _config
    _config = None
    return get_config()


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    env_map = {
        "FFCHAIN_FFMPEG_PATH": ("ffmpeg", "path"),
        "FFCHAIN_FFMPEG_TIMEOUT": ("ffmpeg", "timeout"),
        "FFCHAIN_STRICT": ("catalog", "strict"),
    }

    for env_var, path in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            _set_nested(overrides, path, _parse_env_value(value))

    dirs = os.environ.get("FFCHAIN_CATALOG_DIRS")
    if dirs:
        _set_nested(
            overrides,
            ("catalog", "dirs"),
            [d for d in dirs.split(os.pathsep) if d],
        )

    return overrides


def _parse_env_value(value: str) -> Any:
    """Parse environment variable value to appropriate type."""
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value


def _set_nested(d: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    """Set a nested dictionary value from a path tuple."""
    for key in path[:-1]:
        d = d.setdefault(key, {})
    d[path[-1]] = value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Deep merge override into base dictionary."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
