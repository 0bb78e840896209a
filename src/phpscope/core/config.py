"""Global configuration for phpscope.

This module provides centralized configuration management with support for
environment variables and sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class ScopeConfig(BaseSettings):
    """phpscope configuration settings.

    Values can be overridden via environment variables with PHPSCOPE_ prefix.
    Example: PHPSCOPE_PARSE_FUNCTION_BODY=false disables static variable
    discovery inside function bodies.
    """

    # Parsing
    parse_function_body: bool = Field(
        default=True,
        description="Parse function bodies for static variable declarations",
    )
    save_token_streams: bool = Field(
        default=True,
        description="Keep token streams of processed files for source extraction",
    )

    # Directory processing
    file_extensions: list[str] = Field(
        default_factory=lambda: [".php"],
        description="File extensions picked up when processing a directory",
    )
    exclude_dirs: list[str] = Field(
        default_factory=lambda: ["vendor", ".git"],
        description="Directory names skipped when processing a directory",
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Logging level used by the command line interface",
    )

    model_config = {
        "env_prefix": "PHPSCOPE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_config() -> ScopeConfig:
    """Get cached configuration instance.

    Returns:
        ScopeConfig singleton instance.
    """
    return ScopeConfig()


def reload_config() -> ScopeConfig:
    """Reload configuration (clears cache).

    Returns:
        Fresh ScopeConfig instance.
    """
    get_config.cache_clear()
    return get_config()
