"""
YAML configuration loader with validation.

Loads pipeline settings, forum source definitions and challenge markers
from YAML files with:
- Environment variable substitution
- Schema validation
- Default values
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
import structlog

from forum_notices.core.detector import ChallengeSignature
from forum_notices.core.errors import ConfigError
from forum_notices.core.http_client import DEFAULT_USER_AGENT
from forum_notices.indexer import DEFAULT_NOTICE_BASE_URL
from forum_notices.navigators.base import SourceConfig
from forum_notices.publisher import DEFAULT_PUBLISH_CANDIDATES

logger = structlog.get_logger(__name__)

SOURCES_FILE = "sources.yml"
MARKERS_FILE = "challenge_markers.yml"

MAX_CONCURRENCY = 10


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variables in text.

    Supports formats:
    - ${VAR_NAME} - required, empty string and a warning if missing
    - ${VAR_NAME:-default} - optional with default

    Args:
        text: Text with env var placeholders

    Returns:
        Text with substituted values
    """
    def replace(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)
        else:
            value = os.getenv(var_expr)
            if value is None:
                logger.warning("env_var_not_set", var=var_expr)
                return ""
            return value

    return re.sub(r"\$\{([^}]+)\}", replace, text)


@dataclass
class PipelineSettings:
    """Run-wide settings (the `pipeline:` block of sources.yml)."""
    notice_dir: str = "notice"
    notice_base_url: str = DEFAULT_NOTICE_BASE_URL
    publish_candidates: list[str] = field(default_factory=lambda: list(DEFAULT_PUBLISH_CANDIDATES))
    max_concurrency: int = 4
    max_posts: int = 5
    timeout: float = 15.0
    retry_attempts: int = 3
    retry_backoff: float = 1.0
    requests_per_second: float = 1.0
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        if not 1 <= self.max_concurrency <= MAX_CONCURRENCY:
            raise ConfigError(f"max_concurrency must be between 1 and {MAX_CONCURRENCY}")
        if self.max_posts < 1:
            raise ConfigError("max_posts must be positive")
        if self.retry_attempts < 1:
            raise ConfigError("retry_attempts must be positive")
        if self.timeout <= 0:
            raise ConfigError("timeout must be positive")

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "PipelineSettings":
        """Create from dictionary, ignoring unknown keys."""
        data = data or {}
        defaults = cls()
        try:
            return cls(
                notice_dir=str(data.get("notice_dir", defaults.notice_dir)),
                notice_base_url=str(data.get("notice_base_url", defaults.notice_base_url)),
                publish_candidates=[str(c) for c in data.get("publish_candidates", defaults.publish_candidates)],
                max_concurrency=int(data.get("max_concurrency", defaults.max_concurrency)),
                max_posts=int(data.get("max_posts", defaults.max_posts)),
                timeout=float(data.get("timeout", defaults.timeout)),
                retry_attempts=int(data.get("retry_attempts", defaults.retry_attempts)),
                retry_backoff=float(data.get("retry_backoff", defaults.retry_backoff)),
                requests_per_second=float(data.get("requests_per_second", defaults.requests_per_second)),
                user_agent=str(data.get("user_agent", defaults.user_agent)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid pipeline settings: {e}") from e


class ConfigLoader:
    """
    Configuration loader for the notice pipeline.

    Loads YAML config files and validates against expected schema.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
                       (defaults to package config directory)
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path(__file__).parent

    def load_file(self, filename: str) -> dict:
        """
        Load YAML config file.

        Args:
            filename: Config file name (relative to config_dir)

        Returns:
            Parsed config dict

        Raises:
            ConfigError: If the file is missing or not valid YAML
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            raise ConfigError(f"Config file not found: {filepath}")

        logger.debug("loading_config", file=str(filepath))

        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()

        # Substitute environment variables
        content = substitute_env_vars(content)

        try:
            config = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {filepath}: {e}") from e

        if config is not None and not isinstance(config, dict):
            raise ConfigError(f"Expected a mapping at top level of {filepath}")

        return config or {}

    def load_settings(self, filename: str = SOURCES_FILE) -> PipelineSettings:
        """Load the `pipeline:` block."""
        config = self.load_file(filename)
        return PipelineSettings.from_dict(config.get("pipeline"))

    def load_sources(self, filename: str = SOURCES_FILE) -> list[SourceConfig]:
        """
        Load source definitions from YAML.

        Invalid entries are logged and skipped.

        Args:
            filename: Sources config file name

        Returns:
            List of SourceConfig objects
        """
        config = self.load_file(filename)

        sources = []
        for source_data in config.get("sources", []):
            try:
                source = SourceConfig.from_dict(source_data)
                sources.append(source)
                logger.debug(
                    "source_loaded",
                    source_id=source.source_id,
                    forums=len(source.forums),
                )
            except (ConfigError, AttributeError, TypeError) as e:
                logger.error(
                    "source_load_failed",
                    source=source_data.get("source_id", "unknown") if isinstance(source_data, dict) else "unknown",
                    error=str(e),
                )

        return sources

    def load_challenge_signatures(self, filename: str = MARKERS_FILE) -> list[ChallengeSignature]:
        """
        Load bot-challenge signatures.

        Raises:
            ConfigError: If a signature has no name or no markers
        """
        config = self.load_file(filename)

        signatures = []
        for item in config.get("signatures", []):
            name = item.get("name") if isinstance(item, dict) else None
            markers = item.get("markers") if isinstance(item, dict) else None
            if not name or not markers or not isinstance(markers, list):
                raise ConfigError(f"Invalid challenge signature in {filename}: {item!r}")
            signatures.append(ChallengeSignature(name=str(name), markers=tuple(str(m) for m in markers)))

        logger.debug(
            "challenge_signatures_loaded",
            version=config.get("version"),
            count=len(signatures),
        )
        return signatures


def _split(config_path: Optional[str]) -> tuple[ConfigLoader, str]:
    if config_path:
        path = Path(config_path)
        return ConfigLoader(str(path.parent)), path.name
    return ConfigLoader(), SOURCES_FILE


def load_sources(config_path: Optional[str] = None) -> list[SourceConfig]:
    """
    Convenience function to load source configs.

    Args:
        config_path: Optional path to sources.yml

    Returns:
        List of SourceConfig objects
    """
    loader, filename = _split(config_path)
    return loader.load_sources(filename)


def load_settings(config_path: Optional[str] = None) -> PipelineSettings:
    """Convenience function to load pipeline settings."""
    loader, filename = _split(config_path)
    return loader.load_settings(filename)


def load_challenge_signatures(markers_path: Optional[str] = None) -> list[ChallengeSignature]:
    """Load challenge signatures from a file or the packaged default."""
    if markers_path:
        path = Path(markers_path)
        return ConfigLoader(str(path.parent)).load_challenge_signatures(path.name)
    return ConfigLoader().load_challenge_signatures()
