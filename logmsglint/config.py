"""Configuration using Pydantic models and Pydantic Settings."""

from functools import lru_cache
from typing import Any, List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from logmsglint.errors import InvalidConfigurationError

CONFIG_SECTION = "logmsglint"


def _normalize_patterns(value: Any) -> Any:
    """Accept a single pattern string or a list; strip items and drop empty ones."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if isinstance(value, (list, tuple)):
        patterns = []
        for item in value:
            if not isinstance(item, str):
                raise ValueError(f"pattern list item is not a string: {type(item).__name__}")
            if item.strip():
                patterns.append(item.strip())
        return patterns
    raise ValueError(f"expected a list of strings, got {type(value).__name__}")


class LintConfig(BaseModel):
    """Analyzer configuration as handed over by a host tool."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    sensitive_patterns: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("sensitive-patterns", "sensitive_patterns", "sensitivePatterns"),
    )

    @field_validator("sensitive_patterns", mode="before")
    @classmethod
    def validate_patterns(cls, v: Any) -> Any:
        return _normalize_patterns(v)


def parse_config(raw: Any) -> LintConfig:
    """Parse a raw configuration value.

    Accepts ``None`` (defaults), a ``LintConfig``, or a mapping, optionally
    nested under a ``logmsglint`` key. Anything else is rejected rather than
    replaced with defaults, so a typo never goes unnoticed.

    Raises:
        InvalidConfigurationError: If ``raw`` has the wrong shape or a
            pattern entry is not a string
    """
    if raw is None:
        return LintConfig()
    if isinstance(raw, LintConfig):
        return raw
    if not isinstance(raw, dict):
        raise InvalidConfigurationError(f"expected a mapping, got {type(raw).__name__}")

    if CONFIG_SECTION in raw and isinstance(raw[CONFIG_SECTION], dict):
        raw = raw[CONFIG_SECTION]

    data = {key: value for key, value in raw.items() if isinstance(key, str)}
    try:
        return LintConfig.model_validate(data)
    except ValidationError as e:
        raise InvalidConfigurationError(str(e)) from e


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LOGMSGLINT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: str = "development"
    log_level: str = "WARNING"

    # JSON list in the environment, e.g. LOGMSGLINT_SENSITIVE_PATTERNS='["session[_-]?id"]'
    sensitive_patterns: List[str] = []

    cors_origins: List[str] = ["http://localhost:3000"]

    exclude_dirs: List[str] = [
        ".git", "__pycache__", ".venv", "venv", "node_modules", "build", "dist",
        ".tox", ".nox", ".mypy_cache", ".pytest_cache", "eggs", ".eggs",
    ]

    @field_validator("sensitive_patterns", mode="before")
    @classmethod
    def validate_patterns(cls, v: Any) -> Any:
        return _normalize_patterns(v)

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"log_level must be a standard logging level, got {v!r}")
        return level

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    def lint_config(self) -> LintConfig:
        return LintConfig(sensitive_patterns=self.sensitive_patterns)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
