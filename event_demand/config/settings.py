"""Application settings with Pydantic Settings validation.

Environment variables (and an optional .env file) take precedence.
Non-sensitive defaults are loaded from config/*.yaml, validated against
JSON schemas in config/schemas/ when present, and deep-merged.
"""

import json
from pathlib import Path
from typing import Any, Final, cast

import yaml
from jsonschema import ValidationError as JSONSchemaValidationError
from jsonschema import validate
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from event_demand.config.logging_config import get_logger
from event_demand.domain.pricing_constants import (
    DEFAULT_BASE_RATE,
    DEFAULT_MAX_RATE,
    DEFAULT_MIN_RATE,
)

SOURCE_TIMEOUT_SECONDS_DEFAULT: Final[float] = 60.0
SOURCE_MAX_PAGES_DEFAULT: Final[int] = 10
SOURCE_PAGE_SIZE_DEFAULT: Final[int] = 100
SOURCE_PAGE_DELAY_SECONDS_DEFAULT: Final[float] = 0.5
SYNC_HORIZON_DAYS_DEFAULT: Final[int] = 90

# Downtown Memphis
DOWNTOWN_LATITUDE_DEFAULT: Final[float] = 35.1495
DOWNTOWN_LONGITUDE_DEFAULT: Final[float] = -90.0490

DEFAULT_CONFIG_DIR: Final[Path] = Path("config")

logger = cast(Any, get_logger(__name__))


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge into base (takes precedence)

    Returns:
        Merged dictionary
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_schema(schema_name: str, config_dir: Path = DEFAULT_CONFIG_DIR) -> dict[str, Any]:
    """Load a JSON Schema from ``<config_dir>/schemas/``.

    Returns:
        JSON Schema dictionary or empty dict if not found
    """
    schema_path = config_dir / "schemas" / f"{schema_name}.schema.json"
    if not schema_path.exists():
        return {}

    try:
        with open(schema_path, encoding="utf-8") as f:
            return cast(dict[str, Any], json.load(f))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("config_schema_load_failed", schema=schema_name, error=str(e))
        return {}


def validate_config_section(
    config: dict[str, Any],
    schema_name: str,
    file_path: str = "",
    config_dir: Path = DEFAULT_CONFIG_DIR,
) -> None:
    """Validate a config section against its JSON Schema.

    Raises:
        ValueError: If validation fails
    """
    schema = load_schema(schema_name, config_dir)
    if not schema:
        return

    try:
        validate(instance=config, schema=schema)
        logger.debug("config_validation_succeeded", schema=schema_name)
    except JSONSchemaValidationError as e:
        error_msg = f"Config validation failed for {schema_name}"
        if file_path:
            error_msg += f" (file: {file_path})"
        error_msg += f": {e.message}"
        raise ValueError(error_msg) from e


def load_all_configs(config_dir: Path = DEFAULT_CONFIG_DIR) -> dict[str, Any]:
    """Load and merge all YAML configs from ``config_dir``.

    Loading order (later overrides earlier): main.yaml first, then every other
    *.yaml file alphabetically. Unreadable files are logged and skipped;
    schema violations raise.

    Returns:
        Merged configuration dictionary
    """
    if not config_dir.is_dir():
        return {}

    yaml_files = sorted(
        config_dir.glob("*.yaml"), key=lambda path: (path.name != "main.yaml", path.name)
    )

    merged_config: dict[str, Any] = {}
    for yaml_file in yaml_files:
        try:
            with open(yaml_file, encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
        except (yaml.YAMLError, OSError) as e:
            logger.warning("config_file_load_failed", path=str(yaml_file), error=str(e))
            continue

        try:
            validate_config_section(
                file_config, yaml_file.stem, str(yaml_file), config_dir
            )
        except ValueError as e:
            logger.error(
                "config_validation_failed",
                path=str(yaml_file),
                schema=yaml_file.stem,
                error=str(e),
            )
            raise

        merged_config = deep_merge(merged_config, file_config)
        logger.debug("config_file_loaded", path=str(yaml_file))

    logger.info("config_load_complete", file_count=len(yaml_files))
    return merged_config


# YAML section/key → settings field
_YAML_FIELD_MAP: Final[dict[tuple[str, str], str]] = {
    ("pricing", "base_rate"): "default_base_rate",
    ("pricing", "min_rate"): "default_min_rate",
    ("pricing", "max_rate"): "default_max_rate",
    ("sources", "enabled"): "enabled_sources",
    ("sources", "timeout_seconds"): "source_timeout_seconds",
    ("sources", "max_pages"): "source_max_pages",
    ("sources", "page_size"): "source_page_size",
    ("sources", "page_delay_seconds"): "source_page_delay_seconds",
    ("sync", "horizon_days"): "sync_horizon_days",
    ("location", "downtown_latitude"): "downtown_latitude",
    ("location", "downtown_longitude"): "downtown_longitude",
    ("logging", "level"): "log_level",
    ("logging", "json"): "json_logs",
}


class Settings(BaseSettings):
    """Application settings.

    Environment variables win over YAML values, which win over defaults.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Pricing fallbacks (host settings take precedence per invocation)
    default_base_rate: float = Field(
        default=DEFAULT_BASE_RATE, gt=0, description="Base nightly rate fallback"
    )
    default_min_rate: float = Field(
        default=DEFAULT_MIN_RATE, gt=0, description="Minimum nightly rate fallback"
    )
    default_max_rate: float = Field(
        default=DEFAULT_MAX_RATE, gt=0, description="Maximum nightly rate fallback"
    )

    # Sources
    enabled_sources: list[str] = Field(
        default_factory=list,
        description="Source names to fetch (empty = every registered adapter)",
    )
    source_timeout_seconds: float = Field(
        default=SOURCE_TIMEOUT_SECONDS_DEFAULT,
        gt=0,
        description="Per-source fetch timeout in seconds",
    )
    source_max_pages: int = Field(
        default=SOURCE_MAX_PAGES_DEFAULT, ge=1, description="Max pages per source"
    )
    source_page_size: int = Field(
        default=SOURCE_PAGE_SIZE_DEFAULT, ge=1, description="Events per page"
    )
    source_page_delay_seconds: float = Field(
        default=SOURCE_PAGE_DELAY_SECONDS_DEFAULT,
        ge=0,
        description="Delay between page requests in seconds",
    )

    # Sync window
    sync_horizon_days: int = Field(
        default=SYNC_HORIZON_DAYS_DEFAULT,
        ge=0,
        description="Days ahead of the start date when no end date is given",
    )

    # Location
    downtown_latitude: float = Field(
        default=DOWNTOWN_LATITUDE_DEFAULT, description="Downtown reference latitude"
    )
    downtown_longitude: float = Field(
        default=DOWNTOWN_LONGITUDE_DEFAULT, description="Downtown reference longitude"
    )

    # Observability
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    def __init__(self, config_dir: Path | None = None, **data: Any):
        """Initialize settings, then apply YAML defaults from ``config_dir``."""
        config = load_all_configs(config_dir or DEFAULT_CONFIG_DIR)

        super().__init__(**data)
        self._apply_yaml_defaults(config)

    def _apply_yaml_defaults(self, config: dict[str, Any]) -> None:
        """Apply YAML-sourced values without overriding env-provided ones."""

        fields_from_env = set(self.model_fields_set)

        for (section, key), field_name in _YAML_FIELD_MAP.items():
            section_config = config.get(section) or {}
            value = section_config.get(key)
            if value is None or field_name in fields_from_env:
                continue

            object.__setattr__(self, field_name, value)
            self.model_fields_set.add(field_name)

        self._check_rate_bounds()

    @model_validator(mode="after")
    def _validate_rates(self) -> "Settings":
        self._check_rate_bounds()
        return self

    def _check_rate_bounds(self) -> None:
        if self.default_min_rate > self.default_max_rate:
            raise ValueError(
                f"default_min_rate {self.default_min_rate} exceeds "
                f"default_max_rate {self.default_max_rate}"
            )

    def is_source_enabled(self, source_name: str) -> bool:
        """Check if a source should be fetched.

        Args:
            source_name: Adapter source name

        Returns:
            True when no allow-list is configured or the source is on it
        """
        return not self.enabled_sources or source_name in self.enabled_sources


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
