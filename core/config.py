"""Configuration management for the agent CSV column mapper."""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load environment variables from .env file in ops folder
env_path = Path(__file__).parent.parent / "ops" / ".env"
load_dotenv(dotenv_path=env_path)


class MappingConfig(BaseSettings):
    """Column mapping thresholds and strategy selection."""

    min_confidence: float = Field(default=0.5, alias="MAPPING_MIN_CONFIDENCE")
    tie_epsilon: float = Field(default=0.05, alias="MAPPING_TIE_EPSILON")
    sample_bonus_max: float = Field(default=0.1, alias="MAPPING_SAMPLE_BONUS_MAX")
    fuzzy_max_distance_ratio: float = Field(
        default=0.4, alias="MAPPING_FUZZY_MAX_DISTANCE_RATIO"
    )
    fuzzy_confidence_cap: float = Field(
        default=0.6, alias="MAPPING_FUZZY_CONFIDENCE_CAP"
    )
    fuzzy_scorer: str = Field(default="edit_distance", alias="MAPPING_FUZZY_SCORER")
    assignment_strategy: str = Field(
        default="greedy", alias="MAPPING_ASSIGNMENT_STRATEGY"
    )
    sample_rows: int = Field(default=3, alias="MAPPING_SAMPLE_ROWS")
    registry_path: Optional[Path] = Field(default=None, alias="MAPPING_REGISTRY_PATH")
    """Optional replacement for the bundled canonical_fields.yaml."""
    max_content_bytes: int = Field(
        default=50 * 1024 * 1024, alias="MAPPING_MAX_CONTENT_BYTES"
    )

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"
        populate_by_name = True


class AppConfig(BaseSettings):
    """Main application configuration."""

    # Application settings
    app_name: str = Field(default="agent-csv-mapper", alias="APP_NAME")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Column mapping settings
    mapping: MappingConfig = Field(default_factory=MappingConfig)

    # CORS configuration
    cors_origins: str = Field(default="", alias="CORS_ORIGINS")

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"
        populate_by_name = True


# Global configuration instance
config = AppConfig()


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    return config


def reload_config() -> AppConfig:
    """Reload configuration from environment variables."""
    global config
    config = AppConfig()
    return config
