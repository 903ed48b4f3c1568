"""Configuration models and loading utilities."""

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .state.models import SlotType

logger = logging.getLogger(__name__)


class APIConfig(BaseModel):
    """API server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000


class BuildingConfig(BaseModel):
    """Layout of one building used when seeding slots."""

    name: str
    floors: int = Field(ge=1)
    sections: list[str]
    slots_per_section: int = Field(ge=1)
    special_slots: dict[SlotType, int] = {}  # type -> number of slots per section

    @field_validator("sections")
    @classmethod
    def require_sections(cls, v: list[str]) -> list[str]:
        """A building needs at least one named section."""
        if not v or any(not s for s in v):
            raise ValueError("sections must be a non-empty list of names")
        return v


def default_buildings() -> list[BuildingConfig]:
    """The demo garage: buildings A, B and C."""
    return [
        BuildingConfig(
            name="A",
            floors=3,
            sections=["North", "South", "East", "West"],
            slots_per_section=15,
            special_slots={SlotType.HANDICAPPED: 2, SlotType.ELECTRIC: 2, SlotType.VIP: 1},
        ),
        BuildingConfig(
            name="B",
            floors=4,
            sections=["North", "South"],
            slots_per_section=20,
            special_slots={SlotType.HANDICAPPED: 3, SlotType.ELECTRIC: 4, SlotType.VIP: 2},
        ),
        BuildingConfig(
            name="C",
            floors=2,
            sections=["Main", "Wing"],
            slots_per_section=25,
            special_slots={SlotType.HANDICAPPED: 4, SlotType.ELECTRIC: 5, SlotType.COMPACT: 10},
        ),
    ]


class SeedConfig(BaseModel):
    """Demo data seeding configuration."""

    enabled: bool = False
    random_seed: Optional[int] = None  # Fix for a reproducible layout
    occupied_ratio: float = Field(default=0.3, ge=0.0, le=1.0)
    special_probability: float = Field(default=0.3, ge=0.0, le=1.0)
    demo_user_id: str = "demo-user"
    demo_vehicles: list[str] = Field(default=["ABC123", "XYZ789"], min_length=1)
    buildings: list[BuildingConfig] = Field(default_factory=default_buildings)


class AppConfig(BaseModel):
    """Main application configuration."""

    api: APIConfig = APIConfig()
    seed: SeedConfig = SeedConfig()
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept level names in any case."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


def load_config(path: str | Path) -> AppConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f)

    return AppConfig(**(data or {}))


def load_config_or_default(path: str | Path) -> AppConfig:
    """Load configuration, falling back to defaults when the file is missing."""
    try:
        return load_config(path)
    except FileNotFoundError:
        logger.warning(f"Configuration file not found: {path}, using defaults")
        return AppConfig()


def get_config_path() -> Path:
    """Get the default configuration file path."""
    # Check for config in current directory first
    local_config = Path("config/config.yaml")
    if local_config.exists():
        return local_config

    # Check for config in parent directory (for Docker)
    parent_config = Path("/app/config/config.yaml")
    if parent_config.exists():
        return parent_config

    return local_config  # Return default even if doesn't exist
