"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Optional

import pendulum
import yaml
from pendulum import DateTime
from pydantic import BaseModel, Field, field_validator

from .domain.constraint_validator import DEFAULT_DAILY_REST_BUDGET_HOURS, ConstraintValidator
from .domain.daily_aggregator import DailyDurationAggregator


class RulesConfig(BaseModel):
    """Tunable admissibility rules."""
    daily_rest_budget_hours: float = DEFAULT_DAILY_REST_BUDGET_HOURS
    check_rest_overlaps: bool = False

    @field_validator("daily_rest_budget_hours")
    @classmethod
    def validate_budget(cls, value: float) -> float:
        """Ensure the daily rest budget is positive."""
        if value <= 0:
            raise ValueError("daily_rest_budget_hours must be greater than zero")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "UTC"
    rules: RulesConfig = Field(default_factory=RulesConfig)
    schedule_file: Optional[Path] = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA identifier."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    def start_of_day(self, instant: DateTime) -> DateTime:
        """Midnight of the day containing ``instant`` in the configured timezone."""
        return instant.in_timezone(self.timezone).start_of("day")

    def build_validator(self) -> ConstraintValidator:
        """Create a validator using the configured rules and day boundaries."""
        return ConstraintValidator(
            daily_rest_budget_hours=self.rules.daily_rest_budget_hours,
            aggregator=DailyDurationAggregator(start_of_day=self.start_of_day),
            check_rest_overlaps=self.rules.check_rest_overlaps,
        )

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.
        
        Args:
            config_path: Path to the YAML config file
            
        Returns:
            AppConfig instance
            
        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)

        # Relative schedule paths are resolved against the config file location
        if config.schedule_file is not None and not config.schedule_file.is_absolute():
            config.schedule_file = config_path.parent / config.schedule_file

        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"
    
    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"
    
    return config_path


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Load the given config file, or defaults when no file is present.

    An explicitly given path must exist.
    """
    if config_path is not None:
        return AppConfig.load_from_yaml(config_path)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)
    return AppConfig()
