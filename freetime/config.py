"""
Configuration management using Pydantic settings, YAML and environment overrides.
"""

from pathlib import Path
from typing import Annotated, Any, Dict, List, Mapping, Optional, Tuple, Type

import pendulum
import yaml
from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .domain.clock import DEFAULT_TIMEZONE
from .domain.models import WorkWindow


class EnvironmentFirstSettings(BaseSettings):
    """
    Settings whose environment variables win over values passed in.

    Values passed to the constructor come from config.yaml, so a deployment
    can override any file setting through its environment.
    """

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings, dotenv_settings, file_secret_settings


class WorkHoursConfig(BaseModel):
    """Working-hours window and horizon used for the search."""
    start_hour: int = 10
    end_hour: int = 19
    min_slot_minutes: int = 60
    horizon_days: int = 7

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 24."""
        if not 0 <= v <= 24:
            raise ValueError(f"Hour must be between 0 and 24, got {v}")
        return v

    @field_validator("min_slot_minutes")
    @classmethod
    def validate_min_slot(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("min_slot_minutes must be greater than zero")
        return value

    @field_validator("horizon_days")
    @classmethod
    def validate_horizon(cls, value: int) -> int:
        if value < 0:
            raise ValueError("horizon_days must not be negative")
        return value

    @model_validator(mode="after")
    def validate_hours_order(self) -> "WorkHoursConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self


class GoogleConfig(EnvironmentFirstSettings):
    """
    Service account and calendars to read busy time from.

    Environment: GOOGLE_SERVICE_ACCOUNT_EMAIL, GOOGLE_SERVICE_ACCOUNT_PRIVATE_KEY,
    GOOGLE_CALENDAR_IDS (comma separated).
    """
    service_account_email: str = ""
    service_account_private_key: str = ""
    calendar_ids: Annotated[List[str], NoDecode] = Field(default_factory=list)

    model_config = SettingsConfigDict(env_prefix="GOOGLE_", env_ignore_empty=True, extra="ignore")

    @field_validator("calendar_ids", mode="before")
    @classmethod
    def split_calendar_ids(cls, value: Any) -> Any:
        """Accept the comma separated form used in environment variables."""
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, list):
            # Preserve order while dropping blanks and duplicates
            seen: set = set()
            cleaned: List[str] = []
            for item in value:
                calendar_id = str(item).strip()
                if calendar_id and calendar_id not in seen:
                    cleaned.append(calendar_id)
                    seen.add(calendar_id)
            return cleaned
        return value

    def is_configured(self) -> bool:
        """True when credentials and at least one calendar are present."""
        return bool(
            self.service_account_email and self.service_account_private_key and self.calendar_ids
        )


class SlackConfig(EnvironmentFirstSettings):
    """Slack app credentials. Environment: SLACK_SIGNING_SECRET."""
    signing_secret: str = ""

    model_config = SettingsConfigDict(env_prefix="SLACK_", env_ignore_empty=True, extra="ignore")


class AppConfig(EnvironmentFirstSettings):
    """
    Application configuration.

    Environment: ENVIRONMENT, FREETIME_TIMEZONE, FREETIME_LOG_LEVEL; the
    google and slack sections read their own variables.
    """
    timezone: str = DEFAULT_TIMEZONE
    environment: str = Field(
        default="development", validation_alias=AliasChoices("environment", "ENVIRONMENT")
    )
    log_level: str = "INFO"
    work_hours: WorkHoursConfig = Field(default_factory=WorkHoursConfig)
    exclude_days: List[int] = Field(default_factory=lambda: [5, 6])  # Saturday, Sunday
    google: GoogleConfig = Field(default_factory=GoogleConfig)
    slack: SlackConfig = Field(default_factory=SlackConfig)

    model_config = SettingsConfigDict(env_prefix="FREETIME_", env_ignore_empty=True, extra="ignore")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Reject unknown IANA zone names early."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("exclude_days")
    @classmethod
    def validate_exclude_days(cls, value: List[int]) -> List[int]:
        """Ensure weekdays are in valid range and deduplicated."""
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"exclude_days must be between 0 and 6, got {invalid_days}")
        # Preserve order while removing duplicates
        seen: set[int] = set()
        deduped: List[int] = []
        for day in value:
            if day not in seen:
                deduped.append(day)
                seen.add(day)
        return deduped

    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def get_work_window(self) -> WorkWindow:
        """Build the domain work window from the configured hours."""
        return WorkWindow(
            start_minutes=self.work_hours.start_hour * 60,
            end_minutes=self.work_hours.end_hour * 60,
            min_slot_minutes=self.work_hours.min_slot_minutes,
            exclude_weekdays=tuple(self.exclude_days),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AppConfig":
        """
        Build the configuration from file data, letting the environment override it.

        The google and slack sections are settings of their own, so each is
        built separately to pick up its environment variables.
        """
        values: Dict[str, Any] = dict(data)
        values["google"] = GoogleConfig(**(data.get("google") or {}))
        values["slack"] = SlackConfig(**(data.get("slack") or {}))
        return cls(**values)

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

        return cls.from_mapping(_read_yaml(config_path))

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "AppConfig":
        """
        Load configuration from an optional YAML file plus the environment.

        A missing config file is not an error: deployments usually
        configure everything through environment variables.
        """
        if config_path is not None and config_path.exists():
            return cls.load_from_yaml(config_path)
        return cls.from_mapping({})


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the root level.")

    return data


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
