# backend/setup_reporter/config.py
import os
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple, Type, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from .constants import (
    CONFIG_PATH_ENV_VAR,
    DEFAULT_BREAK_SCHEDULE,
    DEFAULT_CONFIG_PATH,
    DEFAULT_DB_PORT,
    DEFAULT_REPORT_SUBJECT,
    DEFAULT_SEND_TIME,
    DEFAULT_SENDER_NAME,
    DEFAULT_SETUP_LIMIT_MINUTES,
    DEFAULT_SMTP_PORT,
    DESCRIBE_LABEL_WIDTH,
    ENV_NESTED_DELIMITER,
    ENV_PREFIX,
    LOG_FILE_BASE_NAME,
    LOG_FILE_DIRECTORY,
    MASKED_SECRET,
    MAX_RETRY_ATTEMPTS,
    RETRY_DELAY_SECONDS,
    SMTP_TIMEOUT_SECONDS,
)
from .enums import LoggerName, LogLevel
from .exceptions import ConfigError
from .models.policy_model import LimitTable, RetryPolicy, ScheduleTarget
from .models.shift_break_model import BreakSchedule
from .services.logger import get_service_logger
from .workers.utils.scheduler_time_utils import parse_send_time

logger = get_service_logger(LoggerName.CONFIG)


def resolve_config_path() -> str:
    """Config file location: the env override, else the default relative path"""
    return os.environ.get(CONFIG_PATH_ENV_VAR, DEFAULT_CONFIG_PATH)


class DatabaseSettings(BaseModel):
    host: str = Field(..., description="PostgreSQL server host")
    port: int = Field(default=DEFAULT_DB_PORT, ge=1, le=65535)
    username: str
    password: str
    database: str = Field(..., description="Database holding the parts table")


class SmtpSettings(BaseModel):
    server: str
    port: int = Field(default=DEFAULT_SMTP_PORT, ge=1, le=65535)
    username: str = ""
    password: str = ""
    from_address: str = Field(..., description="Envelope sender address")
    # Can be given as a comma-separated string in env vars
    to: Union[str, List[str]] = Field(..., description="Recipient addresses")
    use_tls: bool = False
    use_ssl: bool = False
    timeout: int = Field(default=SMTP_TIMEOUT_SECONDS, ge=1, le=600)

    @field_validator("to")
    @classmethod
    def validate_recipients(cls, v: Union[str, List[str]]) -> List[str]:
        """Accept a list or a comma-separated string, require at least one address"""
        if isinstance(v, str):
            v = v.split(",")
        recipients = [address.strip() for address in v if address.strip()]
        if not recipients:
            raise ValueError("At least one recipient address is required")
        return recipients

    @property
    def recipients(self) -> List[str]:
        return list(self.to)


class ReportSettings(BaseModel):
    send_time: str = Field(default=DEFAULT_SEND_TIME, description="Daily send time, HH:MM")
    default_setup_limit: int = Field(
        default=DEFAULT_SETUP_LIMIT_MINUTES,
        ge=0,
        description="Limit for machines missing from [limits], in minutes",
    )
    subject: str = DEFAULT_REPORT_SUBJECT
    sender_name: str = DEFAULT_SENDER_NAME

    @field_validator("send_time")
    @classmethod
    def validate_send_time(cls, v: str) -> str:
        """Send time must be a valid HH:MM wall-clock time"""
        try:
            parse_send_time(v)
        except ConfigError as e:
            raise ValueError(str(e)) from e
        return v


class GeneralSettings(BaseModel):
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    send_delay: int = Field(
        default=0, ge=0, description="Seconds to wait after the send time is reached"
    )
    log_directory: str = LOG_FILE_DIRECTORY
    log_file_name: str = LOG_FILE_BASE_NAME
    timezone: Optional[str] = Field(
        default=None,
        description="IANA zone for the send time; the host's local time when unset",
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        """Timezone must be a known IANA zone name"""
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone '{v}'") from e
        return v

    def now(self) -> datetime:
        """Current time in the configured zone, or naive local time"""
        if self.timezone is None:
            return datetime.now()
        return datetime.now(ZoneInfo(self.timezone))

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Union[str, LogLevel]) -> LogLevel:
        """Validate log level is one of the allowed values"""
        if isinstance(v, LogLevel):
            return v
        allowed_levels = LogLevel.__members__.keys()
        v_upper = str(v).upper()
        if v_upper not in allowed_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(allowed_levels)}"
            )
        return LogLevel[v_upper]


class RetrySettings(BaseModel):
    max_attempts: int = Field(default=MAX_RETRY_ATTEMPTS, ge=1, le=100)
    delay_seconds: float = Field(default=RETRY_DELAY_SECONDS, ge=0, le=3600)


class Settings(BaseSettings):
    database: DatabaseSettings
    smtp: SmtpSettings
    report: ReportSettings = Field(default_factory=ReportSettings)
    general: GeneralSettings = Field(default_factory=GeneralSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    limits: Dict[str, int] = Field(
        default_factory=dict, description="Per-machine setup limits in minutes"
    )
    shift_breaks: BreakSchedule = Field(default=DEFAULT_BREAK_SCHEDULE)

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter=ENV_NESTED_DELIMITER,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # The TOML file is the base layer; env vars override individual values
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls, toml_file=resolve_config_path()),
            file_secret_settings,
        )

    @field_validator("limits")
    @classmethod
    def validate_limits(cls, v: Dict[str, int]) -> Dict[str, int]:
        """Lower-case machine ids and reject negative limits"""
        negative = [machine for machine, limit in v.items() if limit < 0]
        if negative:
            raise ValueError(f"Setup limits must not be negative: {', '.join(negative)}")
        return {machine.lower(): limit for machine, limit in v.items()}

    def limit_table(self) -> LimitTable:
        return LimitTable(
            limits=self.limits, default_limit=self.report.default_setup_limit
        )

    def schedule_target(self) -> ScheduleTarget:
        """
        Build the daily schedule target.

        Raises:
            ConfigError: If send_time is malformed
        """
        hour, minute = parse_send_time(self.report.send_time)
        return ScheduleTarget(
            hour=hour, minute=minute, post_delay_seconds=self.general.send_delay
        )

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.retry.max_attempts,
            delay_seconds=self.retry.delay_seconds,
        )

    def describe(self) -> str:
        """Human-readable dump of the settings with secrets masked"""
        width = DESCRIBE_LABEL_WIDTH

        def row(label: str, value: object) -> str:
            return f"  {label:<{width}}{value}"

        lines = [
            "",
            "Database:",
            row("Server:", f"{self.database.host}:{self.database.port}"),
            row("Database:", self.database.database),
            row("User:", self.database.username),
            row("Password:", MASKED_SECRET),
            "",
            "Mail server:",
            row("Server:", f"{self.smtp.server}:{self.smtp.port}"),
            row("From:", self.smtp.from_address),
            row("To:", ", ".join(self.smtp.recipients)),
            row("User:", self.smtp.username),
            row("Password:", MASKED_SECRET if self.smtp.password else ""),
            "",
            "Report:",
            row("Send time:", self.report.send_time),
            row("Default setup limit:", f"{self.report.default_setup_limit} min"),
            "",
            "Setup limits by machine:",
        ]
        lines.extend(row(f"{machine}:", f"{limit} min") for machine, limit in self.limits.items())
        lines.extend(
            [
                "",
                "Shift breaks:",
                row("Schedule:", self.shift_breaks.describe()),
                "",
                "General:",
                row("Log level:", self.general.log_level.value),
                row("Timezone:", self.general.timezone or "local"),
                row("Send delay, sec:", self.general.send_delay),
                row("Retry attempts:", self.retry.max_attempts),
                row("Retry delay, sec:", self.retry.delay_seconds),
            ]
        )
        return "\n".join(lines)


def load_settings() -> Settings:
    """
    Load settings from the TOML file and environment.

    Raises:
        ConfigError: If the file cannot be read or values fail validation
    """
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
    except (OSError, ValueError) as e:
        raise ConfigError(f"Could not read settings from {resolve_config_path()}: {e}") from e


class SettingsStore:
    """
    Holder of the current immutable settings snapshot.

    Each cycle reads ``current`` once and works with that snapshot. A reload
    publishes a new snapshot only when loading succeeds; on failure the
    previous snapshot stays in effect.
    """

    def __init__(
        self,
        initial: Settings,
        loader: Optional[Callable[[], Settings]] = None,
    ):
        self._current = initial
        self._loader = loader or load_settings

    @classmethod
    def from_loader(cls, loader: Optional[Callable[[], Settings]] = None) -> "SettingsStore":
        """
        Create a store from a first successful load.

        Raises:
            ConfigError: If the initial settings cannot be loaded
        """
        loader = loader or load_settings
        return cls(loader(), loader)

    @property
    def current(self) -> Settings:
        return self._current

    def reload(self) -> bool:
        """
        Try to load fresh settings.

        Returns:
            True if a new snapshot was published, False if the old one was kept
        """
        try:
            new_settings = self._loader()
        except ConfigError as e:
            logger.warning(
                f"Failed to reload settings, keeping previous values: {e}"
            )
            logger.debug(f"Current settings:{self._current.describe()}")
            return False

        self._current = new_settings
        logger.debug(f"Settings reloaded:{new_settings.describe()}")
        return True
