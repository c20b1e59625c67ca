"""Configuration management for the Applet Workflow Engine."""

import os
from typing import Optional
from enum import Enum
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EngineConfig(BaseModel):
    """Engine configuration settings."""

    # Application settings
    app_name: str = Field(default="Applet Workflow Engine", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Simulation settings
    min_delay_ms: float = Field(default=300.0, description="Lower bound of simulated node latency")
    max_delay_ms: float = Field(default=1000.0, description="Upper bound of simulated node latency")
    random_seed: Optional[int] = Field(
        default=None,
        description="Seed for delay, metric and payload sampling; unseeded when None"
    )
    reserve_ratio_min: float = Field(default=420.0, description="Lower bound of the sampled reserve ratio (%)")
    reserve_ratio_max: float = Field(default=520.0, description="Upper bound of the sampled reserve ratio (%)")
    price_min: float = Field(default=0.98, description="Lower bound of the sampled stablecoin price")
    price_max: float = Field(default=1.02, description="Upper bound of the sampled stablecoin price")
    validate_before_run: bool = Field(
        default=True,
        description="Run structural validation and log warnings before each execution"
    )

    # History storage settings
    database_url: str = Field(
        default="sqlite:///./execution_history.db",
        description="Database connection URL for the execution history store"
    )
    database_echo: bool = Field(default=False, description="Enable SQLAlchemy query logging")
    history_limit: int = Field(default=50, description="Number of execution logs kept in history")

    # Logging settings
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format"
    )
    log_file: Optional[str] = Field(default=None, description="Log file path")
    structured_logging: bool = Field(default=False, description="Emit JSON log lines")
    log_max_size: int = Field(default=10485760, description="Maximum log file size in bytes")  # 10MB
    log_backup_count: int = Field(default=5, description="Number of log backup files to keep")

    @field_validator('min_delay_ms', 'max_delay_ms')
    @classmethod
    def validate_delays(cls, v):
        """Validate delay bounds."""
        if v < 0:
            raise ValueError("Delay bounds cannot be negative")
        return v

    @field_validator('history_limit')
    @classmethod
    def validate_history_limit(cls, v):
        """Validate history size."""
        if v < 1:
            raise ValueError("History limit must be at least 1")
        return v

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v):
        """Validate database URL format."""
        if not v:
            raise ValueError("Database URL cannot be empty")

        supported_schemes = ['sqlite', 'postgresql', 'mysql']
        scheme = v.split('://')[0].split('+')[0].lower()

        if scheme not in supported_schemes:
            raise ValueError(f"Unsupported database scheme: {scheme}. Supported: {supported_schemes}")

        return v

    @model_validator(mode='after')
    def validate_ranges(self):
        """Ensure every sampling range is ordered."""
        if self.min_delay_ms > self.max_delay_ms:
            raise ValueError("min_delay_ms cannot exceed max_delay_ms")
        if self.reserve_ratio_min > self.reserve_ratio_max:
            raise ValueError("reserve_ratio_min cannot exceed reserve_ratio_max")
        if self.price_min > self.price_max:
            raise ValueError("price_min cannot exceed price_max")
        return self

    @property
    def is_sqlite(self) -> bool:
        """Check if the history store uses SQLite."""
        return self.database_url.lower().startswith('sqlite')

    @classmethod
    def from_env(cls) -> 'EngineConfig':
        """Create configuration from environment variables.

        Raises:
            ConfigurationError: If a variable cannot be parsed or fails validation
        """
        # Imported here: the core package imports this module
        from .core.exceptions import ConfigurationError

        def get_env(key: str, default=None, type_func=str):
            """Get environment variable with type conversion."""
            value = os.getenv(f"APPLET_ENGINE_{key}")
            if value is None:
                return default
            if type_func == bool:
                return str(value).lower() in ('true', '1', 'yes', 'on')
            try:
                return type_func(value)
            except ValueError:
                raise ConfigurationError(
                    f"Invalid value for APPLET_ENGINE_{key}: {value!r}",
                    config_key=f"APPLET_ENGINE_{key}"
                )

        try:
            return cls(
                app_name=get_env("APP_NAME", "Applet Workflow Engine"),
                app_version=get_env("APP_VERSION", "1.0.0"),
                debug=get_env("DEBUG", False, bool),
                min_delay_ms=get_env("MIN_DELAY_MS", 300.0, float),
                max_delay_ms=get_env("MAX_DELAY_MS", 1000.0, float),
                random_seed=get_env("RANDOM_SEED", None, int),
                reserve_ratio_min=get_env("RESERVE_RATIO_MIN", 420.0, float),
                reserve_ratio_max=get_env("RESERVE_RATIO_MAX", 520.0, float),
                price_min=get_env("PRICE_MIN", 0.98, float),
                price_max=get_env("PRICE_MAX", 1.02, float),
                validate_before_run=get_env("VALIDATE_BEFORE_RUN", True, bool),
                database_url=get_env("DATABASE_URL", "sqlite:///./execution_history.db"),
                database_echo=get_env("DATABASE_ECHO", False, bool),
                history_limit=get_env("HISTORY_LIMIT", 50, int),
                log_level=get_env("LOG_LEVEL", LogLevel.INFO, lambda value: LogLevel(value.strip().upper())),
                log_format=get_env("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                log_file=get_env("LOG_FILE", None),
                structured_logging=get_env("STRUCTURED_LOGGING", False, bool),
                log_max_size=get_env("LOG_MAX_SIZE", 10485760, int),
                log_backup_count=get_env("LOG_BACKUP_COUNT", 5, int),
            )
        except ValidationError as e:
            problems = [
                f"{'.'.join(str(part) for part in error['loc']) or 'config'}: {error['msg']}"
                for error in e.errors()
            ]
            raise ConfigurationError(
                f"Invalid engine configuration from environment: {'; '.join(problems)}"
            ) from e


# Process-wide configuration, set by load_config() or lazily by get_config()
_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Get the process-wide configuration instance."""
    global _config
    if _config is None:
        _config = EngineConfig.from_env()
    return _config


def load_config(config_file: Optional[str] = None) -> EngineConfig:
    """Load configuration from a .env file and environment variables."""
    global _config

    if config_file and os.path.exists(config_file):
        from dotenv import load_dotenv
        load_dotenv(config_file)
    elif os.path.exists('.env'):
        from dotenv import load_dotenv
        load_dotenv('.env')

    _config = EngineConfig.from_env()

    return _config


def reset_config():
    """Reset the process-wide configuration instance (mainly for testing)."""
    global _config
    _config = None


def get_development_config() -> EngineConfig:
    """Get development configuration."""
    return EngineConfig(
        debug=True,
        log_level=LogLevel.DEBUG,
        database_echo=True,
    )


def get_testing_config() -> EngineConfig:
    """Get testing configuration: no latency, seeded sampling, in-memory history."""
    return EngineConfig(
        debug=True,
        min_delay_ms=0.0,
        max_delay_ms=0.0,
        random_seed=1234,
        database_url="sqlite:///:memory:",
        log_level=LogLevel.WARNING,
    )
