"""
Pydantic settings for the proximity doze daemon
"""

from typing import List, Optional, Dict, Any
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Daemon settings with environment variable support."""

    # Application settings
    app_name: str = Field(default="proximity-doze", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment (development, testing, production)")
    debug: bool = Field(default=False, description="Debug mode")

    # Logging settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format"
    )
    log_file: Optional[str] = Field(default=None, description="Log file path")
    log_max_size: int = Field(default=10485760, description="Max log file size in bytes (10MB)")
    log_backup_count: int = Field(default=5, description="Number of log backup files")

    # Doze gesture settings
    doze_enabled: bool = Field(default=True, description="Global always-on-display doze feature flag")
    gesture_hand_wave: bool = Field(default=False, description="Pulse on a short hand wave over the sensor")
    gesture_pocket: bool = Field(default=False, description="Pulse when taken out of a pocket")
    proximity_wake_enable: bool = Field(default=False, description="Wake the device on a short proximity cover")
    sensor_max_range: float = Field(default=5.0, description="Proximity sensor maximum range; readings below it are near")

    # Radio scheduling settings
    radio_backend: str = Field(default="nmcli", description="Radio backend (nmcli, simulated)")
    radio_initial_delay_seconds: float = Field(default=300.0, description="Delay before the first radio restore after screen off")
    radio_repeat_interval_seconds: float = Field(default=600.0, description="Interval between radio restore fires")
    radio_enable_window_seconds: float = Field(default=20.0, description="Default on-time for the one-shot radio toggle")
    radio_restore_window_seconds: Optional[float] = Field(
        default=None,
        description="If set, each restore fire turns the radio on only for this many seconds"
    )
    nmcli_timeout_seconds: float = Field(default=5.0, description="Timeout for nmcli invocations")

    model_config = SettingsConfigDict(
        env_prefix="DOZE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_environments = ["development", "testing", "production"]
        if v not in allowed_environments:
            raise ValueError(f"Environment must be one of: {allowed_environments}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level setting."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"Log level must be one of: {allowed_levels}")
        return v.upper()

    @field_validator("radio_backend")
    @classmethod
    def validate_radio_backend(cls, v):
        """Validate radio backend name."""
        allowed_backends = ["nmcli", "simulated"]
        if v.lower() not in allowed_backends:
            raise ValueError(f"Radio backend must be one of: {allowed_backends}")
        return v.lower()

    @field_validator(
        "sensor_max_range",
        "radio_initial_delay_seconds",
        "radio_repeat_interval_seconds",
        "nmcli_timeout_seconds",
    )
    @classmethod
    def validate_positive(cls, v):
        """Validate strictly positive values."""
        if v <= 0:
            raise ValueError("Value must be greater than zero")
        return v

    @field_validator("radio_enable_window_seconds", "radio_restore_window_seconds")
    @classmethod
    def validate_window(cls, v):
        """Validate radio on-time windows."""
        if v is not None and v < 0:
            raise ValueError("Radio window seconds must be non-negative")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"

    def get_gesture_defaults(self) -> Dict[str, bool]:
        """Initial values for the gesture preference store."""
        return {
            "gesture_hand_wave": self.gesture_hand_wave,
            "gesture_pocket": self.gesture_pocket,
            "proximity_wake_enable": self.proximity_wake_enable,
        }

    def get_logging_config(self) -> Dict[str, Any]:
        """Get a summary of logging configuration."""
        return {
            "level": self.log_level,
            "format": self.log_format,
            "file": self.log_file,
            "max_size": self.log_max_size,
            "backup_count": self.log_backup_count,
        }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_test_settings() -> Settings:
    """Get settings for testing."""
    return Settings(
        environment="testing",
        debug=True,
        radio_backend="simulated",
        log_level="DEBUG"
    )


def load_settings_from_file(file_path: str) -> Settings:
    """Load settings from a specific file."""
    return Settings(_env_file=file_path)


def validate_settings(settings: Settings) -> List[str]:
    """Validate settings and return list of issues."""
    issues = []

    if settings.is_production:
        if settings.debug:
            issues.append("Debug mode should be disabled in production")

        if settings.radio_backend == "simulated":
            issues.append("Simulated radio backend should not be used in production")

    window = settings.radio_restore_window_seconds
    if window is not None and window >= settings.radio_repeat_interval_seconds:
        issues.append("Radio restore window must be shorter than the repeat interval")

    if not any(settings.get_gesture_defaults().values()):
        issues.append("No gesture is enabled; the proximity sensor will stay idle")

    return issues
