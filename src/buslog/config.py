"""
Logger Configuration.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggerSettings(BaseSettings):
    """
    Process-wide logger settings, read from the environment.

    No prefix: LOG_LEVEL, TIMESTAMP_TIMEZONE, REMOTE_LOG_LEVEL, SYSLOG,
    SYSLOG_NAME, SYSLOG_PROGRAM, BUS_CLIENT, CAPTURE_UNHANDLED.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    log_level: str = Field(default="info", description="Console verbosity level name")
    timestamp_timezone: str = Field(default="Europe/Stockholm", description="Timezone for console timestamps")
    remote_log_level: str = Field(default="error", description="Levels at or above this are forwarded to the bus")
    syslog: Optional[str] = Field(default=None, description="Remote syslog host:port, e.g. Papertrail")
    syslog_name: Optional[str] = Field(default=None, description="Hostname reported to syslog")
    syslog_program: Optional[str] = Field(default=None, description="Program name reported to syslog")
    bus_client: Optional[str] = Field(
        default=None,
        description="Import target of the bus client, 'module' or 'module:attribute'",
    )
    capture_unhandled: bool = Field(
        default=True,
        description="Log uncaught exceptions through the process-wide logger",
    )

    @field_validator("log_level", "remote_log_level", mode="before")
    @classmethod
    def _lower_level(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value
