"""Configuration models."""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PostgresConfig(BaseModel):
    """Postgres configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    database: str = Field("feedplanet", description="Database name")
    user: str = Field("feedplanet", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field(None, description="Environment variable for password")


class StoreConfig(BaseModel):
    """Post store selection."""

    backend: Literal["postgres", "memory"] = Field(
        "postgres", description="Where posts are kept (postgres, memory)"
    )


class FetchConfig(BaseModel):
    """Feed fetcher settings."""

    timeout: float = Field(30.0, description="Request timeout in seconds", gt=0)
    connect_timeout: float = Field(10.0, description="Connect timeout in seconds", gt=0)
    max_concurrent: int = Field(5, description="Feeds fetched in parallel", ge=1, le=50)
    user_agent: str = Field("feedplanet/0.2", description="User-Agent header")


class LoggingConfig(BaseModel):
    """Where warnings and progress messages go."""

    destination: Literal["console", "syslog"] = Field("console", description="console or syslog")
    level: str = Field("INFO", description="Log level name")
    syslog_address: str = Field("/dev/log", description="Syslog socket path")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Accept only standard level names."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


class OutputConfig(BaseModel):
    """An output sink rendered by the template collaborator."""

    type: Literal["HTML", "RSS", "ATOM"] = Field("HTML", description="Output flavour")
    path: str = Field(..., description="File the renderer writes")
    template_path: str = Field(..., description="Template used by the renderer")

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        """Output types are case-insensitive in config files."""
        return v.upper() if isinstance(v, str) else v


class ConfigModel(BaseModel):
    """Main configuration model."""

    days: int = Field(7, description="Maximum post age in days", ge=1, le=3650)
    limit: int = Field(50, description="Maximum posts handed to outputs", ge=1, le=10000)
    date_format: str = Field("%Y-%m-%d at %H:%M:%S", description="strftime format for HTML output")
    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    outputs: List[OutputConfig] = Field(default_factory=list)


class FeedConfig(BaseModel):
    """Feed configuration from feeds.yaml."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Feed name, unique", min_length=1)
    url: str = Field(..., description="RSS or Atom feed URL")
    home: str = Field("", description="Display link for the feed's site")
    enabled: bool = Field(True, description="Whether feed is enabled")
