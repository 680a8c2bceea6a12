"""Configuration management with Pydantic settings."""

import os
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
import yaml


class MonitoringConfig(BaseModel):
    """Prober settings."""
    probe_interval: int = 60
    request_timeout: Optional[float] = None
    halt_on_error: bool = False

    @field_validator('probe_interval')
    @classmethod
    def interval_must_be_positive(cls, v):
        if v < 1:
            raise ValueError('probe_interval must be at least 1 second')
        return v

    @field_validator('request_timeout')
    @classmethod
    def timeout_must_be_positive(cls, v):
        if v is not None and v <= 0:
            raise ValueError('request_timeout must be positive when set')
        return v


class StatsConfig(BaseModel):
    """Aggregation window used by the site listing and detail views."""
    bucket_seconds: int = 3600
    bucket_count: int = 24
    incident_limit: int = 100

    @field_validator('bucket_seconds', 'bucket_count')
    @classmethod
    def must_be_positive(cls, v, info):
        if v < 1:
            raise ValueError(f'{info.field_name} must be at least 1')
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "json"
    file: Optional[str] = "logs/uptime_monitor.log"
    console: bool = True

    @field_validator('level')
    @classmethod
    def log_level_must_be_valid(cls, v):
        if isinstance(v, str):
            v = v.upper()
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v not in valid_levels:
            raise ValueError(f'log level must be one of {valid_levels}')
        return v

    @field_validator('format')
    @classmethod
    def log_format_must_be_valid(cls, v):
        if v not in ('json', 'text'):
            raise ValueError("log format must be 'json' or 'text'")
        return v


class PrometheusConfig(BaseModel):
    """Prometheus metrics configuration."""
    enabled: bool = True
    path: str = "/metrics"


class CORSConfig(BaseModel):
    """CORS configuration."""
    enabled: bool = True
    allow_origins: List[str] = Field(default_factory=lambda: ["*"])
    allow_methods: List[str] = Field(default_factory=lambda: ["*"])
    allow_headers: List[str] = Field(default_factory=lambda: ["*"])


class APIConfig(BaseModel):
    """API server configuration."""
    host: str = "127.0.0.1"
    port: int = 3000
    reload: bool = False
    expose_errors: bool = True
    cors: CORSConfig = Field(default_factory=CORSConfig)

    @field_validator('port')
    @classmethod
    def port_must_be_valid(cls, v):
        if not (1 <= v <= 65535):
            raise ValueError('port must be between 1 and 65535')
        return v


class Config(BaseModel):
    """Main configuration class."""
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)
    stats: StatsConfig = Field(default_factory=StatsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    prometheus: PrometheusConfig = Field(default_factory=PrometheusConfig)
    api: APIConfig = Field(default_factory=APIConfig)


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes", "on")


def load_dotenv(path: str = ".env") -> None:
    """Copy KEY=VALUE pairs from a .env file into os.environ."""
    if not os.path.exists(path):
        return
    with open(path, "r") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                os.environ.setdefault(key.strip(), value.strip().strip('"').strip("'"))


def load_config() -> Config:
    """
    Load configuration from YAML file and environment variables.

    Returns:
        Config: Loaded configuration

    Raises:
        FileNotFoundError: If config file doesn't exist outside development
        ValueError: If config file or its values are invalid
    """
    load_dotenv()

    app_env = os.getenv("APP_ENV", "development")
    config_path = os.getenv("CONFIG_PATH", "config/config.yaml")

    config_data = {}
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {config_path}: {e}")
    elif app_env != "development":
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        config = Config(**config_data)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")

    # Environment overrides
    log_level = os.getenv("LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    probe_interval = os.getenv("PROBE_INTERVAL")
    if probe_interval:
        config.monitoring.probe_interval = int(probe_interval)

    halt_on_error = os.getenv("PROBE_HALT_ON_ERROR")
    if halt_on_error is not None:
        config.monitoring.halt_on_error = _parse_bool(halt_on_error)

    # Re-run validators on the overridden values
    try:
        return Config.model_validate(config.model_dump())
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")
