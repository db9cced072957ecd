"""Application settings and configuration management"""

import os
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment-specific .env file
environment = os.getenv('ENVIRONMENT', 'development')
env_file = f'.env.{environment}'
if os.path.exists(env_file):
    load_dotenv(env_file)
else:
    load_dotenv()  # Fallback to .env


# Shipped default for API_KEY; every real deployment must override it
PLACEHOLDER_API_KEY = "mysecret123"


class Settings(BaseSettings):
    """
    Gateway configuration settings using Pydantic Settings.

    Environment variables will automatically override default values.
    """

    # Server Settings
    host: str = Field(
        default="0.0.0.0",
        alias="HOST",
        description="Interface the HTTP server binds to"
    )
    port: int = Field(
        default=3000,
        alias="PORT",
        description="Port the HTTP server listens on"
    )

    # Security Settings
    api_key: str = Field(
        default=PLACEHOLDER_API_KEY,
        alias="API_KEY",
        description="Shared secret callers must present via x-api-key or api_key"
    )

    # Rate Limiting Settings
    rate_limit_window_seconds: int = Field(
        default=60,
        alias="RATE_LIMIT_WINDOW_SECONDS",
        gt=0,
        description="Length of the fixed rate-limit window in seconds"
    )
    rate_limit_max_requests: int = Field(
        default=60,
        alias="RATE_LIMIT_MAX_REQUESTS",
        gt=0,
        description="Requests allowed per client within one window"
    )

    # Upstream Settings
    search_result_limit: int = Field(
        default=10,
        alias="SEARCH_RESULT_LIMIT",
        ge=1,
        le=50,
        description="Maximum number of search results returned to callers"
    )
    ytdlp_socket_timeout: Optional[float] = Field(
        default=None,
        alias="YTDLP_SOCKET_TIMEOUT",
        description="Socket timeout passed to yt-dlp (library default when unset)"
    )

    # Development Settings
    debug: bool = Field(
        default=False,
        alias="DEBUG",
        description="Enable debug mode (mounts interactive API docs)"
    )
    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_file: Optional[str] = Field(
        default=None,
        alias="LOG_FILE",
        description="Optional path of a rotating JSON log file"
    )

    # Environment and Runtime Settings
    environment: str = Field(
        default="development",
        alias="ENVIRONMENT",
        description="Runtime environment (development, staging, production)"
    )

    @field_validator('log_level')
    def validate_log_level(cls, v):
        """Validate log level is one of the standard levels"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of {valid_levels}')
        return v.upper()

    @field_validator('environment')
    def validate_environment(cls, v):
        """Validate environment is recognized"""
        valid_envs = ['development', 'staging', 'production']
        if v not in valid_envs:
            raise ValueError(f'environment must be one of {valid_envs}')
        return v

    @field_validator('api_key')
    def validate_api_key(cls, v):
        """Reject an empty secret, which would lock every caller out"""
        if not v:
            raise ValueError('api_key must not be empty')
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == 'development'

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == 'production'

    @property
    def uses_placeholder_api_key(self) -> bool:
        """Check if the shipped placeholder secret is still in use"""
        return self.api_key == PLACEHOLDER_API_KEY

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_prefix": "",
        "extra": "ignore",
        "populate_by_name": True
    }


# Global settings instance
_settings = None


def get_settings() -> Settings:
    """
    Get application settings instance.

    Returns:
        Settings: Application configuration settings
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

def reload_settings() -> Settings:
    """
    Force reload of settings from environment variables.

    Returns:
        Settings: Fresh application configuration settings
    """
    global _settings
    _settings = None
    return get_settings()
