"""Configuration management using Pydantic BaseSettings.

Settings are read from environment variables (case-insensitive) and an
optional ``.env`` file.
"""
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
VALID_DISMISSAL_BACKENDS = ['memory', 'file', 'redis']


class Config(BaseSettings):
    """Main configuration class combining all settings."""

    # Logging Configuration
    log_level: str = Field("INFO", description="Logging level")
    log_format: str = Field("%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log format")

    # Deduplication
    dedup_enabled: bool = Field(True, description="Filter duplicate issues before output")

    # Dismissal store
    dismissal_backend: str = Field("memory", description="Dismissal store backend: redis, file, memory")
    dismissal_file_path: str = Field(".safetyhub/dismissals.json", description="File store location")
    dismissal_redis_url: str = Field("redis://localhost:6379", description="Redis connection URL")
    dismissal_redis_key_prefix: str = Field("safetyhub:dismissal:", min_length=1, description="Redis key prefix")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

    @field_validator('log_level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        if v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f'Invalid log level: {v}. Valid options: {VALID_LOG_LEVELS}')
        return v.upper()

    @field_validator('dismissal_backend')
    @classmethod
    def validate_dismissal_backend(cls, v: str) -> str:
        if v.lower() not in VALID_DISMISSAL_BACKENDS:
            raise ValueError(f'Invalid dismissal backend: {v}. Valid options: {VALID_DISMISSAL_BACKENDS}')
        return v.lower()

    def validate_configuration(self) -> List[str]:
        """Validate the complete configuration and return any issues."""
        issues = []

        if self.dismissal_backend == "redis" and not self.dismissal_redis_url.startswith(("redis://", "rediss://")):
            issues.append("DISMISSAL_REDIS_URL must be a valid Redis URL (redis://...)")

        if self.dismissal_backend == "file" and not self.dismissal_file_path.strip():
            issues.append("DISMISSAL_FILE_PATH is required for the file backend")

        return issues

    def log_configuration(self) -> None:
        """Log the current configuration (sanitized)."""
        from safetyhub.utils.logger import log_info

        log_info("Configuration loaded",
                 dedup_enabled=self.dedup_enabled,
                 dismissal_backend=self.dismissal_backend,
                 dismissal_file_path=self.dismissal_file_path,
                 dismissal_redis_url=self.dismissal_redis_url,
                 log_level=self.log_level)


# Global configuration instance (lazy loading)
_config = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment variables."""
    global _config
    _config = Config()
    return _config
