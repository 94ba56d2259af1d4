"""Service configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_model_cache_dir() -> Path:
    return Path.home() / ".cache" / "multilingual_ocr" / "models"


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=("settings_",),
    )

    # Environment
    environment: str = "development"
    log_level: str = "INFO"

    # Backend
    ocr_backend: str = "easyocr"
    model_cache_dir: Path = _default_model_cache_dir()

    # Compute
    force_cpu: bool = False  # Skip the GPU probe entirely
    reader_verbose: bool = False

    def display(self) -> dict:
        """Return configuration for display."""
        return {
            "environment": self.environment,
            "log_level": self.log_level,
            "ocr_backend": self.ocr_backend,
            "model_cache_dir": str(self.model_cache_dir),
            "force_cpu": self.force_cpu,
            "reader_verbose": self.reader_verbose,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
