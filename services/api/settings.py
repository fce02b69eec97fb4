# services/api/settings.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    # Storage settings
    # JSON files for local dev; override via .env (STORAGE_BACKEND=sqlite)
    storage_backend: str = "json"
    data_dir: str = "data"
    db_url: str = "sqlite:///data/pinspace.db"

    # CORS settings
    allowed_origins: str = "http://localhost:3000,http://localhost:3001,http://localhost:8000"

    # Upload / dimension resolution
    # 10MB matches the web client's upload limit
    max_upload_bytes: int = 10 * 1024 * 1024
    decode_timeout_s: float = Field(default=15.0, gt=0)
    decode_workers: int = Field(default=2, ge=1)
    # Upper bound on width x height for uploaded images (48" x 72" at 300 DPI is ~311M)
    max_image_pixels: int = Field(default=2_000_000_000, ge=1)
    dimension_cache_size: int = Field(default=256, ge=1)

    # Discovery network layout (server-side rendering of the bubble view)
    network_width: float = Field(default=900.0, gt=0)
    network_height: float = Field(default=600.0, gt=0)
    network_ticks: int = Field(default=300, ge=0, le=2000)

    log_level: str = "INFO"

    model_config = ConfigDict(
        # Always load .env from the same folder as this settings.py
        env_file=str(Path(__file__).resolve().parent / ".env"),
        extra="ignore",
    )

    def get_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


_settings_instance = None

def get_settings() -> Settings:
    """Singleton pattern for settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
