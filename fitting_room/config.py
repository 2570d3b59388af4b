from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class ViewFailurePolicy(str, Enum):
    ALL_OR_NOTHING = "all_or_nothing"
    PARTIAL = "partial"


class Settings(BaseSettings):
    # App settings
    app_name: str = "Fitting Room API"
    debug: bool = False
    log_level: str = "INFO"

    # Local storage for downloaded videos
    storage_path: Path = Path("temp/media")

    # Gemini / Veo settings
    gemini_api_key: str = ""
    image_model: str = "gemini-2.5-flash-image-preview"
    video_model: str = "veo-2.0-generate-001"
    request_timeout: float = 120.0

    # Video polling
    video_poll_interval: float = 10.0  # seconds
    video_timeout_seconds: float = 900.0  # 0 disables the deadline
    video_aspect_ratio: str = "9:16"

    # Generation policy
    view_failure_policy: ViewFailurePolicy = ViewFailurePolicy.ALL_OR_NOTHING

    # Upload limits
    max_outfit_images: int = 10
    max_style_images: int = 10

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
