from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum


class ViewLabel(str, Enum):
    FRONT = "Front view"
    LEFT = "Left side view"
    RIGHT = "Right side view"
    BACK = "Back view"


# Canonical order in which views are requested and reported
VIEW_ORDER: tuple[ViewLabel, ...] = (
    ViewLabel.FRONT,
    ViewLabel.LEFT,
    ViewLabel.RIGHT,
    ViewLabel.BACK,
)


class QualityTier(str, Enum):
    STANDARD = "Standard"
    HIGH = "High"
    ULTRA = "Ultra"


class VideoStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class GeneratedImageInfo(BaseModel):
    """A single generated view."""
    src: str = Field(..., description="data: URL of the generated image")
    alt: str
    label: ViewLabel


class ResultGroupInfo(BaseModel):
    """Views and video state for one (outfit, style) combination."""
    id: str
    outfit_image: str
    style_image: str | None = None
    views: list[GeneratedImageInfo]
    info: str | None = None
    video_url: str | None = None
    video_error: str | None = None
    video_status: VideoStatus = VideoStatus.IDLE
    is_video_loading: bool = False
    created_at: datetime


class TryOnResponse(BaseModel):
    """Outcome of one batch run."""
    session_id: str
    results: list[ResultGroupInfo]
    error: str | None = None
    info: str | None = None
    message: str = "Virtual try-on finished"
