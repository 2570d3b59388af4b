from pydantic import BaseModel, Field
from enum import Enum, IntEnum

from fitting_room.schemas.tryon import VideoStatus


class AnimationType(str, Enum):
    TURN_360 = "360 Turn"
    SUBTLE_SWAY = "Subtle Sway"
    CATWALK_POSE = "Catwalk Pose"


class VideoDuration(IntEnum):
    SHORT = 5
    MEDIUM = 8
    LONG = 10


class GenerateVideoRequest(BaseModel):
    """Request to animate the front view of a result group."""
    duration: VideoDuration = Field(
        default=VideoDuration.SHORT,
        description="Length of the preview in seconds (5, 8 or 10)",
    )
    animation: AnimationType = Field(
        default=AnimationType.TURN_360,
        description="How the person should move in the preview",
    )


class GenerateVideoResponse(BaseModel):
    """Video state of a result group after a request."""
    result_id: str
    video_status: VideoStatus
    video_url: str | None = None
    video_error: str | None = None
    message: str = "Video generated successfully"
