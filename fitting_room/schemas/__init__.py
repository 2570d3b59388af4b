from fitting_room.schemas.tryon import (
    ViewLabel,
    VIEW_ORDER,
    QualityTier,
    VideoStatus,
    GeneratedImageInfo,
    ResultGroupInfo,
    TryOnResponse,
)
from fitting_room.schemas.video import (
    AnimationType,
    VideoDuration,
    GenerateVideoRequest,
    GenerateVideoResponse,
)
from fitting_room.schemas.session import (
    SessionResponse,
    UploadResponse,
)

__all__ = [
    "ViewLabel",
    "VIEW_ORDER",
    "QualityTier",
    "VideoStatus",
    "GeneratedImageInfo",
    "ResultGroupInfo",
    "TryOnResponse",
    "AnimationType",
    "VideoDuration",
    "GenerateVideoRequest",
    "GenerateVideoResponse",
    "SessionResponse",
    "UploadResponse",
]
