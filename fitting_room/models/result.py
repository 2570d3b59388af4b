from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid_extensions import uuid7

from fitting_room.models.asset import ImageAsset
from fitting_room.schemas.tryon import (
    GeneratedImageInfo,
    ResultGroupInfo,
    ViewLabel,
    VideoStatus,
)


@dataclass(frozen=True)
class GeneratedImage:
    """One successfully generated view of one combination."""
    src: ImageAsset
    alt: str
    label: ViewLabel

    def to_info(self) -> GeneratedImageInfo:
        return GeneratedImageInfo(src=self.src.to_data_url(), alt=self.alt, label=self.label)


@dataclass
class ResultGroup:
    """
    Aggregated output for one (outfit, style) combination.

    Only the video fields change after creation; they move through
    idle -> loading -> succeeded | failed as a video request progresses.
    """
    outfit_image: ImageAsset
    views: list[GeneratedImage]
    style_image: ImageAsset | None = None
    info: str | None = None
    id: str = field(default_factory=lambda: str(uuid7()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # Video state
    video_url: str | None = None
    video_error: str | None = None
    video_status: VideoStatus = VideoStatus.IDLE

    @property
    def is_video_loading(self) -> bool:
        return self.video_status == VideoStatus.LOADING

    def front_view(self) -> GeneratedImage | None:
        for view in self.views:
            if view.label == ViewLabel.FRONT:
                return view
        return None

    def to_info(self) -> ResultGroupInfo:
        return ResultGroupInfo(
            id=self.id,
            outfit_image=self.outfit_image.to_data_url(),
            style_image=self.style_image.to_data_url() if self.style_image else None,
            views=[view.to_info() for view in self.views],
            info=self.info,
            video_url=self.video_url,
            video_error=self.video_error,
            video_status=self.video_status,
            is_video_loading=self.is_video_loading,
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        return f"<ResultGroup(id={self.id}, views={len(self.views)}, video_status={self.video_status.value})>"
