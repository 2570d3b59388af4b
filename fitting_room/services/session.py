import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid_extensions import uuid7

from fitting_room.exceptions import ResultNotFound, SessionNotFound
from fitting_room.models import ImageAsset, ResultGroup
from fitting_room.schemas.session import SessionResponse

logger = logging.getLogger(__name__)


class UploadSlot(str, Enum):
    OUTFITS = "outfits"
    STYLES = "styles"


@dataclass
class TryOnSession:
    """
    In-memory state of one user's try-on session.

    ``epoch`` is bumped on every reset. Long-running work records the epoch
    it started under and must not write back once it has changed.
    """
    id: str = field(default_factory=lambda: str(uuid7()))
    person_image: ImageAsset | None = None
    outfit_images: list[ImageAsset] = field(default_factory=list)
    style_images: list[ImageAsset] = field(default_factory=list)
    results: list[ResultGroup] = field(default_factory=list)
    error: str | None = None
    # First model note of the latest batch
    info: str | None = None
    is_generating: bool = False
    epoch: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # result_id -> cancellation signal of its in-flight video request
    video_cancellations: dict[str, asyncio.Event] = field(default_factory=dict)

    def set_single(self, image: ImageAsset | None) -> None:
        """Replace the person photo."""
        self.person_image = image

    def set_multiple(self, slot: UploadSlot, images: list[ImageAsset]) -> None:
        """Replace the outfit or style image list."""
        if slot == UploadSlot.OUTFITS:
            self.outfit_images = list(images)
        else:
            self.style_images = list(images)

    def find_result(self, result_id: str) -> ResultGroup:
        for group in self.results:
            if group.id == result_id:
                return group
        raise ResultNotFound(f"Result {result_id} not found in this session.")

    def is_current(self, epoch: int) -> bool:
        return self.epoch == epoch

    def reset(self) -> None:
        """
        Drop every upload, result and error.

        In-flight video requests are signalled to cancel; in-flight batches
        notice the epoch change and stop writing.
        """
        for event in self.video_cancellations.values():
            event.set()
        self.video_cancellations.clear()

        self.person_image = None
        self.outfit_images = []
        self.style_images = []
        self.results = []
        self.error = None
        self.info = None
        self.is_generating = False
        self.epoch += 1
        logger.info(f"[Session] {self.id} reset (epoch {self.epoch})")

    def to_response(self) -> SessionResponse:
        return SessionResponse(
            id=self.id,
            person_image=self.person_image.to_data_url() if self.person_image else None,
            outfit_images=[image.to_data_url() for image in self.outfit_images],
            style_images=[image.to_data_url() for image in self.style_images],
            results=[group.to_info() for group in self.results],
            error=self.error,
            info=self.info,
            is_generating=self.is_generating,
            created_at=self.created_at,
        )


class SessionStore:
    """Process-local registry of sessions. Nothing is persisted."""

    def __init__(self):
        self._sessions: dict[str, TryOnSession] = {}

    def create(self) -> TryOnSession:
        session = TryOnSession()
        self._sessions[session.id] = session
        logger.info(f"[Session] Created {session.id}")
        return session

    def get(self, session_id: str) -> TryOnSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(f"Session {session_id} not found.")
        return session

    def delete(self, session_id: str) -> None:
        session = self.get(session_id)
        session.reset()
        del self._sessions[session_id]

    def __len__(self) -> int:
        return len(self._sessions)


# Singleton instance
session_store = SessionStore()
