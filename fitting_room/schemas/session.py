from pydantic import BaseModel
from datetime import datetime

from fitting_room.schemas.tryon import ResultGroupInfo


class SessionResponse(BaseModel):
    """Everything the front-end needs to render a session."""
    id: str
    person_image: str | None = None
    outfit_images: list[str] = []
    style_images: list[str] = []
    results: list[ResultGroupInfo] = []
    error: str | None = None
    info: str | None = None
    is_generating: bool = False
    created_at: datetime


class UploadResponse(BaseModel):
    """Response after storing normalized uploads on a session."""
    session_id: str
    images: list[str]
    message: str = "Images uploaded successfully"
