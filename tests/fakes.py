"""
Fake Gemini client and response builders shared by the tests
"""
import io
import struct
import zlib
from typing import Callable

from google.genai import types
from PIL import Image

from fitting_room.models import ImageAsset
from fitting_room.schemas.tryon import VIEW_ORDER, ViewLabel

# ── Images ───────────────────────────────────────────────────────────

def make_image_bytes(fmt: str = "PNG", mode: str = "RGB", size=(32, 48), color=(200, 30, 30)) -> bytes:
    img = Image.new(mode, size, color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()

def make_png_header(width: int, height: int) -> bytes:
    """A PNG that declares its size but carries no pixel data."""

    def chunk(kind: bytes, body: bytes) -> bytes:
        return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", zlib.crc32(kind + body))

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IDAT", b"") + chunk(b"IEND", b"")

def make_asset(tag: str) -> ImageAsset:
    """Distinguishable asset; payload is not a real image."""
    return ImageAsset.from_bytes(tag.encode("utf-8"), "image/png")

# ── Model responses ──────────────────────────────────────────────────

def image_response(text: str | None = None, data: bytes = b"generated-png") -> types.GenerateContentResponse:
    parts = []
    if text is not None:
        parts.append(types.Part(text=text))
    parts.append(types.Part(inline_data=types.Blob(data=data, mime_type="image/png")))
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=parts))]
    )

def text_response(text: str) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=[types.Part(text=text)]))]
    )

def blocked_response() -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        prompt_feedback=types.GenerateContentResponsePromptFeedback(
            block_reason=types.BlockedReason.SAFETY
        )
    )

def view_of(prompt: str) -> ViewLabel:
    for view in VIEW_ORDER:
        if f"**{view.value}**" in prompt:
            return view
    raise AssertionError("prompt names no view")

class FakeGeminiClient:
    """
    Stands in for GeminiClient.

    ``responder(images, prompt, seed)`` returns a response (or raises) for
    each view call; every call is recorded.
    """

    def __init__(self, responder: Callable | None = None):
        self.responder = responder or (lambda images, prompt, seed: image_response())
        self.calls: list[dict] = []
        self.video_calls: list[dict] = []
        self.operations: list[types.GenerateVideosOperation] = []
        self.downloads: list[str] = []
        self.video_bytes = b"fake-mp4"

    async def generate_view(self, images, prompt, seed):
        self.calls.append({"images": list(images), "prompt": prompt, "seed": seed, "view": view_of(prompt)})
        return self.responder(images, prompt, seed)

    async def start_video(self, image, prompt):
        self.video_calls.append({"image": image, "prompt": prompt})
        return types.GenerateVideosOperation(name="operations/video-1", done=False)

    async def refresh_operation(self, operation):
        if self.operations:
            return self.operations.pop(0)
        return done_operation()

    async def download_media(self, uri):
        self.downloads.append(uri)
        return self.video_bytes

def done_operation(uri: str | None = "https://generativelanguage.googleapis.com/v1beta/files/abc:download?alt=media"):
    videos = [types.GeneratedVideo(video=types.Video(uri=uri))] if uri else []
    return types.GenerateVideosOperation(
        name="operations/video-1",
        done=True,
        response=types.GenerateVideosResponse(generated_videos=videos),
    )

