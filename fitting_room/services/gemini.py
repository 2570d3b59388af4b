import logging

import httpx
from google import genai
from google.genai import types

from fitting_room.config import Settings
from fitting_room.exceptions import DownloadFailed, MissingCredential
from fitting_room.models import ImageAsset

logger = logging.getLogger(__name__)


def _asset_to_part(asset: ImageAsset) -> types.Part:
    return types.Part.from_bytes(data=asset.raw_bytes, mime_type=asset.mime_type)


class GeminiClient:
    """
    Thin wrapper around the Google GenAI SDK for try-on images (Nano Banana)
    and video previews (Veo).

    Constructed once at startup and injected wherever it is needed. No call
    is retried or cached here.
    """

    def __init__(
        self,
        api_key: str,
        image_model: str,
        video_model: str,
        video_aspect_ratio: str = "9:16",
        request_timeout: float = 120.0,
    ):
        if not api_key:
            raise MissingCredential("GEMINI_API_KEY environment variable not set")

        self.api_key = api_key
        self.image_model = image_model
        self.video_model = video_model
        self.video_aspect_ratio = video_aspect_ratio
        self.request_timeout = request_timeout
        self.client = genai.Client(api_key=api_key)

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            image_model=settings.image_model,
            video_model=settings.video_model,
            video_aspect_ratio=settings.video_aspect_ratio,
            request_timeout=settings.request_timeout,
        )

    async def generate_view(
        self,
        images: list[ImageAsset],
        prompt: str,
        seed: int,
    ) -> types.GenerateContentResponse:
        """
        Request one try-on view.

        Args:
            images: Ordered attachments (person, outfit, optional style)
            prompt: Instruction text from the prompt builder
            seed: Seed shared by every view of the combination
        """
        contents = [_asset_to_part(image) for image in images]
        contents.append(types.Part.from_text(text=prompt))

        return await self.client.aio.models.generate_content(
            model=self.image_model,
            contents=contents,
            config=types.GenerateContentConfig(
                response_modalities=["IMAGE", "TEXT"],
                seed=seed,
            ),
        )

    async def start_video(
        self,
        image: ImageAsset,
        prompt: str,
    ) -> types.GenerateVideosOperation:
        """Kick off image-to-video generation; returns the long-running operation."""
        return await self.client.aio.models.generate_videos(
            model=self.video_model,
            prompt=prompt,
            image=types.Image(image_bytes=image.raw_bytes, mime_type=image.mime_type),
            config=types.GenerateVideosConfig(
                number_of_videos=1,
                aspect_ratio=self.video_aspect_ratio,
            ),
        )

    async def refresh_operation(
        self, operation: types.GenerateVideosOperation
    ) -> types.GenerateVideosOperation:
        return await self.client.aio.operations.get(operation)

    async def download_media(self, uri: str) -> bytes:
        """Fetch a generated file. Raises DownloadFailed on a transport error or non-200 response."""
        try:
            async with httpx.AsyncClient(timeout=self.request_timeout, follow_redirects=True) as client:
                response = await client.get(uri, headers={"x-goog-api-key": self.api_key})
        except httpx.HTTPError as e:
            logger.error(f"[Gemini] Failed to download video: {e}")
            raise DownloadFailed(f"Failed to download the generated video: {e}") from e

        if response.status_code != 200:
            logger.error(
                f"[Gemini] Failed to download video ({response.status_code}): {response.text[:200]}"
            )
            raise DownloadFailed(
                f"Failed to download the generated video (status: {response.status_code}).",
                status_code=response.status_code,
            )

        return response.content
