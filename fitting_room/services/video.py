import asyncio
import logging

from google.genai import types

from fitting_room.exceptions import (
    MissingFrontView,
    NoDownloadLink,
    Unexpected,
    VideoAlreadyRunning,
    VideoCancelled,
    VideoError,
    VideoTimedOut,
)
from fitting_room.models import GeneratedImage, ResultGroup
from fitting_room.schemas.tryon import VideoStatus
from fitting_room.schemas.video import AnimationType, VideoDuration
from fitting_room.services.gemini import GeminiClient
from fitting_room.services.prompts import build_video_prompt
from fitting_room.services.session import TryOnSession
from fitting_room.services.storage import LocalStorage, storage as default_storage, video_key

logger = logging.getLogger(__name__)


def _video_uri(operation: types.GenerateVideosOperation) -> str | None:
    response = operation.response
    if not response or not response.generated_videos:
        return None
    video = response.generated_videos[0].video
    return video.uri if video else None


class VideoRequestHandler:
    """
    Animates the front view of a result group with Veo.

    Per group the video state moves idle -> loading -> succeeded | failed.
    Polling stops on completion, on the configured deadline, or when the
    group's cancellation event is set.
    """

    def __init__(
        self,
        client: GeminiClient,
        storage: LocalStorage | None = None,
        poll_interval: float = 10.0,
        timeout_seconds: float = 0,
        aspect_ratio: str = "9:16",
    ):
        self.client = client
        self.storage = storage or default_storage
        self.poll_interval = poll_interval
        self.timeout_seconds = timeout_seconds
        self.aspect_ratio = aspect_ratio

    async def _poll_operation(
        self,
        operation: types.GenerateVideosOperation,
        cancel: asyncio.Event,
    ) -> types.GenerateVideosOperation:
        """Poll until the operation is done, the deadline passes, or cancel is set."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_seconds if self.timeout_seconds > 0 else None

        while not operation.done:
            wait = self.poll_interval
            if deadline is not None:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise VideoTimedOut(
                        f"Video generation did not finish within {self.timeout_seconds:g} seconds."
                    )
                wait = min(wait, remaining)

            try:
                await asyncio.wait_for(cancel.wait(), timeout=wait)
            except asyncio.TimeoutError:
                pass
            else:
                raise VideoCancelled("Video generation was cancelled.")

            operation = await self.client.refresh_operation(operation)

        if operation.error:
            raise VideoError(f"Video generation failed: {operation.error}")

        return operation

    async def _generate(
        self,
        session: TryOnSession,
        group: ResultGroup,
        front: GeneratedImage,
        duration: VideoDuration,
        animation: AnimationType | None,
        cancel: asyncio.Event,
        epoch: int,
    ) -> str:
        prompt = build_video_prompt(animation, duration, self.aspect_ratio)

        operation = await self.client.start_video(front.src, prompt)
        logger.info(f"[Video] Started operation {operation.name} for result {group.id}")

        operation = await self._poll_operation(operation, cancel)

        uri = _video_uri(operation)
        if not uri:
            raise NoDownloadLink(
                "Video generation completed, but no download link was provided by the API."
            )

        video_bytes = await self.client.download_media(uri)

        if not session.is_current(epoch):
            raise VideoCancelled("The session was reset before the video finished.")

        key = video_key(session.id, group.id)
        await self.storage.upload(video_bytes, key)

        if not session.is_current(epoch):
            await self.storage.delete_prefix(key)
            raise VideoCancelled("The session was reset before the video finished.")

        return await self.storage.get_url(key)

    async def request_video(
        self,
        session: TryOnSession,
        result_id: str,
        duration: VideoDuration,
        animation: AnimationType | None,
    ) -> str:
        """
        Generate a video preview for one result group.

        Returns:
            URL of the stored video

        Raises:
            ResultNotFound: no such group in the session
            VideoAlreadyRunning: the group already has a video in flight
            MissingFrontView: the group has no front view (no remote call made)
            VideoError: any other video failure, also recorded on the group
        """
        group = session.find_result(result_id)

        if group.is_video_loading:
            raise VideoAlreadyRunning("A video is already being generated for this result.")

        front = group.front_view()
        if front is None:
            error = MissingFrontView(
                "Could not find the front view image, which is required to generate the video."
            )
            group.video_status = VideoStatus.FAILED
            group.video_error = error.message
            raise error

        epoch = session.epoch
        cancel = asyncio.Event()
        session.video_cancellations[group.id] = cancel

        group.video_status = VideoStatus.LOADING
        group.video_error = None
        group.video_url = None

        try:
            video_url = await self._generate(
                session, group, front, duration, animation, cancel, epoch
            )
        except VideoError as e:
            logger.warning(f"[Video] Result {group.id} failed: {e.message}")
            group.video_status = VideoStatus.FAILED
            group.video_error = e.message
            raise
        except Exception as e:
            logger.exception(f"[Video] Unexpected error for result {group.id}")
            error = Unexpected(f"An unexpected error occurred during video generation: {e}")
            group.video_status = VideoStatus.FAILED
            group.video_error = error.message
            raise error from e
        finally:
            if session.video_cancellations.get(group.id) is cancel:
                del session.video_cancellations[group.id]

        group.video_status = VideoStatus.SUCCEEDED
        group.video_url = video_url
        logger.info(f"[Video] Result {group.id} -> {video_url}")
        return video_url

    def cancel_video(self, session: TryOnSession, result_id: str) -> bool:
        """Signal the in-flight video request of a group. Returns False if none is running."""
        session.find_result(result_id)
        cancel = session.video_cancellations.get(result_id)
        if cancel is None:
            return False
        cancel.set()
        return True
