"""
Tests for services/gemini.py

The SDK and the HTTP download are mocked; nothing leaves the process.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from fitting_room.config import Settings
from fitting_room.exceptions import DownloadFailed, MissingCredential
from fitting_room.services.gemini import GeminiClient
from tests.fakes import image_response, make_asset


def _client() -> GeminiClient:
    return GeminiClient(
        api_key="test-key",
        image_model="image-model",
        video_model="video-model",
    )


class TestInitialization:
    """Fail fast without a credential"""

    def test_missing_api_key(self):
        with pytest.raises(MissingCredential):
            GeminiClient(api_key="", image_model="m", video_model="v")

    def test_from_settings(self):
        settings = Settings(gemini_api_key="abc", image_model="img", video_model="vid", video_aspect_ratio="16:9")
        client = GeminiClient.from_settings(settings)
        assert client.image_model == "img"
        assert client.video_model == "vid"
        assert client.video_aspect_ratio == "16:9"


class TestGenerateView:
    """generate_view()"""

    @pytest.mark.asyncio
    async def test_request_shape(self):
        client = _client()
        mock_generate = AsyncMock(return_value=image_response())
        client.client = MagicMock()
        client.client.aio.models.generate_content = mock_generate

        person, outfit = make_asset("person"), make_asset("outfit")
        await client.generate_view([person, outfit], "prompt text", seed=77)

        kwargs = mock_generate.call_args.kwargs
        assert kwargs["model"] == "image-model"
        contents = kwargs["contents"]
        assert contents[0].inline_data.data == b"person"
        assert contents[1].inline_data.data == b"outfit"
        assert contents[2].text == "prompt text"
        assert kwargs["config"].seed == 77
        assert set(kwargs["config"].response_modalities) == {"IMAGE", "TEXT"}


class TestStartVideo:
    """start_video()"""

    @pytest.mark.asyncio
    async def test_request_shape(self):
        client = _client()
        mock_videos = AsyncMock(return_value=MagicMock())
        client.client = MagicMock()
        client.client.aio.models.generate_videos = mock_videos

        await client.start_video(make_asset("front"), "animate")

        kwargs = mock_videos.call_args.kwargs
        assert kwargs["model"] == "video-model"
        assert kwargs["prompt"] == "animate"
        assert kwargs["image"].image_bytes == b"front"
        assert kwargs["config"].number_of_videos == 1
        assert kwargs["config"].aspect_ratio == "9:16"


class TestDownloadMedia:
    """download_media()"""

    def _mock_http(self, status_code, content=b"", text=""):
        response = MagicMock()
        response.status_code = status_code
        response.content = content
        response.text = text

        http_client = MagicMock()
        http_client.get = AsyncMock(return_value=response)
        http_client.__aenter__ = AsyncMock(return_value=http_client)
        http_client.__aexit__ = AsyncMock(return_value=None)
        return http_client

    @pytest.mark.asyncio
    async def test_success_sends_api_key(self):
        http_client = self._mock_http(200, content=b"mp4-bytes")

        with patch("fitting_room.services.gemini.httpx.AsyncClient", return_value=http_client):
            data = await _client().download_media("https://example.com/video")

        assert data == b"mp4-bytes"
        headers = http_client.get.call_args.kwargs["headers"]
        assert headers["x-goog-api-key"] == "test-key"

    @pytest.mark.asyncio
    async def test_failure_carries_status(self):
        http_client = self._mock_http(404, text="not found")

        with patch("fitting_room.services.gemini.httpx.AsyncClient", return_value=http_client):
            with pytest.raises(DownloadFailed) as exc_info:
                await _client().download_media("https://example.com/video")

        assert exc_info.value.status_code == 404
        assert "status: 404" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_transport_error_becomes_download_failed(self):
        http_client = self._mock_http(200)
        http_client.get = AsyncMock(side_effect=httpx.ConnectError("connection refused"))

        with patch("fitting_room.services.gemini.httpx.AsyncClient", return_value=http_client):
            with pytest.raises(DownloadFailed) as exc_info:
                await _client().download_media("https://example.com/video")

        assert exc_info.value.status_code is None
        assert "connection refused" in exc_info.value.message
