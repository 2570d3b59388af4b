"""
Tests for services/session.py and models/
"""

import asyncio

import pytest

from fitting_room.exceptions import ResultNotFound, SessionNotFound
from fitting_room.models import GeneratedImage, ImageAsset, ResultGroup
from fitting_room.schemas.tryon import ViewLabel, VideoStatus
from fitting_room.services.session import SessionStore, TryOnSession, UploadSlot
from tests.fakes import make_asset


def _group() -> ResultGroup:
    return ResultGroup(
        outfit_image=make_asset("outfit"),
        views=[GeneratedImage(src=make_asset("front"), alt="Front view", label=ViewLabel.FRONT)],
    )


class TestImageAsset:
    """ImageAsset data URL handling"""

    def test_data_url_round_trip(self):
        asset = ImageAsset.from_bytes(b"\x89PNG...", "image/png")
        assert ImageAsset.from_data_url(asset.to_data_url()) == asset
        assert asset.raw_bytes == b"\x89PNG..."

    @pytest.mark.parametrize("value", ["not a data url", "data:image/png,abc", "data:image/png;base64,"])
    def test_invalid_data_url(self, value):
        with pytest.raises(ValueError):
            ImageAsset.from_data_url(value)


class TestResultGroup:
    """ResultGroup ids and video state"""

    def test_ids_unique_for_identical_assets(self):
        assert _group().id != _group().id

    def test_front_view(self):
        group = _group()
        assert group.front_view().label == ViewLabel.FRONT
        group.views = [GeneratedImage(src=make_asset("back"), alt="Back view", label=ViewLabel.BACK)]
        assert group.front_view() is None

    def test_to_info(self):
        group = _group()
        group.video_status = VideoStatus.LOADING
        info = group.to_info()
        assert info.id == group.id
        assert info.is_video_loading is True
        assert info.views[0].src.startswith("data:image/png;base64,")
        assert info.style_image is None


class TestTryOnSession:
    """Uploads and reset"""

    def test_set_single_and_multiple(self):
        session = TryOnSession()
        person = make_asset("person")
        outfits = [make_asset("o1"), make_asset("o2")]

        session.set_single(person)
        session.set_multiple(UploadSlot.OUTFITS, outfits)
        session.set_multiple(UploadSlot.STYLES, [make_asset("s1")])

        assert session.person_image == person
        assert session.outfit_images == outfits
        assert session.outfit_images is not outfits
        assert len(session.style_images) == 1

    def test_find_result(self):
        session = TryOnSession()
        group = _group()
        session.results.append(group)
        assert session.find_result(group.id) is group
        with pytest.raises(ResultNotFound):
            session.find_result("nope")

    def test_reset_clears_everything(self):
        session = TryOnSession()
        session.set_single(make_asset("person"))
        session.set_multiple(UploadSlot.OUTFITS, [make_asset("o1")])
        session.set_multiple(UploadSlot.STYLES, [make_asset("s1")])
        session.results = [_group(), _group()]
        session.error = "Outfit 2: unclear"
        session.info = "Add a belt."
        session.is_generating = True

        session.reset()

        assert session.person_image is None
        assert session.outfit_images == []
        assert session.style_images == []
        assert session.results == []
        assert session.error is None
        assert session.info is None
        assert session.is_generating is False
        assert session.epoch == 1
        assert not session.is_current(0)

    def test_reset_signals_video_cancellation(self):
        session = TryOnSession()
        event = asyncio.Event()
        session.video_cancellations["abc"] = event
        session.reset()
        assert event.is_set()
        assert session.video_cancellations == {}

    def test_to_response(self):
        session = TryOnSession()
        session.set_single(make_asset("person"))
        session.info = "Add a belt."
        response = session.to_response()
        assert response.id == session.id
        assert response.info == "Add a belt."
        assert response.person_image.startswith("data:image/png;base64,")
        assert response.results == []


class TestSessionStore:
    """SessionStore"""

    def test_create_get_delete(self):
        store = SessionStore()
        session = store.create()
        assert store.get(session.id) is session
        assert len(store) == 1

        store.delete(session.id)
        assert len(store) == 0
        with pytest.raises(SessionNotFound):
            store.get(session.id)
