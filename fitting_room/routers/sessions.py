from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from fitting_room.config import Settings, get_settings
from fitting_room.dependencies import get_session_store, get_storage
from fitting_room.exceptions import DecodeError, EncodeError, InvalidInput, SessionNotFound
from fitting_room.models import ImageAsset
from fitting_room.schemas import SessionResponse, UploadResponse
from fitting_room.services.normalizer import normalize_image
from fitting_room.services.session import SessionStore, TryOnSession, UploadSlot
from fitting_room.services.storage import LocalStorage

router = APIRouter(prefix="/sessions", tags=["sessions"])


def load_session(store: SessionStore, session_id: str) -> TryOnSession:
    try:
        return store.get(session_id)
    except SessionNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


async def _normalize_upload(upload: UploadFile) -> ImageAsset:
    content = await upload.read()
    try:
        return normalize_image(content, upload.content_type)
    except (InvalidInput, DecodeError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{upload.filename}: {e.message}",
        )
    except EncodeError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"{upload.filename}: {e.message}",
        )


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(store: SessionStore = Depends(get_session_store)):
    """Start a new try-on session. All state lives in memory."""
    return store.create().to_response()


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Current uploads, result groups, error text and video states."""
    return load_session(store, session_id).to_response()


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
    media_storage: LocalStorage = Depends(get_storage),
):
    load_session(store, session_id)
    store.delete(session_id)
    await media_storage.delete_prefix(f"videos/{session_id}")


@router.post("/{session_id}/reset", response_model=SessionResponse)
async def reset_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
    media_storage: LocalStorage = Depends(get_storage),
):
    """
    Clear uploads, results and errors.

    Outstanding remote work is not aborted server-side, but none of it can
    write into the session any more; in-flight video polls are cancelled.
    """
    session = load_session(store, session_id)
    session.reset()
    await media_storage.delete_prefix(f"videos/{session_id}")
    return session.to_response()


@router.put("/{session_id}/person", response_model=UploadResponse)
async def upload_person(
    session_id: str,
    image: UploadFile = File(..., description="A full-body photo of the user"),
    store: SessionStore = Depends(get_session_store),
):
    """Upload (or replace) the user's photo. It is re-encoded to PNG."""
    session = load_session(store, session_id)
    asset = await _normalize_upload(image)
    session.set_single(asset)
    return UploadResponse(session_id=session.id, images=[asset.to_data_url()])


async def _upload_many(
    session: TryOnSession,
    slot: UploadSlot,
    images: list[UploadFile],
    limit: int,
) -> UploadResponse:
    if len(images) > limit:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Maximum {limit} {slot.value} images allowed. Got {len(images)}.",
        )

    assets = [await _normalize_upload(image) for image in images]
    session.set_multiple(slot, assets)
    return UploadResponse(session_id=session.id, images=[asset.to_data_url() for asset in assets])


@router.put("/{session_id}/outfits", response_model=UploadResponse)
async def upload_outfits(
    session_id: str,
    images: list[UploadFile] = File(..., description="One or more outfit photos"),
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    """Upload (or replace) the outfit images."""
    session = load_session(store, session_id)
    return await _upload_many(session, UploadSlot.OUTFITS, images, settings.max_outfit_images)


@router.put("/{session_id}/styles", response_model=UploadResponse)
async def upload_styles(
    session_id: str,
    images: list[UploadFile] = File(..., description="Optional style reference photos"),
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    """
    Upload (or replace) the style reference images.

    Every outfit is combined with every style when the try-on runs.
    """
    session = load_session(store, session_id)
    return await _upload_many(session, UploadSlot.STYLES, images, settings.max_style_images)


@router.delete("/{session_id}/styles", response_model=SessionResponse)
async def clear_styles(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = load_session(store, session_id)
    session.set_multiple(UploadSlot.STYLES, [])
    return session.to_response()
