from fastapi import APIRouter, Depends, HTTPException, status

from fitting_room.dependencies import get_session_store, get_video_handler
from fitting_room.exceptions import (
    FittingRoomError,
    MissingFrontView,
    ResultNotFound,
    VideoAlreadyRunning,
)
from fitting_room.routers.sessions import load_session
from fitting_room.schemas import GenerateVideoRequest, GenerateVideoResponse
from fitting_room.schemas.tryon import VideoStatus
from fitting_room.services.session import SessionStore
from fitting_room.services.video import VideoRequestHandler

router = APIRouter(prefix="/sessions/{session_id}/results/{result_id}/video", tags=["video"])


@router.post("", response_model=GenerateVideoResponse)
async def generate_video(
    session_id: str,
    result_id: str,
    request: GenerateVideoRequest,
    store: SessionStore = Depends(get_session_store),
    handler: VideoRequestHandler = Depends(get_video_handler),
):
    """
    Generate a video preview from the front view of a result group.

    The call blocks while the video model works (usually a few minutes),
    polling every few seconds. Failures are also recorded on the result
    group as `video_error`.

    Animations:
    - "360 Turn": a slow full rotation
    - "Subtle Sway": a gentle standing sway
    - "Catwalk Pose": a few runway steps and a pose
    """
    session = load_session(store, session_id)

    try:
        video_url = await handler.request_video(
            session, result_id, request.duration, request.animation
        )
    except ResultNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except MissingFrontView as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except VideoAlreadyRunning as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    except FittingRoomError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Video generation failed: {e.message}",
        )

    return GenerateVideoResponse(
        result_id=result_id,
        video_status=VideoStatus.SUCCEEDED,
        video_url=video_url,
    )


@router.delete("", response_model=GenerateVideoResponse)
async def cancel_video(
    session_id: str,
    result_id: str,
    store: SessionStore = Depends(get_session_store),
    handler: VideoRequestHandler = Depends(get_video_handler),
):
    """Cancel the in-flight video request of a result group."""
    session = load_session(store, session_id)

    try:
        cancelled = handler.cancel_video(session, result_id)
    except ResultNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    if not cancelled:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No video is being generated for this result.",
        )

    group = session.find_result(result_id)
    return GenerateVideoResponse(
        result_id=group.id,
        video_status=group.video_status,
        message="Cancellation requested",
    )
