import json

from fastapi import APIRouter, Depends, Form, HTTPException, status
from fastapi.responses import StreamingResponse

from fitting_room.dependencies import get_orchestrator, get_session_store
from fitting_room.exceptions import BatchAlreadyRunning, MissingInput
from fitting_room.routers.sessions import load_session
from fitting_room.schemas import QualityTier, TryOnResponse
from fitting_room.services.batch import BatchCoordinator
from fitting_room.services.orchestrator import GenerationOrchestrator
from fitting_room.services.session import SessionStore, TryOnSession

router = APIRouter(prefix="/sessions/{session_id}/tryon", tags=["virtual-tryon"])


def _prepare_batch(session: TryOnSession, orchestrator: GenerationOrchestrator) -> BatchCoordinator:
    coordinator = BatchCoordinator(orchestrator)
    try:
        coordinator.validate(session)
    except MissingInput as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except BatchAlreadyRunning as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    return coordinator


@router.post("", response_model=TryOnResponse)
async def virtual_tryon(
    session_id: str,
    instructions: str = Form(
        default="",
        max_length=1000,
        description=(
            "Optional styling notes passed to the model verbatim. "
            "Examples: 'tuck the shirt in', 'roll up the sleeves'"
        ),
    ),
    quality: QualityTier = Form(
        default=QualityTier.STANDARD,
        description="Image quality tier (Standard, High, Ultra)",
    ),
    store: SessionStore = Depends(get_session_store),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """
    Virtual Try-On: generate four views for every outfit/style combination.

    **How it works:**
    1. Every outfit is paired with every style image (or used alone when no
       styles were uploaded)
    2. For each combination, Front, Left side, Right side and Back views are
       generated concurrently with a shared seed
    3. Combinations run one after another; a failed combination is reported
       in `error` and the rest still run

    The request returns once every combination has been attempted. Use
    `/tryon/stream` to receive result groups as they finish.
    """
    session = load_session(store, session_id)
    coordinator = _prepare_batch(session, orchestrator)

    results = [group async for group in coordinator.run(session, instructions, quality)]

    return TryOnResponse(
        session_id=session.id,
        results=[group.to_info() for group in results],
        error=coordinator.error,
        info=session.info,
        message=(
            "Virtual try-on generated successfully" if results else "No try-on images were generated"
        ),
    )


@router.post("/stream")
async def virtual_tryon_stream(
    session_id: str,
    instructions: str = Form(default="", max_length=1000),
    quality: QualityTier = Form(default=QualityTier.STANDARD),
    store: SessionStore = Depends(get_session_store),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """
    Same as `POST /tryon`, streamed as newline-delimited JSON.

    Emits one `{"event": "result", "result": {...}}` line per successful
    combination, then a final `{"event": "done", "error": ...}` line.
    """
    session = load_session(store, session_id)
    coordinator = _prepare_batch(session, orchestrator)

    async def events():
        async for group in coordinator.run(session, instructions, quality):
            payload = {"event": "result", "result": group.to_info().model_dump(mode="json")}
            yield json.dumps(payload) + "\n"
        yield json.dumps({"event": "done", "error": coordinator.error}) + "\n"

    return StreamingResponse(events(), media_type="application/x-ndjson")
