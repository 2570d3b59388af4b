import logging
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from fitting_room.config import get_settings
from fitting_room.exceptions import MissingCredential
from fitting_room.routers import sessions, tryon, video
from fitting_room.services.storage import storage

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Ensure local storage directories exist
    await storage.ensure_storage_exists()

    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; generation requests will be rejected")

    yield


app = FastAPI(
    title=settings.app_name,
    description="""
    ## Virtual Fitting Room API

    This API allows you to:

    1. **Upload** a photo of yourself, one or more outfit photos and, optionally, style references
    2. **Try on** every outfit (and outfit/style combination) in four views: front, left, right and back
    3. **Animate** any result into a short video preview

    ### How it works:

    1. **Session**: create a session; everything you upload and generate lives in memory in it.
       Every upload is re-encoded to PNG before it is sent anywhere.

    2. **Try-on**: each combination is sent to the Gemini image model four times, once per view,
       with a shared seed so the person and the outfit stay consistent across views.
       Combinations are processed one after another; a failing combination does not stop the rest.

    3. **Video**: the front view of a result is animated with Veo (360 turn, subtle sway or
       catwalk pose; 5, 8 or 10 seconds).
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount static files for serving stored videos
storage_path = Path(settings.storage_path)
storage_path.mkdir(parents=True, exist_ok=True)
app.mount("/files", StaticFiles(directory=str(storage_path)), name="files")


@app.exception_handler(MissingCredential)
async def missing_credential_handler(request: Request, exc: MissingCredential):
    return JSONResponse(
        status_code=503,
        content={"detail": exc.message, "type": type(exc).__name__},
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": str(exc) if settings.debug else "Internal server error",
            "type": type(exc).__name__,
        },
    )


# Include routers
app.include_router(sessions.router, prefix="/api/v1")
app.include_router(tryon.router, prefix="/api/v1")
app.include_router(video.router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": settings.app_name,
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "create_session": "POST /api/v1/sessions",
            "get_session": "GET /api/v1/sessions/{session_id}",
            "reset_session": "POST /api/v1/sessions/{session_id}/reset",
            "upload_person": "PUT /api/v1/sessions/{session_id}/person",
            "upload_outfits": "PUT /api/v1/sessions/{session_id}/outfits",
            "upload_styles": "PUT /api/v1/sessions/{session_id}/styles",
            "try_on": "POST /api/v1/sessions/{session_id}/tryon",
            "try_on_stream": "POST /api/v1/sessions/{session_id}/tryon/stream",
            "generate_video": "POST /api/v1/sessions/{session_id}/results/{result_id}/video",
        }
    }
