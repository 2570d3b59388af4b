class FittingRoomError(Exception):
    """Base error. ``message`` is always safe to show to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# Normalizer

class InvalidInput(FittingRoomError):
    pass


class DecodeError(FittingRoomError):
    pass


class EncodeError(FittingRoomError):
    pass


# Remote client

class MissingCredential(FittingRoomError):
    pass


# Per-view generation

class GenerationError(FittingRoomError):
    """A single view (or a whole combination) could not be generated."""


class Blocked(GenerationError):
    def __init__(self, message: str, reason: str | None = None):
        super().__init__(message)
        self.reason = reason


class ContentRejected(GenerationError):
    pass


class NoImageReturned(GenerationError):
    pass


class RemoteCallFailed(GenerationError):
    pass


# Batch / session

class MissingInput(FittingRoomError):
    pass


class BatchAlreadyRunning(FittingRoomError):
    pass


class SessionNotFound(FittingRoomError):
    pass


class ResultNotFound(FittingRoomError):
    pass


# Video

class VideoError(FittingRoomError):
    pass


class MissingFrontView(VideoError):
    pass


class VideoAlreadyRunning(VideoError):
    pass


class NoDownloadLink(VideoError):
    pass


class DownloadFailed(VideoError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class VideoTimedOut(VideoError):
    pass


class VideoCancelled(VideoError):
    pass


class Unexpected(FittingRoomError):
    """Any failure outside the taxonomy above, already reduced to user-facing text."""
