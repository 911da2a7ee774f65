# errors.py
class ApiError(Exception):
    """Base error; the app turns it into {"error": message} with status_code."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(ApiError):
    status_code = 400


class UnauthorizedError(ApiError):
    status_code = 401


class UserForbiddenError(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class ProcessFailure(ApiError):
    """ffprobe/ffmpeg exited badly, timed out, or printed something unusable."""


class StorageFailure(ApiError):
    """Upload to the bucket failed."""
