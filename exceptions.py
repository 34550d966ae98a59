class PotholeError(Exception):
    """Base class for failures surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PotholeError):
    """Submitted data is missing or invalid."""

    status_code = 400


class UnsupportedMediaTypeError(ValidationError):
    """Uploaded file is not an allowed image type."""

    status_code = 415


class PayloadTooLargeError(PotholeError):
    status_code = 413


class NotFoundError(PotholeError):
    status_code = 404


class UnauthorizedError(PotholeError):
    status_code = 401


class ForbiddenError(PotholeError):
    status_code = 403
