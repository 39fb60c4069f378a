"""
Error taxonomy shared by the services and both front ends.

The HTTP layer maps each class to a status code; the chat router turns them
into plain-text replies.
"""


class PriceBotError(Exception):
    """Base class for every error raised by the service layer."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(PriceBotError):
    """Malformed or missing arguments, bad price format, non-image upload."""

    status_code = 400


class NotFoundError(PriceBotError):
    """Unknown id or unknown good/shop pair."""

    status_code = 404


class ServiceUnavailableError(PriceBotError):
    """The OCR engine is not ready."""

    status_code = 503


class ProcessingError(PriceBotError):
    """Recognition failed or timed out."""

    status_code = 500


class StorageError(PriceBotError):
    """The uploaded file could not be written."""

    status_code = 500
