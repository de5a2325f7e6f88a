class ShortenerError(Exception):
    """Base class for expected, user-facing URL service failures."""


class InvalidUrlError(ShortenerError):
    """Raised when a submitted URL fails normalization or validation."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class GenerationExhaustedError(ShortenerError):
    """Raised when no free short code was found within the attempt bound."""


class ShortCodeNotFoundError(ShortenerError):
    """Raised when a short code does not exist."""


class MalformedCodeError(ShortCodeNotFoundError):
    """Raised when a short code is not 6 alphanumeric characters."""


class UrlNotFoundError(ShortenerError):
    """Raised when no mapping has the requested id."""


class StorageFailureError(ShortenerError):
    """Raised when the backing store could not complete an operation."""
