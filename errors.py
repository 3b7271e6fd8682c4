class AppError(Exception):
    """Base for failures that are reported to the caller as ``{"error": ...}``."""

    status_code = 500
    message = "Something went wrong"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidInputError(AppError):
    status_code = 400
    message = "Invalid Letterboxd list URL"


class EmptyResultError(AppError):
    status_code = 404
    message = "No films found in this list"


class FetchFailedError(AppError):
    status_code = 500
    message = "Failed to fetch list"


class MovieNotFoundError(AppError):
    status_code = 404
    message = "Movie not found"


class ConfigurationError(AppError):
    status_code = 500
    message = "TMDB API key not configured"


class SourceUnavailableError(Exception):
    """A single list source failed. Absorbed by that source, never surfaced."""
