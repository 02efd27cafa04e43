class PaperDigestError(Exception):
    """Base class for errors raised by paper_digest."""


class DocumentFetchError(PaperDigestError):
    """A document could not be retrieved (non-success status or network failure)."""

    def __init__(self, identifier: str, status: int | None = None, reason: str | None = None):
        self.identifier = identifier
        self.status = status
        self.reason = reason
        if status is not None:
            message = f"Fetch failed ({status}) for '{identifier}'"
        else:
            message = f"Fetch failed for '{identifier}': {reason or 'unknown error'}"
        super().__init__(message)


class ConfigurationError(PaperDigestError, ValueError):
    """Invalid settings, or a missing credential for the selected provider."""
