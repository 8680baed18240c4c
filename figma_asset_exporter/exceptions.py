"""Exception hierarchy for the Figma asset export pipeline."""

from typing import Optional


class FigmaExportError(Exception):
    """Base exception for every failure surfaced by an export run."""

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class InvalidSourceError(FigmaExportError):
    """Source is neither a .figma file nor a Figma project URL."""
    pass


class MissingTokenError(FigmaExportError):
    """No Figma access token was configured for the run."""
    pass


class EmptyProjectError(FigmaExportError):
    """The fetched document has no exportable nodes."""
    pass


class OutputError(FigmaExportError):
    """The export folder tree could not be written."""

    def __init__(self, message: str, path: Optional[str] = None, stage: Optional[str] = None):
        self.path = path
        super().__init__(message, stage=stage)


class DownloadError(FigmaExportError):
    """Wraps a transport failure with the name of the node being downloaded."""

    def __init__(self, node_name: str, cause: Exception, stage: Optional[str] = None):
        self.node_name = node_name
        self.cause = cause
        super().__init__(f"Error importing {node_name}: {cause}", stage=stage)


class FigmaApiError(FigmaExportError):
    """Exception for failed Figma REST API calls."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        stage: Optional[str] = None
    ):
        self.status_code = status_code
        self.url = url
        super().__init__(message, stage=stage)


class AuthError(FigmaApiError):
    """Token was rejected (HTTP 401/403)."""
    pass


class NotFoundError(FigmaApiError):
    """Project or resource does not exist (HTTP 404)."""
    pass


class NetworkError(FigmaApiError):
    """Timeouts, connection failures and unexpected HTTP statuses."""
    pass


class ResponseDecodeError(FigmaApiError):
    """Response body is not JSON or does not have the expected shape."""
    pass


__all__ = [
    'FigmaExportError',
    'InvalidSourceError',
    'MissingTokenError',
    'EmptyProjectError',
    'OutputError',
    'DownloadError',
    'FigmaApiError',
    'AuthError',
    'NotFoundError',
    'NetworkError',
    'ResponseDecodeError'
]
