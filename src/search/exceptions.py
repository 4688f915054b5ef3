"""
Errors raised by the hybrid search pipeline.

Every error here aborts the whole request: no partial result list is ever
returned to the caller.
"""
from typing import Optional


class SearchError(Exception):
    """Base class for search pipeline failures."""

    pass


class BackendUnavailableError(SearchError):
    """Raised when the vector or keyword backend call fails."""

    def __init__(self, backend: str, message: str) -> None:
        self.backend = backend
        super().__init__(f"{backend} backend unavailable: {message}")


class ExpansionFetchError(SearchError):
    """Raised when fetching neighbouring chunks by id fails."""

    pass


class CitationRecordMissingError(SearchError):
    """Raised when no metadata record exists for a passage identifier."""

    def __init__(self, identifier_code: str) -> None:
        self.identifier_code = identifier_code
        super().__init__(f"Record not found: {identifier_code}")


class QueryExpansionError(SearchError):
    """Raised when the query expansion answer cannot be used."""

    pass


class AuthenticationError(Exception):
    """Raised when the caller cannot be authenticated."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code or 401
        super().__init__(message)
