"""mgstream exceptions. Each carries the HTTP status it maps to."""


class MGStreamError(Exception):
    """Base exception for mgstream."""

    status_code: int = 500


class InvalidParameterError(MGStreamError):
    """Raised when a request parameter or body is malformed."""

    status_code = 400


class CatalogError(MGStreamError):
    """Raised when a type, source, format or filter level is not in the catalog."""

    status_code = 404


class SampleNotFoundError(MGStreamError):
    """Raised when a metagenome lookup fails."""

    status_code = 404


class AccessDeniedError(MGStreamError):
    """Raised when the caller may not view a metagenome."""

    status_code = 401


class UpstreamUnavailableError(MGStreamError):
    """Raised when the results database or blob store cannot be reached."""

    status_code = 500


class BlobFetchError(MGStreamError):
    """Raised when a byte-range read from the blob store fails."""
