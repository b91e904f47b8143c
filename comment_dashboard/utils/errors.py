"""Error types and non-fatal warning collection.

Exceptions here are raised by the fetch path (auth, file key, HTTP, payload
shape) and by the document tree; the session controller turns each of them
into exactly one outbound ``error`` message. Per-comment enrichment problems
are not exceptions at all: they are recorded in an ``EnrichmentWarnings``
collector and the affected comment simply loses its location.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class CommentDashboardError(Exception):
    """Base class for all errors raised by the comment dashboard."""
    pass


class AuthRequiredError(CommentDashboardError):
    """No access token has been configured for the session."""

    def __init__(self, message: str = "OAuth token not set. Please configure authentication."):
        super().__init__(message)


class FileKeyUnavailableError(CommentDashboardError):
    """The host did not provide a file key for the open document."""

    def __init__(
        self,
        message: str = "File key is unavailable. Make sure you are in a valid Figma file.",
    ):
        super().__init__(message)


class FigmaAPIError(CommentDashboardError):
    """The comments endpoint answered with an error or could not be reached.

    Attributes:
        status_code: HTTP status code, or None for transport failures
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidResponseError(CommentDashboardError):
    """The comments payload did not have the expected shape."""

    def __init__(self, message: str = "Invalid response format from Figma API"):
        super().__init__(message)


class DocumentLookupError(CommentDashboardError):
    """A document tree lookup was given an identifier it cannot interpret."""
    pass


# Supported enrichment warning types
WARNING_TYPE_NODE_LOOKUP_FAILED = "node_lookup_failed"
WARNING_TYPE_NODE_NOT_FOUND = "node_not_found"
WARNING_TYPE_PAGE_NOT_FOUND = "page_not_found"

VALID_WARNING_TYPES = {
    WARNING_TYPE_NODE_LOOKUP_FAILED,
    WARNING_TYPE_NODE_NOT_FOUND,
    WARNING_TYPE_PAGE_NOT_FOUND,
}


class EnrichmentWarnings:
    """Collector for non-fatal warnings raised while enriching fetched comments.

    Example:
        >>> warnings = EnrichmentWarnings()
        >>> warnings.append(
        ...     "node_not_found",
        ...     "Node 12:34 is not in the document",
        ...     {"comment_id": "c1", "node_id": "12:34"}
        ... )
        >>> len(warnings)
        1
    """

    def __init__(self):
        self._warnings: List[Dict[str, Any]] = []

    def __len__(self) -> int:
        return len(self._warnings)

    def append(self, warning_type: str, message: str, context: Dict[str, Any]) -> None:
        """Record a warning with an auto-generated ISO 8601 UTC timestamp.

        Raises:
            ValueError: If warning_type is not in VALID_WARNING_TYPES
        """
        if warning_type not in VALID_WARNING_TYPES:
            raise ValueError(
                f"Invalid warning_type '{warning_type}'. "
                f"Must be one of: {', '.join(sorted(VALID_WARNING_TYPES))}"
            )

        self._warnings.append({
            "type": warning_type,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "context": context,
        })

    def to_list(self) -> List[Dict[str, Any]]:
        """Return a copy of the collected warnings."""
        return [dict(w) for w in self._warnings]
