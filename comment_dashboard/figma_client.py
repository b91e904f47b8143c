"""Figma REST API client for file comments.

Issues ``GET {api_base}/v1/files/{file_key}/comments`` with the access token in
the ``X-Figma-Token`` header. Error responses become FigmaAPIError with one of
five fixed messages keyed by status code. Nothing is retried here: a 429 is
reported once and the caller decides whether to try again.
"""

from typing import Any, Dict, List, Optional

import requests
import structlog

from comment_dashboard.config import DEFAULT_API_BASE
from comment_dashboard.utils.errors import FigmaAPIError, InvalidResponseError

logger = structlog.get_logger()

TOKEN_HEADER = "X-Figma-Token"

HTTP_ERROR_MESSAGES = {
    401: "Authentication failed. Please check your OAuth token.",
    403: "Access forbidden. You may not have permission to view comments.",
    404: "File not found or comments endpoint unavailable.",
    429: "Rate limit exceeded. Please try again later.",
}


def describe_http_error(status_code: int, reason: Optional[str]) -> str:
    """Human message for a non-2xx status.

    Example:
        >>> describe_http_error(429, "Too Many Requests")
        'Rate limit exceeded. Please try again later.'
        >>> describe_http_error(502, "Bad Gateway")
        'HTTP 502: Bad Gateway'
    """
    if status_code in HTTP_ERROR_MESSAGES:
        return HTTP_ERROR_MESSAGES[status_code]
    return f"HTTP {status_code}: {reason or ''}".rstrip()


class FigmaClient:
    """Minimal synchronous client for the comments endpoint.

    Example:
        >>> client = FigmaClient()
        >>> comments = client.get_comments("AbC123xyz", token="figd_...")
        >>> comments[0]["message"]
        'Can we bump the contrast here?'
    """

    def __init__(
        self,
        api_base: str = DEFAULT_API_BASE,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
    ):
        """
        Args:
            api_base: Base URL without trailing slash
            timeout: Per-request timeout in seconds (None waits for the network stack)
            http: Session to send requests through (default: a new requests.Session)
        """
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()

    def comments_url(self, file_key: str) -> str:
        return f"{self.api_base}/v1/files/{file_key}/comments"

    def get_comments(self, file_key: str, token: str) -> List[Dict[str, Any]]:
        """Fetch the raw comment records of a file.

        Returns:
            The ``comments`` array of the response, unmodified

        Raises:
            FigmaAPIError: On a non-2xx status or a transport failure
            InvalidResponseError: If the body is not JSON or lacks a ``comments`` list
        """
        url = self.comments_url(file_key)

        try:
            response = self.http.get(
                url,
                headers={TOKEN_HEADER: token, "Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(
                "comments_request_failed",
                file_key=file_key,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise FigmaAPIError(f"Failed to fetch comments: {e}") from e

        if not response.ok:
            message = describe_http_error(response.status_code, response.reason)
            logger.error(
                "comments_http_error",
                file_key=file_key,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise FigmaAPIError(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            logger.error("comments_invalid_json", file_key=file_key, error=str(e))
            raise InvalidResponseError() from e

        if not isinstance(data, dict) or not isinstance(data.get("comments"), list):
            logger.error(
                "comments_invalid_payload",
                file_key=file_key,
                payload_type=type(data).__name__,
            )
            raise InvalidResponseError()

        return data["comments"]
