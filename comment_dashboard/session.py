"""Session Controller

A PluginSession owns the state of one plugin instance (loaded comments, the
active filter, the access token, UI size) and routes inbound UI messages to the
fetcher, the filter engine and the location resolver. Every handled message
ends in at most one outbound message; host-side effects (resize, close) are
delivered through callbacks instead.

Messages are handled one at a time. The only await point is the HTTP call
inside a fetch; session state is replaced only after the fetch succeeded, so a
failed fetch leaves previously loaded comments untouched.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

import structlog
from pydantic import ValidationError

from comment_dashboard.document import DocumentTree
from comment_dashboard.fetcher import CommentFetcher
from comment_dashboard.figma_client import FigmaClient
from comment_dashboard.filters import apply_filters
from comment_dashboard.messages import (
    MSG_APPLY_FILTERS,
    MSG_CLOSE_PLUGIN,
    MSG_FETCH_COMMENTS,
    MSG_FETCHING,
    MSG_NAVIGATE_TO_COMMENT,
    MSG_RESIZE,
    MSG_SET_TOKEN,
    MSG_TOKEN_SET,
    ApplyFiltersRequest,
    NavigateRequest,
    ResizeRequest,
    SetTokenRequest,
    build_message,
    clamp_size,
    comments_loaded_message,
    error_message,
    filtered_comments_message,
    navigation_complete_message,
    plugin_ready_message,
)
from comment_dashboard.models.comment_models import (
    CommentSummary,
    FilterSpec,
    NavigationResult,
    NormalizedComment,
)
from comment_dashboard.navigation import LocationResolver
from comment_dashboard.summary import create_comment_summary
from comment_dashboard.utils.errors import (
    AuthRequiredError,
    CommentDashboardError,
    FileKeyUnavailableError,
)

logger = structlog.get_logger()

PostMessage = Callable[[Dict[str, Any]], None]


@dataclass
class SessionState:
    """Mutable per-session state.

    Attributes:
        comments: Normalized comments in API order (replaced on each fetch)
        filters: Active filter (replaced on each apply-filters)
        token: Access token for the comments API
        ui_size: Last clamped (width, height) requested by the UI
        closed: Whether the UI asked to close the plugin
    """
    comments: List[NormalizedComment] = field(default_factory=list)
    filters: FilterSpec = field(default_factory=FilterSpec)
    token: Optional[str] = None
    ui_size: Optional[tuple] = None
    closed: bool = False


class PluginSession:
    """Route UI messages for one open file.

    Example:
        >>> outbox = []
        >>> session = PluginSession(document, file_key="AbC123", post_message=outbox.append)
        >>> session.start()
        >>> await session.handle_message({"type": "set-token", "token": "figd_..."})
        >>> await session.handle_message({"type": "fetch-comments"})
        >>> [m["type"] for m in outbox]
        ['plugin-ready', 'token-set', 'fetching', 'comments-loaded']
    """

    def __init__(
        self,
        document: DocumentTree,
        client: Optional[FigmaClient] = None,
        file_key: Optional[str] = None,
        post_message: Optional[PostMessage] = None,
        resize_ui: Optional[Callable[[float, float], None]] = None,
        close_plugin: Optional[Callable[[], None]] = None,
        token: Optional[str] = None,
    ):
        self.document = document
        self.file_key = file_key
        self.state = SessionState(token=token or None)
        self.outbox: List[Dict[str, Any]] = []
        self._post = post_message or self.outbox.append
        self._resize_ui = resize_ui
        self._close_plugin = close_plugin

        self.fetcher = CommentFetcher(client or FigmaClient(), document)
        self.resolver = LocationResolver(document)

        self._handlers: Dict[str, Callable[[Dict[str, Any]], Awaitable[None]]] = {
            MSG_FETCH_COMMENTS: self.fetch_comments,
            MSG_SET_TOKEN: self.set_token,
            MSG_APPLY_FILTERS: self.apply_filters,
            MSG_NAVIGATE_TO_COMMENT: self.navigate_to_comment,
            MSG_RESIZE: self.resize,
            MSG_CLOSE_PLUGIN: self.close,
        }

    @property
    def comments(self) -> List[NormalizedComment]:
        return self.state.comments

    @property
    def filters(self) -> FilterSpec:
        return self.state.filters

    def summary(self) -> CommentSummary:
        """Summary over the full loaded collection (filters are ignored)."""
        return create_comment_summary(self.state.comments)

    def send(self, message: Dict[str, Any]) -> None:
        logger.debug("message_sent", message_type=message.get("type"))
        self._post(message)

    def send_error(self, message: str, requires_auth: bool = False) -> None:
        self.send(error_message(message, requires_auth=requires_auth))

    def start(self) -> None:
        """Announce the plugin to the UI."""
        logger.info("session_started", file_key=self.file_key, nodes=len(self.document))
        self.send(plugin_ready_message(self.file_key))

    async def handle_message(self, msg: Any) -> None:
        """Dispatch one inbound UI message to its handler."""
        if not isinstance(msg, dict):
            logger.warning("message_invalid", message_type=type(msg).__name__)
            self.send_error("Invalid message format")
            return

        msg_type = msg.get("type")
        handler = self._handlers.get(msg_type) if isinstance(msg_type, str) else None
        if handler is None:
            logger.warning("message_type_unknown", message_type=msg_type)
            self.send_error(f"Unknown message type: {msg_type}")
            return

        logger.debug("message_received", message_type=msg_type)
        try:
            await handler(msg)
        except Exception as e:
            logger.error(
                "message_handler_failed",
                message_type=msg_type,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            self.send_error(str(e) or f"Failed to handle {msg_type}")

    # Handlers

    async def set_token(self, msg: Dict[str, Any]) -> None:
        try:
            request = SetTokenRequest.model_validate(msg)
        except ValidationError:
            self.send_error("Invalid token format")
            return

        self.state.token = request.token
        logger.info("token_set")
        self.send(build_message(MSG_TOKEN_SET, message="Token set successfully"))

    async def fetch_comments(self, msg: Dict[str, Any]) -> None:
        try:
            self.fetcher.ensure_ready(self.state.token, self.file_key)
        except AuthRequiredError as e:
            logger.info("fetch_blocked_no_token")
            self.send_error(str(e), requires_auth=True)
            return
        except FileKeyUnavailableError as e:
            logger.warning("fetch_blocked_no_file_key")
            self.send_error(str(e))
            return

        self.send(build_message(MSG_FETCHING, message="Fetching comments..."))

        try:
            result = await self.fetcher.fetch(self.file_key, self.state.token)
        except CommentDashboardError as e:
            logger.error("fetch_failed", file_key=self.file_key, error=str(e))
            self.send_error(str(e))
            return
        except Exception as e:
            logger.error("fetch_crashed", file_key=self.file_key, error=str(e), exc_info=True)
            self.send_error(str(e) or "Failed to fetch comments")
            return

        # Filters are not re-applied; the UI asks again with apply-filters
        self.state.comments = result.comments
        self.send(comments_loaded_message(result.comments, self.summary(), result.warnings))

    async def apply_filters(self, msg: Dict[str, Any]) -> None:
        try:
            request = ApplyFiltersRequest.model_validate(msg)
        except ValidationError:
            self.send_error("Invalid filters format")
            return

        self.state.filters = request.filters
        filtered = apply_filters(self.state.comments, self.state.filters)
        logger.info(
            "filters_applied",
            filters=self.state.filters.model_dump(exclude_none=True),
            total=len(self.state.comments),
            matched=len(filtered),
        )
        self.send(filtered_comments_message(filtered, self.state.filters))

    def find_comment(self, comment_id: str) -> Optional[NormalizedComment]:
        for comment in self.state.comments:
            if comment.id == comment_id:
                return comment
        return None

    async def navigate_to_comment(self, msg: Dict[str, Any]) -> None:
        try:
            request = NavigateRequest.model_validate(msg)
        except ValidationError:
            self.send_error("Invalid comment ID")
            return

        comment = self.find_comment(request.comment_id)
        if comment is None:
            result = NavigationResult(success=False, message="Comment not found")
        else:
            result = self.resolver.navigate(request.comment_id, comment)

        self.send(navigation_complete_message(request.comment_id, result))

    async def resize(self, msg: Dict[str, Any]) -> None:
        try:
            request = ResizeRequest.model_validate(msg)
        except ValidationError:
            logger.debug("resize_ignored", reason="invalid_payload")
            return

        if not request.width or not request.height:
            return

        width, height = clamp_size(request.width, request.height)
        self.state.ui_size = (width, height)
        if self._resize_ui is not None:
            self._resize_ui(width, height)

    async def close(self, msg: Dict[str, Any]) -> None:
        self.state.closed = True
        logger.info("session_closed", file_key=self.file_key)
        if self._close_plugin is not None:
            self._close_plugin()
