"""Message contract between the UI panel and the plugin session.

Inbound messages are plain dicts with a ``type`` discriminator; their payloads
are validated with the pydantic models below. Outbound messages are built by
the helper functions at the bottom so every handler emits the same shapes.
"""

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from comment_dashboard.models.comment_models import (
    CommentSummary,
    FilterSpec,
    NavigationResult,
    NormalizedComment,
)

# Inbound message types (UI -> plugin)
MSG_FETCH_COMMENTS = "fetch-comments"
MSG_SET_TOKEN = "set-token"
MSG_APPLY_FILTERS = "apply-filters"
MSG_NAVIGATE_TO_COMMENT = "navigate-to-comment"
MSG_RESIZE = "resize"
MSG_CLOSE_PLUGIN = "close-plugin"

# Outbound message types (plugin -> UI)
MSG_PLUGIN_READY = "plugin-ready"
MSG_TOKEN_SET = "token-set"
MSG_FETCHING = "fetching"
MSG_COMMENTS_LOADED = "comments-loaded"
MSG_FILTERED_COMMENTS = "filtered-comments"
MSG_NAVIGATION_COMPLETE = "navigation-complete"
MSG_ERROR = "error"

# UI size limits (pixels)
MIN_WIDTH, MAX_WIDTH = 300, 800
MIN_HEIGHT, MAX_HEIGHT = 400, 1000


class _Inbound(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SetTokenRequest(_Inbound):
    token: StrictStr = Field(min_length=1)


class ApplyFiltersRequest(_Inbound):
    filters: FilterSpec


class NavigateRequest(_Inbound):
    comment_id: StrictStr = Field(min_length=1)


class ResizeRequest(_Inbound):
    width: Optional[float] = None
    height: Optional[float] = None


def clamp_size(width: float, height: float) -> tuple:
    """Clamp a requested UI size to [300, 800] x [400, 1000]."""
    return (
        max(MIN_WIDTH, min(MAX_WIDTH, width)),
        max(MIN_HEIGHT, min(MAX_HEIGHT, height)),
    )


def build_message(message_type: str, **payload: Any) -> Dict[str, Any]:
    """Create an outbound message: ``{"type": message_type, **payload}``."""
    return {"type": message_type, **payload}


def error_message(message: str, requires_auth: bool = False) -> Dict[str, Any]:
    """Outbound error; ``requiresAuth`` is only present when a token is needed."""
    msg = build_message(MSG_ERROR, message=message)
    if requires_auth:
        msg["requiresAuth"] = True
    return msg


def plugin_ready_message(file_key: Optional[str]) -> Dict[str, Any]:
    return build_message(
        MSG_PLUGIN_READY,
        message="Plugin initialized. Configure OAuth token to fetch comments.",
        fileKey=file_key or None,
    )


def comments_loaded_message(
    comments: List[NormalizedComment],
    summary: CommentSummary,
    warnings: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    return build_message(
        MSG_COMMENTS_LOADED,
        comments=[c.to_dict() for c in comments],
        summary=summary.to_dict(),
        count=len(comments),
        message=f"Successfully loaded {len(comments)} comment(s)",
        enrichment_warnings=warnings or [],
    )


def filtered_comments_message(
    comments: List[NormalizedComment],
    filters: FilterSpec,
) -> Dict[str, Any]:
    return build_message(
        MSG_FILTERED_COMMENTS,
        comments=[c.to_dict() for c in comments],
        count=len(comments),
        filters_applied=filters.model_dump(),
    )


def navigation_complete_message(comment_id: str, result: NavigationResult) -> Dict[str, Any]:
    """Carries every NavigationResult field; unset ones are None."""
    fields = asdict(result)
    return build_message(
        MSG_NAVIGATION_COMPLETE,
        success=fields.pop("success"),
        message=fields.pop("message"),
        comment_id=comment_id,
        **fields,
    )
