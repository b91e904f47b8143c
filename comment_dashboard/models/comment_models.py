"""Comment data models for the Comment Dashboard.

This module defines the data structures that flow through the pipeline:

    RawComment: one record of the comments API, parsed from JSON
    PreparedComment: a RawComment plus the page/node it was found on
    NormalizedComment: the canonical, denormalized comment held by a session
    CommentSummary: dashboard statistics over the normalized collection
    NavigationResult: outcome of a "go to comment location" request
    FilterSpec: the declarative filter applied to the normalized collection

Domain records are dataclasses; FilterSpec is a pydantic model because it is
built straight from untrusted UI input.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

# Status categories
STATUS_RESOLVED = "resolved"
STATUS_RECENT = "recent"
STATUS_ACTIVE = "active"

# Navigation targets
NAVIGATED_TO_NODE = "node"
NAVIGATED_TO_PAGE = "page"
NAVIGATED_TO_FILE = "file"


@dataclass
class ClientMeta:
    """Document position a comment was pinned to.

    Attributes:
        node_id: Identifier of the node the comment is attached to
        node_offset: Offset within the node (API passes it through as-is)
    """
    node_id: Optional[str] = None
    node_offset: Optional[Any] = None


@dataclass
class RawUser:
    """Author reference as returned by the API."""
    id: Optional[str] = None
    handle: Optional[str] = None
    name: Optional[str] = None
    img_url: Optional[str] = None


@dataclass
class RawComment:
    """A single record of ``GET /v1/files/{key}/comments``.

    Attributes:
        id: Comment identifier
        user: Author reference (None when the API omits it)
        created_at: Creation timestamp string (ISO 8601)
        resolved_at: Resolution timestamp string, None while unresolved
        message: Free-text body
        parent_id: Identifier of the comment this one replies to
        client_meta: Document position metadata, None for file-level comments
    """
    id: str
    user: Optional[RawUser] = None
    created_at: Optional[str] = None
    resolved_at: Optional[str] = None
    message: str = ""
    parent_id: Optional[str] = None
    client_meta: Optional[ClientMeta] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "RawComment":
        """Build a RawComment from one API record, tolerating missing fields."""
        user_data = data.get("user")
        user = None
        if isinstance(user_data, dict):
            user = RawUser(
                id=user_data.get("id"),
                handle=user_data.get("handle"),
                name=user_data.get("name"),
                img_url=user_data.get("img_url"),
            )

        meta_data = data.get("client_meta")
        client_meta = None
        if isinstance(meta_data, dict):
            client_meta = ClientMeta(
                node_id=meta_data.get("node_id"),
                node_offset=meta_data.get("node_offset"),
            )

        return cls(
            id=data.get("id"),
            user=user,
            created_at=data.get("created_at"),
            resolved_at=data.get("resolved_at"),
            message=data.get("message") or "",
            parent_id=data.get("parent_id") or None,
            client_meta=client_meta,
        )


@dataclass
class PageRef:
    """A page as seen at fetch time."""
    id: str
    name: str


@dataclass
class NodeRef:
    """A node as seen at fetch time."""
    id: str
    name: str
    type: str


@dataclass
class ResolvedLocation:
    """Best-effort page/node lookup of a comment's node in the live document.

    Both fields are None for file-level comments and for nodes that could not
    be found; ``page`` alone is set when only the page could be determined.
    """
    page: Optional[PageRef] = None
    node: Optional[NodeRef] = None


@dataclass
class CommentAuthor:
    """Comment author with display fallbacks applied."""
    id: Optional[str] = None
    name: str = "Unknown"
    avatar: Optional[str] = None


@dataclass
class PreparedComment:
    """A fetched comment enriched with its document location, ready to normalize.

    Attributes:
        id: Comment identifier
        author: Author with display name fallback already applied
        created_at: Creation timestamp string
        resolved: Whether the comment has a resolution timestamp
        resolved_at: Resolution timestamp string
        message: Free-text body
        parent_id: Identifier of the parent comment for replies
        node_id: Node identifier recorded by the API (even if the node is gone)
        node_offset: Offset within the node
        page: Page the node was found on at fetch time
        node: Node as found at fetch time
    """
    id: str
    author: CommentAuthor = field(default_factory=CommentAuthor)
    created_at: Optional[str] = None
    resolved: bool = False
    resolved_at: Optional[str] = None
    message: str = ""
    parent_id: Optional[str] = None
    node_id: Optional[str] = None
    node_offset: Optional[Any] = None
    page: Optional[PageRef] = None
    node: Optional[NodeRef] = None


@dataclass
class CommentLocation:
    """Where a comment lives, denormalized for display and filtering."""
    page_id: Optional[str] = None
    page_name: Optional[str] = None
    node_id: Optional[str] = None
    node_name: Optional[str] = None
    node_type: Optional[str] = None
    display: str = "File"


@dataclass
class ThreadInfo:
    """Reply statistics for a comment (filled in by the second normalizer pass)."""
    reply_count: int = 0
    has_replies: bool = False


@dataclass
class CommentMetadata:
    """Derived flags and denormalized keys used by filters and the dashboard."""
    has_location: bool = False
    has_node: bool = False
    is_recent: bool = False
    is_old: bool = False
    is_urgent: bool = False
    author_id: Optional[str] = None
    page_id: Optional[str] = None
    node_type: Optional[str] = None


@dataclass
class NormalizedComment:
    """The canonical comment held in session state.

    ``age_days`` is computed once at normalization time and never refreshed;
    re-fetch to update it.
    """
    id: str
    parent_id: Optional[str]
    is_reply: bool
    author: CommentAuthor
    message: str
    message_preview: str
    resolved: bool
    status_label: str
    status_category: str
    created_at: Optional[str]
    created_at_formatted: str
    resolved_at: Optional[str]
    resolved_at_formatted: Optional[str]
    created_timestamp: Optional[int]
    resolved_timestamp: Optional[int]
    age_days: int
    age_days_formatted: str
    days_to_resolve: Optional[int]
    days_to_resolve_formatted: Optional[str]
    location: CommentLocation
    node_offset: Optional[Any]
    metadata: CommentMetadata
    thread: ThreadInfo = field(default_factory=ThreadInfo)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SummaryTotals:
    all: int = 0
    resolved: int = 0
    unresolved: int = 0
    replies: int = 0
    top_level: int = 0


@dataclass
class StatusCounts:
    active: int = 0
    resolved: int = 0
    recent: int = 0


@dataclass
class AgeCounts:
    """Comment counts per age bucket; buckets overlap (a 0-day comment is in three)."""
    today: int = 0
    this_week: int = 0
    this_month: int = 0
    older: int = 0


@dataclass
class OldestUnresolved:
    id: str
    age_days: int
    message_preview: str


@dataclass
class AuthorStats:
    """Per-author comment counts; authors without an id are grouped as "unknown"."""
    id: str
    name: str
    total: int = 0
    resolved: int = 0
    unresolved: int = 0


@dataclass
class CommentSummary:
    """Dashboard statistics computed over the full normalized collection."""
    totals: SummaryTotals = field(default_factory=SummaryTotals)
    by_status: StatusCounts = field(default_factory=StatusCounts)
    by_age: AgeCounts = field(default_factory=AgeCounts)
    oldest_unresolved: Optional[OldestUnresolved] = None
    by_author: List[AuthorStats] = field(default_factory=list)
    resolution_rate: int = 0
    average_age_days: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class NavigationResult:
    """Uniform outcome of every Location Resolver tier.

    Attributes:
        success: Whether the viewer ended up somewhere meaningful
        message: Human-readable outcome
        navigated_to: "node", "page" or "file" on success
        page_name: Name of the page that became current
        node_id: Selected node, or the stale node id on "node not found"
        node_name: Name of the selected node
        node_type: Type tag of the selected node
        warning: Set when the original target appears to have been deleted
        info: Extra explanation for file-level comments
    """
    success: bool
    message: str
    navigated_to: Optional[str] = None
    page_name: Optional[str] = None
    node_id: Optional[str] = None
    node_name: Optional[str] = None
    node_type: Optional[str] = None
    warning: Optional[str] = None
    info: Optional[str] = None


class FilterSpec(BaseModel):
    """Declarative comment filter; every unset field disables that predicate.

    Attributes:
        status: "resolved", "unresolved", "active" or "recent"
        author: Author id to match exactly
        page: Page id to match exactly
        node_type: Node type tag to match exactly
        age_range: "today", "week", "month" or "older"
        search: Case-insensitive substring over message, author and location
    """
    model_config = ConfigDict(extra="ignore")

    status: Optional[str] = None
    author: Optional[str] = None
    page: Optional[str] = None
    node_type: Optional[str] = None
    age_range: Optional[str] = None
    search: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _empty_as_unset(cls, value: Any) -> Any:
        # Falsy UI values ("" / 0 / false) mean "no filter on this dimension"
        if not value:
            return None
        return value
