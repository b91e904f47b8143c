"""Comment Normalizer

Turns prepared comment records (API fields plus the page/node found at fetch
time) into the NormalizedComment collection held by a session.

Normalization runs in two passes:

1. Every comment is converted independently: author fallbacks, message
   preview, age and status classification, formatted timestamps, location
   display string and metadata flags.
2. A parent_id -> [child ids] index is built over the whole result and each
   comment's thread info (reply_count, has_replies) is filled in from it.

Ages are measured against a single "now" taken when normalization starts and
are stored, not recomputed: a comment loaded yesterday still says "Today"
until the session re-fetches.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import structlog

from comment_dashboard.formatting import (
    format_age,
    format_date,
    parse_timestamp,
    to_millis,
    truncate_text,
    whole_days_between,
)
from comment_dashboard.models.comment_models import (
    STATUS_ACTIVE,
    STATUS_RECENT,
    STATUS_RESOLVED,
    CommentAuthor,
    CommentLocation,
    CommentMetadata,
    NormalizedComment,
    PreparedComment,
    ThreadInfo,
)

logger = structlog.get_logger()

PREVIEW_LENGTH = 100

# Age thresholds (days) used by metadata flags
RECENT_DAYS = 7
OLD_DAYS = 30
URGENT_DAYS = 7


def classify_status(resolved: bool, age_days: int) -> Tuple[str, str]:
    """Return (status_label, status_category) for a comment.

    Resolved comments are always "resolved" whatever their age. Unresolved
    comments are "recent" for their first week and "active" afterwards.

    Example:
        >>> classify_status(False, 3)
        ('3 days ago', 'recent')
        >>> classify_status(True, 90)
        ('Resolved', 'resolved')
    """
    if resolved:
        return "Resolved", STATUS_RESOLVED
    if age_days == 0:
        return "Today", STATUS_RECENT
    if age_days == 1:
        return "Yesterday", STATUS_RECENT
    if age_days < RECENT_DAYS:
        return f"{age_days} days ago", STATUS_RECENT
    return "Active", STATUS_ACTIVE


def describe_location(comment: PreparedComment) -> str:
    """One-line location label: "Page > Node", "Page", "Node" or "File"."""
    if comment.page:
        display = comment.page.name
        if comment.node:
            display += " > " + comment.node.name
        return display
    if comment.node:
        return comment.node.name
    return "File"


def _age_in_days(created: Optional[datetime], now: datetime, comment_id: str) -> int:
    if created is None:
        return 0
    age = whole_days_between(created, now)
    if age < 0:
        # Creation time in the future: clock skew between API and host
        logger.warning("comment_created_in_future", comment_id=comment_id, age_days=age)
        return 0
    return age


def normalize_comment(comment: PreparedComment, now: datetime) -> NormalizedComment:
    """Derive every per-comment field (pass 1). Thread info is left at zero."""
    created = parse_timestamp(comment.created_at)
    resolved_dt = parse_timestamp(comment.resolved_at)

    age_days = _age_in_days(created, now, comment.id)

    days_to_resolve = None
    if created is not None and resolved_dt is not None:
        days_to_resolve = max(0, whole_days_between(created, resolved_dt))

    resolved = bool(comment.resolved)
    status_label, status_category = classify_status(resolved, age_days)

    message = comment.message or ""
    author = comment.author or CommentAuthor()
    page = comment.page
    node = comment.node

    return NormalizedComment(
        id=comment.id,
        parent_id=comment.parent_id or None,
        is_reply=bool(comment.parent_id),
        author=CommentAuthor(
            id=author.id or None,
            name=author.name or "Unknown",
            avatar=author.avatar or None,
        ),
        message=message,
        message_preview=truncate_text(message, PREVIEW_LENGTH),
        resolved=resolved,
        status_label=status_label,
        status_category=status_category,
        created_at=comment.created_at,
        created_at_formatted=format_date(created, now),
        resolved_at=comment.resolved_at or None,
        resolved_at_formatted=format_date(resolved_dt, now) if resolved_dt else None,
        created_timestamp=to_millis(created),
        resolved_timestamp=to_millis(resolved_dt),
        age_days=age_days,
        age_days_formatted=format_age(age_days),
        days_to_resolve=days_to_resolve,
        days_to_resolve_formatted=format_age(days_to_resolve) if days_to_resolve is not None else None,
        location=CommentLocation(
            page_id=page.id if page else None,
            page_name=page.name if page else None,
            node_id=comment.node_id or None,
            node_name=node.name if node else None,
            node_type=node.type if node else None,
            display=describe_location(comment),
        ),
        node_offset=comment.node_offset or None,
        metadata=CommentMetadata(
            has_location=bool(page or node),
            has_node=bool(node),
            is_recent=age_days < RECENT_DAYS,
            is_old=age_days > OLD_DAYS,
            is_urgent=not resolved and age_days > URGENT_DAYS,
            author_id=author.id or None,
            page_id=page.id if page else None,
            node_type=node.type if node else None,
        ),
    )


def build_reply_index(comments: List[NormalizedComment]) -> Dict[str, List[str]]:
    """Map each parent id to the ids of the comments replying to it."""
    threads: Dict[str, List[str]] = {}
    for comment in comments:
        if comment.parent_id:
            threads.setdefault(comment.parent_id, []).append(comment.id)
    return threads


def normalize_comments(
    prepared: List[PreparedComment],
    now: Optional[datetime] = None,
) -> List[NormalizedComment]:
    """Normalize a fetched batch, preserving input order.

    Args:
        prepared: Records produced by the fetch orchestrator
        now: Reference time for ages (default: current UTC time; naive
            values are read as UTC)

    Returns:
        list[NormalizedComment]; empty for empty or non-list input
    """
    if not isinstance(prepared, (list, tuple)) or not prepared:
        return []

    if now is None:
        now = datetime.now(timezone.utc).astimezone()
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    normalized = [normalize_comment(comment, now) for comment in prepared]

    threads = build_reply_index(normalized)
    for comment in normalized:
        replies = threads.get(comment.id, [])
        comment.thread = ThreadInfo(reply_count=len(replies), has_replies=bool(replies))

    logger.debug(
        "comments_normalized",
        count=len(normalized),
        threads=len(threads),
    )
    return normalized
