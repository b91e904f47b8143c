"""Summary Aggregator: dashboard statistics over normalized comments.

Always computed from the full collection held by the session, never from a
filtered view.
"""

import math
from typing import Dict, List

from comment_dashboard.models.comment_models import (
    STATUS_ACTIVE,
    STATUS_RECENT,
    STATUS_RESOLVED,
    AgeCounts,
    AuthorStats,
    CommentSummary,
    NormalizedComment,
    OldestUnresolved,
    StatusCounts,
    SummaryTotals,
)

UNKNOWN_AUTHOR_ID = "unknown"


def _round_half_up(value: float) -> int:
    # round() would give banker's rounding (2.5 -> 2)
    return int(math.floor(value + 0.5))


def count_by_age(comments: List[NormalizedComment]) -> AgeCounts:
    """Count comments per age bucket.

    The buckets are cumulative thresholds (today: 0 days, this_week: < 7,
    this_month: < 30, older: >= 30), so a comment can fall in several.
    """
    return AgeCounts(
        today=sum(1 for c in comments if c.age_days == 0),
        this_week=sum(1 for c in comments if c.age_days < 7),
        this_month=sum(1 for c in comments if c.age_days < 30),
        older=sum(1 for c in comments if c.age_days >= 30),
    )


def find_oldest_unresolved(comments: List[NormalizedComment]):
    """Return the unresolved comment with the largest age; first one wins ties."""
    oldest = None
    for comment in comments:
        if comment.resolved:
            continue
        if oldest is None or comment.age_days > oldest.age_days:
            oldest = comment
    return oldest


def count_by_author(comments: List[NormalizedComment]) -> List[AuthorStats]:
    """Per-author totals; comments without an author id share the "unknown" bucket."""
    by_author: Dict[str, AuthorStats] = {}
    for comment in comments:
        author_id = comment.author.id or UNKNOWN_AUTHOR_ID
        stats = by_author.get(author_id)
        if stats is None:
            stats = AuthorStats(id=author_id, name=comment.author.name)
            by_author[author_id] = stats
        stats.total += 1
        if comment.resolved:
            stats.resolved += 1
        else:
            stats.unresolved += 1
    return list(by_author.values())


def create_comment_summary(comments: List[NormalizedComment]) -> CommentSummary:
    """Compute the dashboard summary.

    Example:
        >>> summary = create_comment_summary(session.comments)
        >>> summary.totals.all, summary.resolution_rate
        (4, 75)

    An empty collection yields all-zero counts, no oldest comment, and a
    resolution rate and average age of 0.
    """
    total = len(comments)
    resolved = sum(1 for c in comments if c.resolved)
    replies = sum(1 for c in comments if c.is_reply)

    oldest = find_oldest_unresolved(comments)

    return CommentSummary(
        totals=SummaryTotals(
            all=total,
            resolved=resolved,
            unresolved=total - resolved,
            replies=replies,
            top_level=total - replies,
        ),
        by_status=StatusCounts(
            active=sum(1 for c in comments if c.status_category == STATUS_ACTIVE),
            resolved=sum(1 for c in comments if c.status_category == STATUS_RESOLVED),
            recent=sum(1 for c in comments if c.status_category == STATUS_RECENT),
        ),
        by_age=count_by_age(comments),
        oldest_unresolved=OldestUnresolved(
            id=oldest.id,
            age_days=oldest.age_days,
            message_preview=oldest.message_preview,
        ) if oldest is not None else None,
        by_author=count_by_author(comments),
        resolution_rate=_round_half_up(resolved / total * 100) if total else 0,
        average_age_days=_round_half_up(sum(c.age_days for c in comments) / total) if total else 0,
    )
