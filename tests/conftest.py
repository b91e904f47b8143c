"""
Shared pytest fixtures for the comment dashboard tests.

Provides a fixed reference time, a small document tree and factories for
API records and prepared comments so tests can describe comments by age.
"""

from datetime import datetime, timedelta, timezone

import pytest

from comment_dashboard.document import DocumentTree
from comment_dashboard.models.comment_models import (
    CommentAuthor,
    NodeRef,
    PageRef,
    PreparedComment,
)

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def iso_days_ago(days: int, hours: int = 1) -> str:
    """ISO timestamp ``days`` whole days (plus ``hours``) before NOW."""
    return (NOW - timedelta(days=days, hours=hours)).isoformat().replace("+00:00", "Z")


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def document():
    """Two pages; Designs holds a frame with a text child and a component set.

    1:0 Designs (PAGE)
        1:2 Header (FRAME)
            1:3 Title (TEXT)
        1:4 Buttons (COMPONENT_SET)
    2:0 Archive (PAGE)
        2:1 Old Card (RECTANGLE)
    """
    doc = DocumentTree()
    doc.add_page("1:0", "Designs")
    doc.add_page("2:0", "Archive")
    doc.add_node("1:2", "Header", "FRAME", parent_id="1:0")
    doc.add_node("1:3", "Title", "TEXT", parent_id="1:2")
    doc.add_node("1:4", "Buttons", "COMPONENT_SET", parent_id="1:0")
    doc.add_node("2:1", "Old Card", "RECTANGLE", parent_id="2:0")
    return doc


@pytest.fixture
def make_raw_comment():
    """Factory for API comment records."""
    def _make(
        comment_id="c1",
        days_ago=0,
        message="Looks good",
        user=None,
        resolved_days_ago=None,
        parent_id="",
        node_id=None,
    ):
        record = {
            "id": comment_id,
            "user": user if user is not None else {
                "id": "u1",
                "handle": "alice",
                "img_url": "https://example.com/alice.png",
            },
            "created_at": iso_days_ago(days_ago),
            "resolved_at": iso_days_ago(resolved_days_ago, hours=0) if resolved_days_ago is not None else None,
            "message": message,
            "parent_id": parent_id,
            "client_meta": {"node_id": node_id, "node_offset": {"x": 10, "y": 20}} if node_id else None,
        }
        return record
    return _make


@pytest.fixture
def make_prepared():
    """Factory for PreparedComment records described by age in days."""
    def _make(
        comment_id="c1",
        days_ago=0,
        message="Looks good",
        author_id="u1",
        author_name="alice",
        resolved=False,
        resolved_days_ago=None,
        parent_id=None,
        page=None,
        node=None,
        node_id=None,
    ):
        resolved_at = None
        if resolved:
            resolved_at = iso_days_ago(resolved_days_ago if resolved_days_ago is not None else 0, hours=0)
        return PreparedComment(
            id=comment_id,
            author=CommentAuthor(id=author_id, name=author_name, avatar=None),
            created_at=iso_days_ago(days_ago),
            resolved=resolved,
            resolved_at=resolved_at,
            message=message,
            parent_id=parent_id,
            node_id=node_id or (node.id if node else None),
            page=page,
            node=node,
        )
    return _make


@pytest.fixture
def designs_page():
    return PageRef(id="1:0", name="Designs")


@pytest.fixture
def header_node():
    return NodeRef(id="1:2", name="Header", type="FRAME")
