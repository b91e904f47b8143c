"""
Tests for the location resolver.

Covers every tier of the fallback chain: node, missing-node recovery, page,
missing-page recovery and file-level comments, plus the failure paths that
must never raise.
"""

from unittest.mock import patch

import pytest

from comment_dashboard.document import DocumentTree
from comment_dashboard.messages import navigation_complete_message
from comment_dashboard.models.comment_models import (
    NAVIGATED_TO_FILE,
    NAVIGATED_TO_NODE,
    NAVIGATED_TO_PAGE,
    NodeRef,
    PageRef,
)
from comment_dashboard.navigation import (
    DELETED_NODE_WARNING,
    FILE_LEVEL_INFO,
    LocationResolver,
    NavState,
    is_visible_node,
)
from comment_dashboard.normalizer import normalize_comments
from comment_dashboard.utils.errors import DocumentLookupError


@pytest.fixture
def comment_at(make_prepared, now):
    """Build one normalized comment pinned to the given page/node."""
    def _make(page=None, node=None, node_id=None):
        [comment] = normalize_comments(
            [make_prepared(page=page, node=node, node_id=node_id)], now=now,
        )
        return comment
    return _make


@pytest.fixture
def resolver(document):
    return LocationResolver(document)


ARCHIVE = PageRef(id="2:0", name="Archive")
TITLE = NodeRef(id="1:3", name="Title", type="TEXT")


class TestInitialState:
    def test_node_first(self, comment_at, designs_page, header_node):
        comment = comment_at(page=designs_page, node=header_node)
        assert LocationResolver.initial_state(comment) is NavState.TRY_NODE

    def test_stale_node_id_still_tries_node(self, comment_at):
        assert LocationResolver.initial_state(comment_at(node_id="9:9")) is NavState.TRY_NODE

    def test_page_only(self, comment_at, designs_page):
        assert LocationResolver.initial_state(comment_at(page=designs_page)) is NavState.TRY_PAGE

    def test_file_level(self, comment_at):
        assert LocationResolver.initial_state(comment_at()) is NavState.FILE_LEVEL


class TestInvalidRequests:
    @pytest.mark.parametrize("comment_id", ["", None, 42])
    def test_invalid_comment_id(self, resolver, comment_at, comment_id):
        result = resolver.navigate(comment_id, comment_at())
        assert result.success is False
        assert result.message == "Invalid comment ID"

    def test_missing_comment(self, resolver):
        result = resolver.navigate("c1", None)
        assert result.success is False
        assert result.message == "Comment data not available"


class TestNodeTier:
    """Verify navigation straight to an existing node."""

    def test_selects_and_focuses_visible_node(self, resolver, document, comment_at, designs_page):
        document.current_page = document.get_node_by_id("2:0")
        comment = comment_at(page=designs_page, node=TITLE)

        result = resolver.navigate(comment.id, comment)

        assert result.success is True
        assert result.navigated_to == NAVIGATED_TO_NODE
        assert result.message == "Navigated to comment location"
        assert result.node_id == "1:3"
        assert result.node_name == "Title"
        assert result.node_type == "TEXT"
        assert result.page_name == "Designs"
        assert document.current_page.id == "1:0"
        assert document.selection == ["1:3"]
        assert document.viewport_focus == ["1:3"]

    def test_uses_live_page_not_recorded_page(self, resolver, document, comment_at):
        """The node moved pages since the comment was written."""
        comment = comment_at(page=ARCHIVE, node=TITLE)
        result = resolver.navigate(comment.id, comment)

        assert result.page_name == "Designs"
        assert document.current_page.id == "1:0"

    def test_non_visual_node_shows_page(self, resolver, document, comment_at, designs_page):
        comment = comment_at(page=designs_page, node=NodeRef(id="1:4", name="Buttons", type="COMPONENT_SET"))
        result = resolver.navigate(comment.id, comment)

        assert result.success is True
        assert result.navigated_to == NAVIGATED_TO_PAGE
        assert result.message == "Navigated to page (node is not directly visible)"
        assert result.page_name == "Designs"
        assert document.selection == []

    def test_node_without_page(self, resolver, document, comment_at):
        document.add_node("5:1", "Floating", "FRAME")
        comment = comment_at(node=NodeRef(id="5:1", name="Floating", type="FRAME"))

        result = resolver.navigate(comment.id, comment)

        assert result.success is False
        assert result.message == "Could not determine page for node"

    def test_focus_failure_falls_back_to_page(self, resolver, document, comment_at, designs_page, header_node):
        comment = comment_at(page=designs_page, node=header_node)

        with patch.object(document, "focus_viewport", side_effect=DocumentLookupError("zoom failed")):
            result = resolver.navigate(comment.id, comment)

        assert result.success is True
        assert result.navigated_to == NAVIGATED_TO_PAGE
        assert result.message == "Navigated to page (could not zoom to node)"
        assert result.page_name == "Designs"

    def test_unnamed_node(self, resolver, document, comment_at, designs_page):
        document.add_node("1:9", "", "RECTANGLE", parent_id="1:0")
        comment = comment_at(page=designs_page, node=NodeRef(id="1:9", name="", type="RECTANGLE"))

        result = resolver.navigate(comment.id, comment)
        assert result.node_name == "Unnamed"


class TestMissingNodeRecovery:
    """Verify recovery when the recorded node was deleted."""

    def test_recovers_by_page_id(self, resolver, document, comment_at, header_node):
        comment = comment_at(page=ARCHIVE, node=header_node)
        document.remove_node("1:2")

        result = resolver.navigate(comment.id, comment)

        assert result.success is True
        assert result.navigated_to == NAVIGATED_TO_PAGE
        assert result.message == "Navigated to page (node may have been deleted)"
        assert result.page_name == "Archive"
        assert result.warning == DELETED_NODE_WARNING
        assert document.current_page.id == "2:0"

    def test_recovers_by_page_name(self, resolver, comment_at):
        comment = comment_at(page=PageRef(id="7:0", name="  archive"), node=NodeRef(id="9:9", name="Gone", type="FRAME"))

        result = resolver.navigate(comment.id, comment)

        assert result.success is True
        assert result.message == "Navigated to page by name (node not found)"
        assert result.page_name == "Archive"
        assert result.warning == DELETED_NODE_WARNING

    def test_stale_node_id_fails_with_node_id(self, resolver, comment_at):
        comment = comment_at(node_id="9:9")

        result = resolver.navigate(comment.id, comment)

        assert result.success is False
        assert result.message == "Node not found. It may have been deleted or moved to a different file."
        assert result.node_id == "9:9"
        assert result.navigated_to is None

    def test_lookup_error_counts_as_missing(self, resolver, document, comment_at, designs_page, header_node):
        comment = comment_at(page=designs_page, node=header_node)

        with patch.object(document, "get_node_by_id", side_effect=DocumentLookupError("boom")):
            result = resolver.navigate(comment.id, comment)

        # page lookup goes through the same failing call, so recovery falls to the name search
        assert result.success is True
        assert result.message == "Navigated to page by name (node not found)"


class TestPageTier:
    def test_navigates_to_page(self, resolver, document, comment_at):
        comment = comment_at(page=ARCHIVE)

        result = resolver.navigate(comment.id, comment)

        assert result.success is True
        assert result.navigated_to == NAVIGATED_TO_PAGE
        assert result.message == "Navigated to page"
        assert result.page_name == "Archive"
        assert document.current_page.id == "2:0"
        assert document.viewport_focus == ["2:0"]

    def test_renamed_id_recovered_by_name(self, resolver, comment_at):
        comment = comment_at(page=PageRef(id="8:0", name="Designs"))
        result = resolver.navigate(comment.id, comment)

        assert result.success is True
        assert result.page_name == "Designs"

    def test_page_id_pointing_at_non_page(self, resolver, comment_at):
        comment = comment_at(page=PageRef(id="1:2", name="Header"))
        result = resolver.navigate(comment.id, comment)

        assert result.success is False
        assert result.message == "Page not found. It may have been deleted or renamed."

    def test_page_gone(self, resolver, document, comment_at):
        comment = comment_at(page=ARCHIVE)
        document.remove_node("2:0")

        result = resolver.navigate(comment.id, comment)

        assert result.success is False
        assert result.message == "Page not found. It may have been deleted or renamed."


class TestFileLevel:
    def test_shows_first_page(self, resolver, document, comment_at):
        document.current_page = document.get_node_by_id("2:0")
        comment = comment_at()

        result = resolver.navigate(comment.id, comment)

        assert result.success is True
        assert result.navigated_to == NAVIGATED_TO_FILE
        assert result.message == "This is a file-level comment (no specific location)"
        assert result.page_name == "Designs"
        assert result.info == FILE_LEVEL_INFO
        assert document.current_page.id == "1:0"

    def test_no_pages(self, comment_at):
        resolver = LocationResolver(DocumentTree())
        comment = comment_at()

        result = resolver.navigate(comment.id, comment)

        assert result.success is False
        assert result.message == "This is a file-level comment with no specific location to navigate to"


class TestUnexpectedErrors:
    """Exceptions inside a state become failed results."""

    def test_page_switch_error(self, resolver, document, comment_at):
        comment = comment_at(page=ARCHIVE)

        with patch.object(document, "focus_viewport", side_effect=RuntimeError("viewport locked")):
            result = resolver.navigate(comment.id, comment)

        assert result.success is False
        assert result.message == "Failed to navigate to page: viewport locked"

    def test_file_level_error(self, document, comment_at):
        comment = comment_at()

        with patch.object(LocationResolver, "_file_level", side_effect=RuntimeError("no pages API")):
            resolver = LocationResolver(document)
            result = resolver.navigate(comment.id, comment)

        assert result.success is False
        assert result.message == "Could not handle file-level comment: no pages API"

    def test_outbound_message_carries_result(self, resolver, comment_at):
        comment = comment_at(page=ARCHIVE)
        msg = navigation_complete_message(comment.id, resolver.navigate(comment.id, comment))

        assert msg == {
            "type": "navigation-complete",
            "success": True,
            "message": "Navigated to page",
            "comment_id": comment.id,
            "navigated_to": "page",
            "page_name": "Archive",
            "node_id": None,
            "node_name": None,
            "node_type": None,
            "warning": None,
            "info": None,
        }


class TestVisibleNodes:
    @pytest.mark.parametrize("node_type,visible", [
        ("FRAME", True),
        ("TEXT", True),
        ("SECTION", True),
        ("PAGE", False),
        ("COMPONENT_SET", False),
        ("DOCUMENT", False),
    ])
    def test_visibility(self, document, node_type, visible):
        node = document.add_node("6:1", "n", node_type, parent_id="1:0")
        assert is_visible_node(node) is visible

    def test_none(self):
        assert is_visible_node(None) is False
