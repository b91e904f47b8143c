"""Location Resolver

Maps a normalized comment back to a live position in the document and focuses
it, tolerating drift since the comment was written (deleted nodes, renamed
pages). Resolution is an explicit state machine; each state returns the next
state together with a result, and the machine stops at DONE:

    TRY_NODE ──(node gone)──> NODE_MISSING_RECOVERY ──> DONE
       │
       └──> DONE
    TRY_PAGE ──(page gone)──> PAGE_MISSING_RECOVERY ──> DONE
       │
       └──> DONE
    FILE_LEVEL ──> DONE

The starting state depends on what the comment recorded: a node id starts at
TRY_NODE, a page id alone at TRY_PAGE, nothing at FILE_LEVEL. Any exception
raised inside a state becomes a failed NavigationResult; ``navigate`` never
raises.
"""

from enum import Enum
from typing import Callable, Dict, Optional, Tuple

import structlog

from comment_dashboard.document import PAGE_TYPE, DocumentNode, DocumentTree
from comment_dashboard.models.comment_models import (
    NAVIGATED_TO_FILE,
    NAVIGATED_TO_NODE,
    NAVIGATED_TO_PAGE,
    NavigationResult,
    NormalizedComment,
)

logger = structlog.get_logger()

# Node types that can be selected and zoomed to
VISIBLE_NODE_TYPES = frozenset({
    "FRAME",
    "GROUP",
    "COMPONENT",
    "INSTANCE",
    "RECTANGLE",
    "ELLIPSE",
    "POLYGON",
    "STAR",
    "VECTOR",
    "TEXT",
    "LINE",
    "BOOLEAN_OPERATION",
    "SLICE",
    "STAMP",
    "SHAPE_WITH_TEXT",
    "CONNECTOR",
    "CODE_BLOCK",
    "STICKY",
    "WIDGET",
    "EMBED",
    "LINK_UNFURL",
    "MEDIA",
    "SECTION",
    "HIGHLIGHT",
    "WASHI_TAPE",
})

DELETED_NODE_WARNING = "The original node referenced by this comment may have been deleted"
FILE_LEVEL_INFO = "File-level comments are not associated with a specific node or page"


class NavState(Enum):
    TRY_NODE = "try_node"
    NODE_MISSING_RECOVERY = "node_missing_recovery"
    TRY_PAGE = "try_page"
    PAGE_MISSING_RECOVERY = "page_missing_recovery"
    FILE_LEVEL = "file_level"
    DONE = "done"


# Prefix of the failure message when a state raises unexpectedly
_FAILURE_PREFIXES = {
    NavState.TRY_NODE: "Failed to navigate to node",
    NavState.NODE_MISSING_RECOVERY: "Failed to navigate to node",
    NavState.TRY_PAGE: "Failed to navigate to page",
    NavState.PAGE_MISSING_RECOVERY: "Failed to navigate to page",
    NavState.FILE_LEVEL: "Could not handle file-level comment",
}

Step = Tuple[NavState, Optional[NavigationResult]]


def is_visible_node(node: Optional[DocumentNode]) -> bool:
    """Whether the node is a visual kind that can be selected and zoomed to."""
    return node is not None and node.type in VISIBLE_NODE_TYPES


class LocationResolver:
    """Resolve and focus the document location of a comment.

    Example:
        >>> resolver = LocationResolver(document)
        >>> result = resolver.navigate(comment.id, comment)
        >>> result.navigated_to, result.page_name
        ('node', 'Designs')
    """

    def __init__(self, document: DocumentTree):
        self.document = document
        self._states: Dict[NavState, Callable[[NormalizedComment], Step]] = {
            NavState.TRY_NODE: self._try_node,
            NavState.NODE_MISSING_RECOVERY: self._recover_missing_node,
            NavState.TRY_PAGE: self._try_page,
            NavState.PAGE_MISSING_RECOVERY: self._recover_missing_page,
            NavState.FILE_LEVEL: self._file_level,
        }

    def navigate(self, comment_id: str, comment: Optional[NormalizedComment]) -> NavigationResult:
        """Run the fallback chain for one comment and return its outcome."""
        if not comment_id or not isinstance(comment_id, str):
            return NavigationResult(success=False, message="Invalid comment ID")
        if not isinstance(comment, NormalizedComment):
            return NavigationResult(success=False, message="Comment data not available")

        state = self.initial_state(comment)
        result: Optional[NavigationResult] = None

        while state is not NavState.DONE:
            try:
                next_state, result = self._states[state](comment)
            except Exception as e:
                logger.error(
                    "navigation_failed",
                    comment_id=comment_id,
                    state=state.value,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
                next_state = NavState.DONE
                result = NavigationResult(
                    success=False,
                    message=f"{_FAILURE_PREFIXES[state]}: {e}",
                )
            logger.debug(
                "navigation_transition",
                comment_id=comment_id,
                from_state=state.value,
                to_state=next_state.value,
            )
            state = next_state

        logger.info(
            "navigation_complete",
            comment_id=comment_id,
            success=result.success,
            navigated_to=result.navigated_to,
        )
        return result

    @staticmethod
    def initial_state(comment: NormalizedComment) -> NavState:
        if comment.location.node_id:
            return NavState.TRY_NODE
        if comment.location.page_id:
            return NavState.TRY_PAGE
        return NavState.FILE_LEVEL

    def find_node_page(self, node: Optional[DocumentNode]) -> Optional[DocumentNode]:
        """Containing page by ancestry, falling back to a search of every page."""
        if node is None:
            return None
        return self.document.find_ancestor_page(node) or self.document.find_page_containing(node)

    def _lookup(self, node_id: Optional[str]) -> Optional[DocumentNode]:
        """Node lookup where a failing lookup counts as "not found"."""
        if not node_id:
            return None
        try:
            return self.document.get_node_by_id(node_id)
        except Exception as e:
            logger.warning("node_lookup_failed", node_id=node_id, error=str(e))
            return None

    def _lookup_page(self, page_id: Optional[str]) -> Optional[DocumentNode]:
        node = self._lookup(page_id)
        if node is None or node.type != PAGE_TYPE:
            return None
        return node

    # States

    def _try_node(self, comment: NormalizedComment) -> Step:
        node = self._lookup(comment.location.node_id)
        if node is None:
            return NavState.NODE_MISSING_RECOVERY, None

        page = self.find_node_page(node)
        if page is None:
            return NavState.DONE, NavigationResult(
                success=False,
                message="Could not determine page for node",
            )

        self.document.current_page = page

        if not is_visible_node(node):
            return NavState.DONE, NavigationResult(
                success=True,
                message="Navigated to page (node is not directly visible)",
                navigated_to=NAVIGATED_TO_PAGE,
                page_name=page.name,
            )

        return NavState.DONE, self._select_and_focus(node, page)

    def _select_and_focus(self, node: DocumentNode, page: Optional[DocumentNode]) -> NavigationResult:
        try:
            self.document.select_and_focus([node])
        except Exception as e:
            logger.warning("node_focus_failed", node_id=node.id, error=str(e))
            if page is not None:
                return NavigationResult(
                    success=True,
                    message="Navigated to page (could not zoom to node)",
                    navigated_to=NAVIGATED_TO_PAGE,
                    page_name=page.name,
                )
            return NavigationResult(
                success=False,
                message=f"Failed to navigate to node: {e}",
            )

        return NavigationResult(
            success=True,
            message="Navigated to comment location",
            navigated_to=NAVIGATED_TO_NODE,
            node_id=node.id,
            node_name=node.name or "Unnamed",
            node_type=node.type,
            page_name=page.name if page else "Unknown",
        )

    def _recover_missing_node(self, comment: NormalizedComment) -> Step:
        location = comment.location

        page = self._lookup_page(location.page_id)
        if page is not None:
            self.document.current_page = page
            return NavState.DONE, NavigationResult(
                success=True,
                message="Navigated to page (node may have been deleted)",
                navigated_to=NAVIGATED_TO_PAGE,
                page_name=page.name,
                warning=DELETED_NODE_WARNING,
            )

        page = self.document.find_page_by_name(location.page_name)
        if page is not None:
            self.document.current_page = page
            return NavState.DONE, NavigationResult(
                success=True,
                message="Navigated to page by name (node not found)",
                navigated_to=NAVIGATED_TO_PAGE,
                page_name=page.name,
                warning=DELETED_NODE_WARNING,
            )

        return NavState.DONE, NavigationResult(
            success=False,
            message="Node not found. It may have been deleted or moved to a different file.",
            node_id=location.node_id,
        )

    def _try_page(self, comment: NormalizedComment) -> Step:
        page = self._lookup_page(comment.location.page_id)
        if page is None:
            return NavState.PAGE_MISSING_RECOVERY, None
        return NavState.DONE, self._show_page(page)

    def _recover_missing_page(self, comment: NormalizedComment) -> Step:
        page = self.document.find_page_by_name(comment.location.page_name)
        if page is None:
            return NavState.DONE, NavigationResult(
                success=False,
                message="Page not found. It may have been deleted or renamed.",
            )
        return NavState.DONE, self._show_page(page)

    def _show_page(self, page: DocumentNode) -> NavigationResult:
        self.document.current_page = page
        self.document.focus_viewport([page])
        return NavigationResult(
            success=True,
            message="Navigated to page",
            navigated_to=NAVIGATED_TO_PAGE,
            page_name=page.name,
        )

    def _file_level(self, comment: NormalizedComment) -> Step:
        pages = self.document.pages
        if not pages:
            return NavState.DONE, NavigationResult(
                success=False,
                message="This is a file-level comment with no specific location to navigate to",
            )

        first_page = pages[0]
        self.document.current_page = first_page
        return NavState.DONE, NavigationResult(
            success=True,
            message="This is a file-level comment (no specific location)",
            navigated_to=NAVIGATED_TO_FILE,
            page_name=first_page.name,
            info=FILE_LEVEL_INFO,
        )
