"""Fetch Orchestrator

Loads a file's comments from the API, resolves each comment's node against
the live document, and normalizes the batch.

Enrichment is best-effort per comment: if a node cannot be looked up the
comment keeps its recorded node id but loses its page/node names, a warning is
logged and collected, and the rest of the batch carries on. Payload-shape and
HTTP errors, on the other hand, abort the whole fetch before any session state
is touched.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog

from comment_dashboard.document import DocumentTree
from comment_dashboard.figma_client import FigmaClient
from comment_dashboard.models.comment_models import (
    CommentAuthor,
    NodeRef,
    NormalizedComment,
    PageRef,
    PreparedComment,
    RawComment,
    ResolvedLocation,
)
from comment_dashboard.normalizer import normalize_comments
from comment_dashboard.utils.errors import (
    WARNING_TYPE_NODE_LOOKUP_FAILED,
    WARNING_TYPE_NODE_NOT_FOUND,
    WARNING_TYPE_PAGE_NOT_FOUND,
    AuthRequiredError,
    EnrichmentWarnings,
    FileKeyUnavailableError,
    InvalidResponseError,
)

logger = structlog.get_logger()


@dataclass
class FetchResult:
    """Outcome of a successful fetch.

    Attributes:
        comments: Normalized comments in API response order
        warnings: Per-comment enrichment warnings (non-fatal)
    """
    comments: List[NormalizedComment] = field(default_factory=list)
    warnings: List[Dict[str, Any]] = field(default_factory=list)


def resolve_location(
    document: DocumentTree,
    comment_id: str,
    node_id: Optional[str],
    warnings: EnrichmentWarnings,
) -> ResolvedLocation:
    """Look up a comment's node and the page it currently sits on.

    Never raises: lookup failures are logged, recorded in ``warnings`` and
    produce an empty location.
    """
    if not node_id:
        return ResolvedLocation()

    try:
        node = document.get_node_by_id(node_id)
    except Exception as e:
        logger.warning(
            "node_lookup_failed",
            comment_id=comment_id,
            node_id=node_id,
            error=str(e),
            error_type=type(e).__name__,
        )
        warnings.append(
            WARNING_TYPE_NODE_LOOKUP_FAILED,
            f"Could not look up node {node_id}: {e}",
            {"comment_id": comment_id, "node_id": node_id},
        )
        return ResolvedLocation()

    if node is None:
        logger.info("comment_node_missing", comment_id=comment_id, node_id=node_id)
        warnings.append(
            WARNING_TYPE_NODE_NOT_FOUND,
            f"Node {node_id} is not in the document",
            {"comment_id": comment_id, "node_id": node_id},
        )
        return ResolvedLocation()

    page = document.find_ancestor_page(node)
    if page is None:
        warnings.append(
            WARNING_TYPE_PAGE_NOT_FOUND,
            f"Node {node_id} is not inside any page",
            {"comment_id": comment_id, "node_id": node_id},
        )

    return ResolvedLocation(
        page=PageRef(id=page.id, name=page.name) if page is not None else None,
        node=NodeRef(id=node.id, name=node.name or "Unnamed", type=node.type),
    )


def prepare_comment(
    raw: RawComment,
    document: DocumentTree,
    warnings: EnrichmentWarnings,
) -> PreparedComment:
    """Combine an API record with its resolved location."""
    node_id = raw.client_meta.node_id if raw.client_meta else None
    location = resolve_location(document, raw.id, node_id, warnings)

    user = raw.user
    author = CommentAuthor(
        id=user.id if user else None,
        name=(user.handle or user.name or "Unknown") if user else "Unknown",
        avatar=user.img_url if user else None,
    )

    return PreparedComment(
        id=raw.id,
        author=author,
        created_at=raw.created_at,
        resolved=raw.resolved_at is not None,
        resolved_at=raw.resolved_at,
        message=raw.message or "",
        parent_id=raw.parent_id or None,
        node_id=node_id,
        node_offset=raw.client_meta.node_offset if raw.client_meta else None,
        page=location.page,
        node=location.node,
    )


class CommentFetcher:
    """Fetch, enrich and normalize the comments of the open file.

    Example:
        >>> fetcher = CommentFetcher(FigmaClient(), document)
        >>> fetcher.ensure_ready(token, file_key)
        >>> result = await fetcher.fetch(file_key, token)
        >>> len(result.comments)
        12
    """

    def __init__(self, client: FigmaClient, document: DocumentTree):
        self.client = client
        self.document = document

    @staticmethod
    def ensure_ready(token: Optional[str], file_key: Optional[str]) -> None:
        """Check the preconditions of a fetch without touching the network.

        Raises:
            AuthRequiredError: If no token is configured
            FileKeyUnavailableError: If the host gave no file key
        """
        if not token:
            raise AuthRequiredError()
        if not file_key:
            raise FileKeyUnavailableError()

    async def fetch(
        self,
        file_key: str,
        token: str,
        now: Optional[datetime] = None,
    ) -> FetchResult:
        """Fetch and normalize all comments of ``file_key``.

        The blocking HTTP call runs in a worker thread; everything else runs on
        the event loop.

        Raises:
            AuthRequiredError / FileKeyUnavailableError: Preconditions not met
            FigmaAPIError: HTTP or transport failure
            InvalidResponseError: Malformed payload
        """
        self.ensure_ready(token, file_key)

        records = await asyncio.to_thread(self.client.get_comments, file_key, token)

        warnings = EnrichmentWarnings()
        prepared = []
        for record in records:
            if not isinstance(record, dict):
                logger.error("comment_record_invalid", file_key=file_key, record_type=type(record).__name__)
                raise InvalidResponseError()
            prepared.append(prepare_comment(RawComment.from_api(record), self.document, warnings))

        comments = normalize_comments(prepared, now=now)

        logger.info(
            "comments_fetched",
            file_key=file_key,
            count=len(comments),
            enrichment_warnings=len(warnings),
        )
        return FetchResult(comments=comments, warnings=warnings.to_list())
