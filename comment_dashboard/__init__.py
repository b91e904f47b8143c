"""
comment-dashboard: review comments of a design file, normalized for a dashboard.

- Fetches a file's comments from the REST API
- Normalizes them (status, age, thread and location info)
- Summarizes and filters them for the UI panel
- Navigates the document to a comment's location, tolerating deleted nodes
"""

from importlib.metadata import PackageNotFoundError, version

from comment_dashboard.document import DocumentTree
from comment_dashboard.filters import apply_filters
from comment_dashboard.models.comment_models import FilterSpec, NormalizedComment
from comment_dashboard.navigation import LocationResolver
from comment_dashboard.normalizer import normalize_comments
from comment_dashboard.session import PluginSession
from comment_dashboard.summary import create_comment_summary

try:
    __version__ = version("comment-dashboard")
except PackageNotFoundError:  # pragma: no cover - local checkout without metadata
    __version__ = "0.0.0"

__all__ = [
    "DocumentTree",
    "FilterSpec",
    "LocationResolver",
    "NormalizedComment",
    "PluginSession",
    "apply_filters",
    "create_comment_summary",
    "normalize_comments",
]
