"""Unit Tests for Error Types and EnrichmentWarnings

Error types:
1. Default messages match what the UI shows
2. Every error derives from CommentDashboardError
3. FigmaAPIError carries the HTTP status code

EnrichmentWarnings:
1. Initializes empty
2. append() records type, message, timestamp and context
3. to_list() keeps append order and returns copies
4. Rejects unknown warning types
"""

from datetime import datetime

import pytest

from comment_dashboard.utils.errors import (
    VALID_WARNING_TYPES,
    WARNING_TYPE_NODE_LOOKUP_FAILED,
    WARNING_TYPE_NODE_NOT_FOUND,
    WARNING_TYPE_PAGE_NOT_FOUND,
    AuthRequiredError,
    CommentDashboardError,
    DocumentLookupError,
    EnrichmentWarnings,
    FigmaAPIError,
    FileKeyUnavailableError,
    InvalidResponseError,
)


class TestErrorTypes:
    @pytest.mark.parametrize("error_class,message", [
        (AuthRequiredError, "OAuth token not set. Please configure authentication."),
        (FileKeyUnavailableError, "File key is unavailable. Make sure you are in a valid Figma file."),
        (InvalidResponseError, "Invalid response format from Figma API"),
    ])
    def test_default_messages(self, error_class, message):
        assert str(error_class()) == message

    @pytest.mark.parametrize("error", [
        AuthRequiredError(),
        FileKeyUnavailableError(),
        FigmaAPIError("boom"),
        InvalidResponseError(),
        DocumentLookupError("bad id"),
    ])
    def test_common_base(self, error):
        assert isinstance(error, CommentDashboardError)

    def test_figma_api_error_status(self):
        error = FigmaAPIError("Access forbidden.", status_code=403)

        assert str(error) == "Access forbidden."
        assert error.status_code == 403
        assert FigmaAPIError("offline").status_code is None


class TestEnrichmentWarnings:
    """Test suite for EnrichmentWarnings"""

    def test_starts_empty(self):
        warnings = EnrichmentWarnings()

        assert len(warnings) == 0
        assert warnings.to_list() == []

    def test_append_records_all_fields(self):
        warnings = EnrichmentWarnings()

        warnings.append(
            WARNING_TYPE_NODE_NOT_FOUND,
            "Node 12:34 is not in the document",
            {"comment_id": "c1", "node_id": "12:34"},
        )

        [warning] = warnings.to_list()
        assert warning["type"] == "node_not_found"
        assert warning["message"] == "Node 12:34 is not in the document"
        assert warning["context"] == {"comment_id": "c1", "node_id": "12:34"}
        parsed = datetime.fromisoformat(warning["timestamp"])
        assert parsed.utcoffset().total_seconds() == 0

    def test_to_list_preserves_append_order(self):
        warnings = EnrichmentWarnings()
        warnings.append(WARNING_TYPE_NODE_LOOKUP_FAILED, "lookup failed", {"node_id": "1:1"})
        warnings.append(WARNING_TYPE_PAGE_NOT_FOUND, "no page", {"node_id": "1:2"})

        assert [w["type"] for w in warnings.to_list()] == ["node_lookup_failed", "page_not_found"]

    def test_to_list_is_a_copy(self):
        warnings = EnrichmentWarnings()
        warnings.append(WARNING_TYPE_NODE_NOT_FOUND, "gone", {})

        warnings.to_list()[0]["type"] = "changed"

        assert warnings.to_list()[0]["type"] == WARNING_TYPE_NODE_NOT_FOUND

    def test_rejects_unknown_type(self):
        warnings = EnrichmentWarnings()

        with pytest.raises(ValueError, match="Invalid warning_type"):
            warnings.append("disk_full", "nope", {})
        assert len(warnings) == 0

    def test_supported_types(self):
        assert VALID_WARNING_TYPES == {"node_lookup_failed", "node_not_found", "page_not_found"}
