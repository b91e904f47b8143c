"""
Test suite for the comment dashboard.

Test Organization:
- test_formatting.py: Date/age labels and text truncation
- test_normalizer.py: Comment normalization, status rules, thread linkage
- test_summary.py: Dashboard summary statistics
- test_filters.py: Filter engine predicates
- test_document.py: Index-based document tree
- test_navigation.py: Location resolver fallback chain
- test_figma_client.py: Comments endpoint client and HTTP error mapping
- test_fetcher.py: Fetch orchestration and per-comment enrichment
- test_session.py: Session controller message handling
- test_api_app.py: HTTP bridge
- test_config.py: Settings loading
- utils/: Logging configuration and error types

Run all tests:
    python -m pytest tests/ -v
"""
