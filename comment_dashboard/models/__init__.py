"""Data models for fetched, normalized and summarized comments."""
