"""Shared utilities: logging configuration and error types."""
