"""HTTP bridge exposing a plugin session's message channel."""
