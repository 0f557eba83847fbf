"""Command-line interface for kv-sessions."""
