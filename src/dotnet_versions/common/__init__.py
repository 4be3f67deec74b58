"""Shared helpers: HTTP client and logging utilities."""
