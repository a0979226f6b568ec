"""Shared request-parsing helpers."""
