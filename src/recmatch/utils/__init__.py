"""Shared helpers and configuration constants."""
