"""Analyses consulted by the passes (overload resolution)."""
