"""Shared helpers used across the metrics sync tools."""
