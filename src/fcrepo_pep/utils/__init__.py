"""Shared utilities (file loading, logging setup)."""
