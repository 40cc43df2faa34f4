"""Presentation adapters (CLI)."""
