"""Persistence implementations for tessera_identity."""
