"""Adapters – framework integrations (install the matching extra)."""
