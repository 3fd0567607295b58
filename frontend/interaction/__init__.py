"""Facet interaction intents."""
