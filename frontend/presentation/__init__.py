"""Renderer view models."""
