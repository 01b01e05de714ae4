"""Utility helpers shared across navigator-go."""
