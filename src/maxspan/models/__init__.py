"""Validated models for external (user-supplied) input."""

from maxspan.models.positions import Position

__all__ = ["Position"]
