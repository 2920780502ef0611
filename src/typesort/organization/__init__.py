"""Destination path resolution and file placement."""

from .models import PlacementRecord
from .planner import PlacementResolver, sanitize_filename

__all__ = ["PlacementRecord", "PlacementResolver", "sanitize_filename"]
