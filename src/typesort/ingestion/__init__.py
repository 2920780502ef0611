"""Discovery, type detection, and archive expansion."""

from .models import CategoryCount, RunResult, RunStats, SourceEntry

__all__ = ["CategoryCount", "RunResult", "RunStats", "SourceEntry"]
