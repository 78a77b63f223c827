"""
Adapters layer - Schedule storage integrations.
"""

from .memory_repository import InMemoryScheduleRepository, IntervalRecord

__all__ = ["InMemoryScheduleRepository", "IntervalRecord"]
