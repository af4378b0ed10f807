"""
Persistence boundary for the player aggregate.
"""

from sentence_quest.kernel.storage.progress_store import ProgressStore

__all__ = ["ProgressStore"]
