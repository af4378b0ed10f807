"""
Player profiles.
"""

from sentence_quest.kernel.players.player_service import PlayerService

__all__ = ["PlayerService"]
