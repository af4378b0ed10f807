"""
API v1 routes.
"""

from fastapi import APIRouter

from sentence_quest.api.v1 import admin, players, progress, themes, word_mastery

router = APIRouter()

router.include_router(players.router, prefix="/players", tags=["Players"])
router.include_router(themes.router, prefix="/themes", tags=["Themes"])
router.include_router(progress.router, prefix="/progress", tags=["Progress"])
router.include_router(word_mastery.router, prefix="/word-mastery", tags=["Word Mastery"])
router.include_router(admin.router, prefix="/admin", tags=["Admin"])
