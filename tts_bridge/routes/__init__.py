"""FastAPI endpoints under /api.

Command endpoints forward to the game (operation, scripts/push, lua).
Status endpoints read local state (health, settings, scripts, console).
"""

from fastapi import APIRouter

from .commands import router as commands_router
from .status import router as status_router

router = APIRouter()
router.include_router(status_router)
router.include_router(commands_router)
