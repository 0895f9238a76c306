"""FastAPI application factory.

Run standalone with: uvicorn tts_bridge.app:create_app --factory
"""

from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from tts_bridge.config import Settings
from tts_bridge.routes import router
from tts_bridge.service import Bridge

load_dotenv(Path(__file__).parent.parent / ".env")


def create_app(settings: Settings | None = None) -> FastAPI:
    resolved = settings or Settings.from_env()
    bridge = Bridge(resolved)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await bridge.start()
        try:
            yield
        finally:
            await bridge.stop()

    app = FastAPI(title="TTS Script Bridge", lifespan=lifespan)
    app.state.bridge = bridge
    app.include_router(router, prefix="/api")
    return app

