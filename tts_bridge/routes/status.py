"""Health, settings, script listing and game console endpoints."""

from fastapi import APIRouter, Depends

from tts_bridge.service import Bridge

from .deps import get_bridge

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings(bridge: Bridge = Depends(get_bridge)):
    """Effective bridge settings."""
    data = bridge.settings.to_dict()
    data["listening_port"] = bridge.connections.port
    data["active_connections"] = bridge.connections.active_connections
    return data


@router.get("/scripts")
def list_scripts(bridge: Bridge = Depends(get_bridge)):
    """File names currently in the script mirror."""
    return bridge.synchronizer.list_files()


@router.get("/console")
async def console(bridge: Bridge = Depends(get_bridge)):
    """Recent print/error/custom/return messages from the game."""
    return list(bridge.dispatcher.console)
