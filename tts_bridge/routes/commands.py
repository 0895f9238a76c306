"""Command endpoints: forward operations into the running game."""

from fastapi import APIRouter, Depends, HTTPException

from tts_bridge.errors import DialError, WriteError
from tts_bridge.service import Bridge

from .deps import get_bridge
from .models import LuaBody, OperationBody

router = APIRouter()


@router.post("/operation")
async def forward_operation(body: OperationBody, bridge: Bridge = Depends(get_bridge)):
    """Forward an operation code (and optional fields) to the game verbatim."""
    try:
        await bridge.commands.send(
            body.operation,
            guid=body.guid,
            script=body.script,
            custom_message=body.custom_message,
        )
    except (DialError, WriteError) as e:
        raise HTTPException(502, str(e))
    return {"ok": True}


@router.post("/scripts/push")
async def push_scripts(bridge: Bridge = Depends(get_bridge)):
    """Send every mirrored script back to the game."""
    try:
        count = await bridge.commands.push_scripts()
    except (DialError, WriteError) as e:
        raise HTTPException(502, str(e))
    return {"ok": True, "count": count}


@router.post("/lua")
async def execute_lua(body: LuaBody, bridge: Bridge = Depends(get_bridge)):
    """Run a Lua snippet in the game, globally or on one object."""
    try:
        await bridge.commands.execute_lua(body.code, body.guid)
    except (DialError, WriteError) as e:
        raise HTTPException(502, str(e))
    return {"ok": True}
