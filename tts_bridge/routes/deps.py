from fastapi import Request

from tts_bridge.service import Bridge


def get_bridge(request: Request) -> Bridge:
    return request.app.state.bridge
