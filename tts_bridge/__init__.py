"""Local bridge between a tabletop game client and an external code editor.

Inbound:  game --TCP (JSON documents)--> ConnectionManager -> EnvelopeReader
          -> Dispatcher -> ScriptSynchronizer -> scripts/<name>_<guid>.lua|.xml
Outbound: HTTP /api/operation -> CommandForwarder -> encode() -> game port

Message tags (game -> bridge): 0 NEW_OBJECT, 1 LOAD_GAME, 2 PRINT, 3 ERROR,
4 CUSTOM, 5 RETURN, 6 USER_SAVED, 7 USER_CREATED_OBJECT.
Operations (bridge -> game): 0 GET_ALL, 1 SEND_SCRIPT_DATA,
2 SEND_CUSTOM_MESSAGE, 3 EXEC_LUA_CODE.

NEW_OBJECT upserts files for the listed objects. LOAD_GAME wipes the script
directory and writes the listed objects from scratch.
"""

from .codec import END_OF_STREAM, EndOfStream, EnvelopeDecoder, EnvelopeReader, Framing, encode  # noqa: F401
from .commands import CommandForwarder  # noqa: F401
from .config import Settings  # noqa: F401
from .connection import ConnectionManager  # noqa: F401
from .dispatcher import Dispatcher  # noqa: F401
from .errors import BridgeError, DecodeError, DialError, FileIOError, WriteError  # noqa: F401
from .models import Command, Envelope, MessageType, Operation, ScriptState, base_name  # noqa: F401
from .scripts import ScriptSynchronizer  # noqa: F401
from .service import Bridge  # noqa: F401
