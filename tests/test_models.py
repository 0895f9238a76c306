"""Tests for tts_bridge.models — wire models and tag enums."""

import pytest
from pydantic import ValidationError

from tts_bridge.models import Command, Envelope, MessageType, Operation, ScriptState, base_name


def test_base_name_is_name_underscore_guid():
    assert base_name("Card", "abc123") == "Card_abc123"


def test_base_name_is_deterministic():
    results = {base_name("Card", "abc123") for _ in range(5)}
    assert results == {"Card_abc123"}


def test_script_state_base_name_property():
    state = ScriptState(name="Deck", guid="f00d", script="")
    assert state.base_name == "Deck_f00d"


def test_script_state_ui_optional():
    state = ScriptState(name="Deck", guid="f00d", script="print(1)")
    assert state.ui is None
    assert not state.has_ui


def test_script_state_empty_ui_is_no_ui():
    state = ScriptState(name="Deck", guid="f00d", script="", ui="")
    assert not state.has_ui


def test_script_state_requires_script():
    with pytest.raises(ValidationError):
        ScriptState.model_validate({"name": "Deck", "guid": "f00d"})


def test_envelope_from_wire():
    env = Envelope.model_validate({
        "messageID": 0,
        "scriptStates": [{"name": "Card", "guid": "abc", "script": "x = 1", "ui": "<Panel/>"}],
    })
    assert env.type is MessageType.NEW_OBJECT
    assert env.states[0].ui == "<Panel/>"
    assert env.message is None


def test_envelope_string_message_id_is_coerced():
    """One producer sends the tag as a string."""
    env = Envelope.model_validate({"messageID": "2", "message": "hi"})
    assert env.type is MessageType.PRINT


def test_envelope_unknown_tag_has_no_type():
    env = Envelope.model_validate({"messageID": 99})
    assert env.message_id == 99
    assert env.type is None


def test_envelope_missing_states_is_empty_list():
    env = Envelope.model_validate({"messageID": 1})
    assert env.states == []


def test_envelope_rejects_non_list_states():
    with pytest.raises(ValidationError):
        Envelope.model_validate({"messageID": 0, "scriptStates": "not-an-array"})


def test_envelope_ignores_extra_fields():
    env = Envelope.model_validate({"messageID": 6, "savePath": "C:/x.json"})
    assert env.type is MessageType.USER_SAVED


def test_command_omits_unset_fields():
    cmd = Command(message_id=Operation.GET_ALL)
    assert cmd.to_wire() == {"messageID": 0}


def test_command_uses_wire_aliases():
    cmd = Command(message_id=Operation.SEND_CUSTOM_MESSAGE, custom_message="hello")
    assert cmd.to_wire() == {"messageID": 2, "customMessage": "hello"}


def test_command_script_states_omit_missing_ui():
    cmd = Command(
        message_id=Operation.SEND_SCRIPT_DATA,
        script_states=[ScriptState(name="A", guid="1", script="s")],
    )
    assert cmd.to_wire() == {
        "messageID": 1,
        "scriptStates": [{"name": "A", "guid": "1", "script": "s"}],
    }


def test_envelope_rejects_boolean_message_id():
    with pytest.raises(ValidationError):
        Envelope.model_validate({"messageID": True, "scriptStates": []})
