"""Tests for message routing."""

import logging
from enum import IntEnum

import pytest

from tts_bridge import dispatcher as dispatcher_module
from tts_bridge.models import Envelope, MessageType


def _env(message_id: int, **fields) -> Envelope:
    return Envelope.model_validate({"messageID": message_id, **fields})


def _obj(name: str, guid: str, script: str = "", ui: str | None = None) -> dict:
    data = {"name": name, "guid": guid, "script": script}
    if ui is not None:
        data["ui"] = ui
    return data


def _names(directory) -> set[str]:
    return {p.name for p in directory.iterdir()}


def test_every_message_type_has_a_handler(dispatcher):
    assert set(dispatcher._handlers) == set(MessageType)


def test_new_object_upserts(dispatcher, scripts_dir):
    (scripts_dir / "A_1.lua").write_text("a")
    result = dispatcher.dispatch(_env(0, scriptStates=[_obj("B", "2", "b")]))
    assert result is MessageType.NEW_OBJECT
    assert _names(scripts_dir) == {"A_1.lua", "B_2.lua"}
    assert (scripts_dir / "A_1.lua").read_text() == "a"


def test_load_game_resyncs(dispatcher, scripts_dir):
    for name in ("A_1.lua", "B_2.lua", "B_2.xml"):
        (scripts_dir / name).write_text("old")
    dispatcher.dispatch(_env(1, scriptStates=[_obj("C", "3", "c")]))
    assert _names(scripts_dir) == {"C_3.lua"}


def test_load_game_with_ui(dispatcher, scripts_dir):
    (scripts_dir / "A_1.lua").write_text("old")
    dispatcher.dispatch(_env(1, scriptStates=[_obj("C", "3", "c", "<C/>")]))
    assert _names(scripts_dir) == {"C_3.lua", "C_3.xml"}


def test_load_game_without_states_empties_directory(dispatcher, scripts_dir):
    (scripts_dir / "A_1.lua").write_text("old")
    dispatcher.dispatch(_env(1))
    assert _names(scripts_dir) == set()


def test_new_object_keeps_stale_ui(dispatcher, scripts_dir):
    dispatcher.dispatch(_env(0, scriptStates=[_obj("A", "1", "a", "<Old/>")]))
    dispatcher.dispatch(_env(0, scriptStates=[_obj("A", "1", "a")]))
    assert (scripts_dir / "A_1.xml").read_text() == "<Old/>"


def test_unknown_type_is_noop(dispatcher, scripts_dir):
    result = dispatcher.dispatch(_env(99, scriptStates=[_obj("X", "9", "x")]))
    assert result is None
    assert _names(scripts_dir) == set()


def test_print_recorded_in_console(dispatcher, scripts_dir):
    dispatcher.dispatch(_env(2, message="hello"))
    assert len(dispatcher.console) == 1
    entry = dispatcher.console[0]
    assert entry["type"] == "PRINT"
    assert entry["message"] == "hello"
    assert _names(scripts_dir) == set()


def test_error_logged_at_error_level(dispatcher, caplog):
    with caplog.at_level(logging.INFO, logger="tts_bridge.dispatcher"):
        dispatcher.dispatch(_env(3, message="attempt to index a nil value"))
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert any("attempt to index" in r.getMessage() for r in errors)
    assert dispatcher.console[-1]["type"] == "ERROR"


def test_console_types(dispatcher):
    for message_id in (2, 3, 4, 5):
        dispatcher.dispatch(_env(message_id, message=str(message_id)))
    assert [e["type"] for e in dispatcher.console] == ["PRINT", "ERROR", "CUSTOM", "RETURN"]


def test_console_history_is_bounded(dispatcher):
    for i in range(25):
        dispatcher.dispatch(_env(2, message=str(i)))
    assert len(dispatcher.console) == 10
    assert dispatcher.console[0]["message"] == "15"


def test_notices_do_not_touch_files(dispatcher, scripts_dir):
    (scripts_dir / "A_1.lua").write_text("a")
    assert dispatcher.dispatch(_env(6)) is MessageType.USER_SAVED
    assert dispatcher.dispatch(_env(7)) is MessageType.USER_CREATED_OBJECT
    assert _names(scripts_dir) == {"A_1.lua"}
    assert len(dispatcher.console) == 0


def test_console_message_ignores_states(dispatcher, scripts_dir):
    dispatcher.dispatch(_env(2, message="hi", scriptStates=[_obj("X", "1", "x")]))
    assert _names(scripts_dir) == set()


def test_missing_handler_fails_at_construction(synchronizer, monkeypatch):
    class Extended(IntEnum):
        NEW_OBJECT = 0
        LOAD_GAME = 1
        PRINT = 2
        ERROR = 3
        CUSTOM = 4
        RETURN = 5
        USER_SAVED = 6
        USER_CREATED_OBJECT = 7
        OBJECT_DELETED = 8

    monkeypatch.setattr(dispatcher_module, "MessageType", Extended)
    with pytest.raises(RuntimeError, match="OBJECT_DELETED"):
        dispatcher_module.Dispatcher(synchronizer)
