"""Test state file."""

import pytest
import ujson

from remscontent.exceptions import UserException
from remscontent.runner.config import Address
from remscontent.runner.state import State, StateEntry, StateFile

FORM = Address("managed", "remscontent_form", "main")


def test_missing_state_file_is_empty(tmp_path):
    state = StateFile(tmp_path / "state.json").load()
    assert state.resources == []
    assert state.serial == 0


def test_save_and_load(tmp_path):
    state_file = StateFile(tmp_path / "state.json")
    state = State()
    state.set(StateEntry(mode="managed", type="remscontent_form", name="main", attributes={"id": 3}))

    state_file.save(state)
    state_file.save(state)

    loaded = state_file.load()
    assert loaded.serial == 2
    assert loaded.get(FORM).attributes == {"id": 3}
    assert list(tmp_path.iterdir()) == [tmp_path / "state.json"]


def test_set_replaces_entry():
    state = State()
    state.set(StateEntry(mode="managed", type="remscontent_form", name="main", attributes={"id": 3}))
    state.set(StateEntry(mode="managed", type="remscontent_form", name="main", attributes={"id": 4}))
    state.set(StateEntry(mode="data", type="remscontent_organization", name="umccr", attributes={"id": "umccr"}))

    assert len(state.resources) == 2
    assert state.get(FORM).attributes == {"id": 4}
    assert [entry.address for entry in state.managed()] == [FORM]

    state.remove(FORM)
    assert state.get(FORM) is None


def test_invalid_state_file(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("not json")
    with pytest.raises(UserException, match="is not valid"):
        StateFile(path).load()

    path.write_text(ujson.dumps({"version": 99, "resources": []}))
    with pytest.raises(UserException, match="unsupported version 99"):
        StateFile(path).load()


def test_unwritable_state_file(tmp_path):
    state = State()

    with pytest.raises(UserException, match="Cannot write state file"):
        StateFile(tmp_path / "missing" / "state.json").save(state)
    assert state.serial == 0

    directory = tmp_path / "state.json"
    directory.mkdir()
    with pytest.raises(UserException, match="Cannot write state file"):
        StateFile(directory).save(state)
    assert state.serial == 0
    assert list(directory.iterdir()) == []
    assert [path.name for path in tmp_path.iterdir()] == ["state.json"]

    with pytest.raises(UserException, match="Cannot read state file"):
        StateFile(directory).load()
