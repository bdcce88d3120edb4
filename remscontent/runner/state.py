"""State file of the objects applied to REMS."""

import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import ujson
from pydantic import BaseModel, Field, ValidationError

from ..exceptions import UserException
from ..helpers.logger import LOG
from .config import Address, Mode

STATE_VERSION = 1


class StateEntry(BaseModel):
    """State of one object."""

    mode: Mode
    type: str
    name: str
    attributes: dict[str, Any]
    dependencies: list[str] = Field(default_factory=list)

    @property
    def address(self) -> Address:
        return Address(self.mode, self.type, self.name)


class State(BaseModel):
    """State of every object applied."""

    version: int = STATE_VERSION
    provider_version: Optional[str] = None
    # Incremented on every write.
    serial: int = 0
    resources: list[StateEntry] = Field(default_factory=list)

    def get(self, address: Address) -> Optional[StateEntry]:
        for entry in self.resources:
            if entry.address == address:
                return entry
        return None

    def set(self, entry: StateEntry) -> None:
        """Add or replace the entry with the same address."""
        self.remove(entry.address)
        self.resources.append(entry)

    def remove(self, address: Address) -> None:
        self.resources = [entry for entry in self.resources if entry.address != address]

    def managed(self) -> list[StateEntry]:
        return [entry for entry in self.resources if entry.mode == "managed"]


class StateFile:
    """JSON state file, replaced as a whole on every write."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> State:
        """Load the state, empty if the file does not exist yet.

        :raises UserException: if the file cannot be parsed or was written by a newer version
        """
        if not self.path.exists():
            LOG.debug("No state file '%s', starting with an empty state.", self.path)
            return State()
        try:
            with open(self.path, "r", encoding="utf-8") as file:
                state = State.model_validate(ujson.load(file))
        except OSError as ex:
            raise UserException(f"Cannot read state file '{self.path}': {ex.strerror or ex}") from ex
        except (ValueError, ValidationError) as ex:
            raise UserException(f"State file '{self.path}' is not valid: {ex}") from ex
        if state.version > STATE_VERSION:
            raise UserException(f"State file '{self.path}' has unsupported version {state.version}")
        return state

    def save(self, state: State) -> None:
        """Write the state with the next serial.

        :raises UserException: if the file cannot be written
        """
        content = state.model_dump(mode="json") | {"serial": state.serial + 1}
        try:
            descriptor, temporary = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        except OSError as ex:
            raise UserException(f"Cannot write state file '{self.path}': {ex.strerror or ex}") from ex
        try:
            with os.fdopen(descriptor, "w", encoding="utf-8") as file:
                ujson.dump(content, file, indent=2, ensure_ascii=False, escape_forward_slashes=False)
            os.replace(temporary, self.path)
        except OSError as ex:
            os.unlink(temporary)
            raise UserException(f"Cannot write state file '{self.path}': {ex.strerror or ex}") from ex
        except BaseException:
            os.unlink(temporary)
            raise
        state.serial += 1
        LOG.debug("Saved state serial %d to '%s'.", state.serial, self.path)
