"""Loading the configuration file and resolving references between objects.

The configuration is a JSON document::

    {
        "provider": {"endpoint": "rems.example.org"},
        "data": {"remscontent_organization": {"umccr": {"id": "umccr"}}},
        "resource": {
            "remscontent_form": {
                "main": {
                    "organization_id": "${data.remscontent_organization.umccr.id}",
                    "title": "Main form",
                    "fields": [{"function": "form_field_label", "args": ["Welcome"]}]
                }
            }
        }
    }

A string that is exactly one reference keeps the type of the referenced value. References inside longer strings are
interpolated as text.
"""

import re
from graphlib import CycleError, TopologicalSorter
from pathlib import Path
from typing import Any, Callable, Literal, NamedTuple

import ujson
from pydantic import BaseModel, Field, ValidationError

from ..exceptions import UserErrors, UserException
from ..provider.functions import Function
from ..provider.schema import UNKNOWN, contains_unknown

REFERENCE = re.compile(r"\$\{([^}]+)\}")

Mode = Literal["managed", "data"]


class Address(NamedTuple):
    """Address of a configured object, ``type.name`` or ``data.type.name``."""

    mode: Mode
    type: str
    name: str

    def __str__(self) -> str:
        if self.mode == "data":
            return f"data.{self.type}.{self.name}"
        return f"{self.type}.{self.name}"

    @classmethod
    def parse(cls, address: str) -> "Address":
        parts = address.split(".")
        if len(parts) == 3 and parts[0] == "data":
            return cls("data", parts[1], parts[2])
        if len(parts) == 2 and parts[0] != "data":
            return cls("managed", parts[0], parts[1])
        raise UserException(f"Invalid address '{address}': expected TYPE.NAME or data.TYPE.NAME")


class Reference(NamedTuple):
    """Reference to an attribute, or a value nested in an attribute, of another object."""

    address: Address
    path: tuple[str, ...]

    @classmethod
    def parse(cls, reference: str) -> "Reference":
        parts = reference.strip().split(".")
        if parts[0] == "data" and len(parts) >= 4:
            return cls(Address("data", parts[1], parts[2]), tuple(parts[3:]))
        if parts[0] != "data" and len(parts) >= 3:
            return cls(Address("managed", parts[0], parts[1]), tuple(parts[2:]))
        raise UserException(f"Invalid reference '${{{reference}}}': expected TYPE.NAME.ATTRIBUTE")


class Configuration(BaseModel):
    """Configuration file content."""

    model_config = {"extra": "forbid"}

    provider: dict[str, Any] = Field(default_factory=dict)
    resource: dict[str, dict[str, dict[str, Any]]] = Field(default_factory=dict)
    data: dict[str, dict[str, dict[str, Any]]] = Field(default_factory=dict)

    def blocks(self) -> dict[Address, dict[str, Any]]:
        """Configured objects by address."""
        blocks: dict[Address, dict[str, Any]] = {}
        for mode, section in (("data", self.data), ("managed", self.resource)):
            for type_name, objects in section.items():
                for name, config in objects.items():
                    blocks[Address(mode, type_name, name)] = config  # type: ignore[arg-type]
        return blocks


def load_configuration(path: str | Path) -> Configuration:
    """Load the configuration file.

    :param path: Path of the JSON configuration file
    :raises UserException: if the file cannot be read or parsed
    :raises UserErrors: if the file is not a valid configuration
    """
    try:
        with open(path, "r", encoding="utf-8") as file:
            content = ujson.load(file)
    except FileNotFoundError as ex:
        raise UserException(f"Configuration file '{path}' does not exist") from ex
    except OSError as ex:
        raise UserException(f"Cannot read configuration file '{path}': {ex.strerror or ex}") from ex
    except ValueError as ex:
        raise UserException(f"Configuration file '{path}' is not valid JSON: {ex}") from ex
    try:
        return Configuration.model_validate(content)
    except ValidationError as ex:
        raise UserErrors(
            f"Invalid configuration at '{'.'.join(str(part) for part in error['loc'])}': {error['msg']}"
            for error in ex.errors()
        ) from ex


def references(value: Any) -> set[Address]:
    """Addresses of the objects a configured value refers to."""
    if isinstance(value, str):
        return {Reference.parse(match).address for match in REFERENCE.findall(value)}
    if isinstance(value, dict):
        return set().union(*(references(item) for item in value.values()))
    if isinstance(value, list):
        return set().union(*(references(item) for item in value))
    return set()


def dependency_order(blocks: dict[Address, dict[str, Any]]) -> list[Address]:
    """Order configured objects so that every object comes after the objects it refers to.

    :raises UserException: for references to undeclared objects and for reference cycles
    """
    graph: dict[Address, set[Address]] = {}
    for address in sorted(blocks, key=str):
        dependencies = references(blocks[address])
        for dependency in sorted(dependencies, key=str):
            if dependency not in blocks:
                raise UserException(f"Reference to undeclared object '{dependency}' in '{address}'")
        graph[address] = dependencies
    try:
        return list(TopologicalSorter(graph).static_order())
    except CycleError as ex:
        cycle = " -> ".join(str(address) for address in ex.args[1])
        raise UserException(f"Cycle between objects: {cycle}") from ex


def _lookup(reference: Reference, values: dict[Address, dict[str, Any]]) -> Any:
    if reference.address not in values:
        raise UserException(f"Reference to undeclared object '{reference.address}'")
    value: Any = values[reference.address]
    for index, part in enumerate(reference.path):
        if value is UNKNOWN:
            return UNKNOWN
        if isinstance(value, list) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        elif isinstance(value, dict) and part in value:
            value = value[part]
        else:
            location = ".".join(reference.path[: index + 1])
            raise UserException(f"Unsupported attribute '{location}' of '{reference.address}'")
    return value


def _interpolate(value: Any) -> str:
    if isinstance(value, str):
        return value
    return ujson.dumps(value)


def resolve(value: Any, values: dict[Address, dict[str, Any]], functions: Callable[[str], Function]) -> Any:
    """Replace references and function calls in a configured value.

    :param value: Configured value
    :param values: Attribute values of the objects referred to, unknown values included
    :param functions: Function lookup by name
    :returns: The resolved value, or UNKNOWN where a referenced value is not known yet
    """
    if isinstance(value, str):
        whole = REFERENCE.fullmatch(value)
        if whole is not None:
            return _lookup(Reference.parse(whole.group(1)), values)
        parts = [_lookup(Reference.parse(match), values) for match in REFERENCE.findall(value)]
        if any(part is UNKNOWN for part in parts):
            return UNKNOWN
        substitutes = iter(parts)
        return REFERENCE.sub(lambda _: _interpolate(next(substitutes)), value)
    if isinstance(value, dict):
        if set(value) == {"function", "args"}:
            args = resolve(value["args"], values, functions)
            if not isinstance(args, list):
                raise UserException(f"Arguments of function '{value['function']}' must be a list")
            if contains_unknown(args):
                return UNKNOWN
            return functions(value["function"]).call(args)
        return {key: resolve(item, values, functions) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve(item, values, functions) for item in value]
    return value
