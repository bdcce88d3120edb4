"""Plan and state diffing.

Configuration and state are compared as JSON values. Configured values are validated attribute by attribute, so a
configuration that still holds values only known after apply can be planned.
"""

from enum import Enum
from typing import Any, Callable, Optional

import ujson
from pydantic import BaseModel, Field, ValidationError

from ..exceptions import UserErrors
from .schema import (
    UNKNOWN,
    attributes_with,
    computed_only,
    contains_unknown,
    field_adapter,
    flag,
    nested_model,
)


class Action(str, Enum):
    """Planned action."""

    NOOP = "no-op"
    CREATE = "create"
    UPDATE = "update"
    REPLACE = "replace"
    DELETE = "delete"
    READ = "read"


SYMBOLS = {
    Action.NOOP: " ",
    Action.CREATE: "+",
    Action.UPDATE: "~",
    Action.REPLACE: "-/+",
    Action.DELETE: "-",
    Action.READ: "<=",
}

VERBS = {
    Action.NOOP: "left unchanged",
    Action.CREATE: "created",
    Action.UPDATE: "updated in-place",
    Action.REPLACE: "replaced",
    Action.DELETE: "destroyed",
    Action.READ: "read during apply",
}


def _printable(value: Any) -> Any:
    if value is UNKNOWN:
        return repr(UNKNOWN)
    if isinstance(value, dict):
        return {key: _printable(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_printable(item) for item in value]
    return value


class PlannedChange(BaseModel):
    """The planned change of one resource."""

    address: str
    action: Action
    before: Optional[dict[str, Any]] = None
    after: Optional[dict[str, Any]] = None
    changed: list[str] = Field(default_factory=list)
    requires_replace: list[str] = Field(default_factory=list)
    sensitive: list[str] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return self.action not in (Action.NOOP, Action.READ)

    def _format(self, name: str, value: Any) -> str:
        if value is UNKNOWN:
            return repr(UNKNOWN)
        if name in self.sensitive and value is not None:
            return "(sensitive value)"
        return ujson.dumps(_printable(value), ensure_ascii=False)

    def render(self) -> str:
        """Render the change for people, masking sensitive values."""
        lines = [f"{SYMBOLS[self.action]} {self.address} will be {VERBS[self.action]}"]
        if self.action == Action.DELETE:
            return lines[0]
        before = self.before or {}
        after = self.after or {}
        for name in self.changed:
            line = f"      {name}: {self._format(name, before.get(name))} -> {self._format(name, after.get(name))}"
            if name in self.requires_replace:
                line += "  # forces replacement"
            lines.append(line)
        return "\n".join(lines)


def normalize_config(model: type[BaseModel], config: dict[str, Any]) -> dict[str, Any]:
    """Validate configured values and fill in defaults.

    Values that are not known yet are kept as they are.

    :param model: The resource model
    :param config: Configured attribute values
    :raises UserErrors: for missing, unsupported and invalid attributes
    :returns: JSON values for every attribute of the model
    """
    errors = [f"Unsupported argument '{name}'" for name in sorted(set(config) - set(model.model_fields))]
    unconfigurable = computed_only(model)
    values: dict[str, Any] = {}

    for name, field in model.model_fields.items():
        value = config.get(name)
        adapter = field_adapter(field)
        if value is not None:
            if name in unconfigurable:
                errors.append(f"Value for unconfigurable attribute '{name}'")
                continue
            if contains_unknown(value):
                values[name] = value
                continue
            try:
                values[name] = adapter.dump_python(adapter.validate_python(value), mode="json")
            except ValidationError as ex:
                for error in ex.errors():
                    location = ".".join(str(part) for part in (name, *error["loc"]))
                    errors.append(f"Invalid value for '{location}': {error['msg']}")
        elif field.is_required():
            errors.append(f"Missing required argument '{name}'")
        else:
            values[name] = adapter.dump_python(field.get_default(call_default_factory=True), mode="json")

    if errors:
        raise UserErrors(errors)
    return values


NestedStep = Callable[[type[BaseModel], dict[str, Any], Optional[dict[str, Any]]], dict[str, Any]]


def _map_nested(step: NestedStep, model: type[BaseModel], container: str, value: Any, prior_value: Any) -> Any:
    """Apply a step to nested objects with their prior objects, list items by position and map items by key."""

    def apply(item: Any, prior_item: Any) -> Any:
        if not isinstance(item, dict):
            return item
        return step(model, item, prior_item if isinstance(prior_item, dict) else None)

    if container == "object" and isinstance(value, dict):
        return apply(value, prior_value)
    if container == "list" and isinstance(value, list):
        priors = prior_value if isinstance(prior_value, list) else []
        return [apply(item, priors[index] if index < len(priors) else None) for index, item in enumerate(value)]
    if container == "map" and isinstance(value, dict):
        priors = prior_value if isinstance(prior_value, dict) else {}
        return {key: apply(item, priors.get(key)) for key, item in value.items()}
    return value


def merge_prior(model: type[BaseModel], values: dict[str, Any], prior: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Fill computed attributes that are not configured with their prior values.

    Nested objects are merged the same way: items of a list by position, items of a map by key.

    :param model: The resource or nested model
    :param values: Configured values
    :param prior: Prior state values
    :returns: The merged values
    """
    prior = prior if isinstance(prior, dict) else {}
    merged: dict[str, Any] = {}
    for name, field in model.model_fields.items():
        value = values.get(name)
        prior_value = prior.get(name)
        nested = nested_model(field)
        if nested is not None and value is not None:
            container, nested_cls = nested
            value = _map_nested(merge_prior, nested_cls, container, value, prior_value)
        if value is None and flag(field, "computed"):
            value = prior_value
        merged[name] = value
    return merged


def mark_unknown(model: type[BaseModel], values: dict[str, Any], prior: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Set computed attributes that no prior object provides to unknown.

    Nested objects are matched with their prior objects the same way as in merge_prior, so a nested object appended
    in an update gets unknown computed values while the existing ones keep theirs.

    :param model: The resource or nested model
    :param values: Planned values
    :param prior: Prior values, None for an object that does not exist yet
    :returns: The planned values with unknown computed values
    """
    marked: dict[str, Any] = {}
    for name, field in model.model_fields.items():
        value = values.get(name)
        nested = nested_model(field)
        if nested is not None and value is not None:
            container, nested_cls = nested
            value = _map_nested(mark_unknown, nested_cls, container, value, (prior or {}).get(name))
        elif value is None and prior is None and flag(field, "computed"):
            value = UNKNOWN
        marked[name] = value
    return marked


def plan_change(
    address: str, model: type[BaseModel], config: Optional[dict[str, Any]], prior: Optional[dict[str, Any]]
) -> PlannedChange:
    """Plan the change that brings the prior state to the configuration.

    :param address: The resource address
    :param model: The resource model
    :param config: Configured values, None if the resource is no longer configured
    :param prior: Prior state values, None if the resource does not exist yet
    :returns: The planned change
    """
    sensitive = sorted(attributes_with(model, "sensitive"))
    if config is None:
        if prior is None:
            return PlannedChange(address=address, action=Action.NOOP, sensitive=sensitive)
        return PlannedChange(address=address, action=Action.DELETE, before=prior, sensitive=sensitive)

    values = normalize_config(model, config)
    computed = attributes_with(model, "computed")

    if prior is None:
        after = mark_unknown(model, values, None)
        changed = [name for name, value in after.items() if value is not None]
        return PlannedChange(address=address, action=Action.CREATE, after=after, changed=changed, sensitive=sensitive)

    merged = merge_prior(model, values, prior)
    changed = [name for name in model.model_fields if merged.get(name) != prior.get(name)]
    if not changed:
        return PlannedChange(address=address, action=Action.NOOP, before=prior, after=merged, sensitive=sensitive)

    replace = [name for name in changed if flag(model.model_fields[name], "requires_replace")]
    keep = set() if replace else attributes_with(model, "use_state_for_unknown")
    after = {
        name: UNKNOWN if name in computed and name not in keep and values.get(name) is None else value
        for name, value in mark_unknown(model, merged, prior).items()
    }
    return PlannedChange(
        address=address,
        action=Action.REPLACE if replace else Action.UPDATE,
        before=prior,
        after=after,
        changed=changed,
        requires_replace=replace,
        sensitive=sensitive,
    )
