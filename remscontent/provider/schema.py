"""Attribute lifecycle flags of resource, data source and function models.

Models are plain pydantic models. The lifecycle of each attribute is kept in the field's ``json_schema_extra``:

- ``computed``: the value is set by REMS
- ``optional``: a computed value may also be configured
- ``requires_replace``: a change destroys the object and creates a new one
- ``use_state_for_unknown``: a computed value keeps its prior value when planning an update
- ``sensitive``: the value is masked in output
"""

from types import NoneType, UnionType
from typing import Annotated, Any, Literal, Optional, Union, get_args, get_origin

from pydantic import BaseModel, Field, TypeAdapter
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined


class Unknown:
    """A value that is only known after apply."""

    _instance: Optional["Unknown"] = None

    def __new__(cls) -> "Unknown":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "(known after apply)"


UNKNOWN = Unknown()


def attribute(
    default: Any = PydanticUndefined,
    *,
    description: str,
    computed: bool = False,
    optional: bool = False,
    requires_replace: bool = False,
    use_state_for_unknown: bool = False,
    sensitive: bool = False,
    **kwargs: Any,
) -> Any:
    """Declare a model attribute with lifecycle flags.

    Computed attributes default to null.
    """
    flags = {
        "computed": computed,
        "optional": optional,
        "requires_replace": requires_replace,
        "use_state_for_unknown": use_state_for_unknown,
        "sensitive": sensitive,
    }
    if computed and default is PydanticUndefined and "default_factory" not in kwargs:
        default = None
    return Field(
        default,
        description=description,
        json_schema_extra={name: True for name, value in flags.items() if value} or None,
        **kwargs,
    )


def flag(field: FieldInfo, name: str) -> bool:
    """Check a lifecycle flag of a model field."""
    extra = field.json_schema_extra
    return isinstance(extra, dict) and bool(extra.get(name))


def attributes_with(model: type[BaseModel], name: str) -> set[str]:
    """Names of the model attributes that have the given flag."""
    return {field_name for field_name, field in model.model_fields.items() if flag(field, name)}


def computed_only(model: type[BaseModel]) -> set[str]:
    """Names of the computed attributes that cannot be configured."""
    return {
        field_name
        for field_name, field in model.model_fields.items()
        if flag(field, "computed") and not flag(field, "optional")
    }


def contains_unknown(value: Any) -> bool:
    """Check if a value or any nested value is unknown."""
    if value is UNKNOWN:
        return True
    if isinstance(value, dict):
        return any(contains_unknown(item) for item in value.values())
    if isinstance(value, (list, tuple)):
        return any(contains_unknown(item) for item in value)
    return False


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, UnionType):
        args = [arg for arg in get_args(annotation) if arg is not NoneType]
        if len(args) == 1:
            return args[0]
    return annotation


def nested_model(field: FieldInfo) -> Optional[tuple[Literal["object", "list", "map"], type[BaseModel]]]:
    """Find the nested model of an attribute.

    :returns: How the nested model is held (single object, list or map) and the model, or None.
    """
    annotation = _unwrap_optional(field.annotation)
    origin = get_origin(annotation)
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return "object", annotation
    if origin is list:
        (item,) = get_args(annotation)
        if isinstance(item, type) and issubclass(item, BaseModel):
            return "list", item
    if origin is dict:
        _, item = get_args(annotation)
        if isinstance(item, type) and issubclass(item, BaseModel):
            return "map", item
    return None


def field_adapter(field: FieldInfo) -> TypeAdapter[Any]:
    """Type adapter validating a single attribute, including its constraints."""
    if field.metadata:
        return TypeAdapter(Annotated[(field.annotation, *field.metadata)])  # type: ignore[valid-type]
    return TypeAdapter(field.annotation)


def schema_document(model: type[BaseModel], description: str = "") -> dict[str, Any]:
    """Render the schema of a model with its lifecycle flags."""
    document = model.model_json_schema()
    if description:
        document["description"] = description
    return document
