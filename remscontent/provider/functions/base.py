"""Base class of provider functions.

A function is pure: it validates its positional arguments against a parameters model and returns a JSON object
of the declared return shape.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pydantic import BaseModel, ValidationError

from ...exceptions import FunctionError


class Function(ABC):
    """Provider function."""

    name: ClassVar[str]
    summary: ClassVar[str]
    # Fields are the positional parameters in order.
    parameters: ClassVar[type[BaseModel]]
    returns: ClassVar[type[BaseModel]]

    def definition(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "summary": self.summary,
            "parameters": [
                {"name": name, **self.parameters.model_json_schema()["properties"][name]}
                for name in self.parameters.model_fields
            ],
            "return": self.returns.model_json_schema(),
        }

    def _bind(self, args: list[Any]) -> BaseModel:
        names = list(self.parameters.model_fields)
        required = [name for name, field in self.parameters.model_fields.items() if field.is_required()]
        if len(args) < len(required):
            missing = names[len(args)]
            raise FunctionError(f"{self.name}: missing argument for parameter '{missing}'", parameter=missing)
        if len(args) > len(names):
            raise FunctionError(f"{self.name}: takes at most {len(names)} arguments, got {len(args)}")
        try:
            return self.parameters.model_validate(dict(zip(names, args)))
        except ValidationError as ex:
            error = ex.errors()[0]
            parameter = str(error["loc"][0]) if error["loc"] else None
            raise FunctionError(
                f"{self.name}: invalid value for parameter '{parameter}': {error['msg']}", parameter=parameter
            ) from ex

    @abstractmethod
    def run(self, params: Any) -> BaseModel:
        """Build the result from validated parameters."""

    def call(self, args: list[Any]) -> dict[str, Any]:
        """Call the function.

        :param args: Positional arguments
        :raises FunctionError: if an argument is missing, superfluous or of the wrong type
        :returns: The result as a JSON object
        """
        return self.run(self._bind(args)).model_dump(mode="json")
