"""Provider functions."""

from .base import Function
from .form_field import (
    FormFieldHeader,
    FormFieldLabel,
    FormFieldMultiselect,
    FormFieldOption,
    FormFieldText,
    FormFieldTextArea,
)

FUNCTIONS: list[type[Function]] = [
    FormFieldHeader,
    FormFieldLabel,
    FormFieldMultiselect,
    FormFieldOption,
    FormFieldText,
    FormFieldTextArea,
]
