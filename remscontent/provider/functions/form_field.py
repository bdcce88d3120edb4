"""Form field templates."""

from typing import Optional, Union

from pydantic import BaseModel, Field, StrictStr

from ...models.rems import LocalizedText
from .base import Function


class FieldTemplate(BaseModel):
    """Form field returned by the templates, accepted as an item of a form's fields."""

    id: Optional[str] = None
    title: LocalizedText
    type: str
    optional: bool = False
    max_length: Optional[int] = None
    options: Optional[list[dict[str, Union[str, LocalizedText]]]] = None


def _localized(title: Union[str, LocalizedText]) -> LocalizedText:
    if isinstance(title, str):
        return {"en": title}
    return title


def _options(options: dict[str, Union[str, LocalizedText]]) -> list[dict[str, Union[str, LocalizedText]]]:
    return [{"key": key, "label": _localized(label)} for key, label in options.items()]


class HeaderParameters(BaseModel):
    field_id: StrictStr
    title: dict[StrictStr, StrictStr]


class FormFieldHeader(Function):
    """Header with a fixed field id, e.g. to be referred to by the visibility of other fields."""

    name = "form_field_header"
    summary = "Field template for a header"
    parameters = HeaderParameters
    returns = FieldTemplate

    def run(self, params: HeaderParameters) -> FieldTemplate:
        return FieldTemplate(id=params.field_id, title=params.title, type="header")


class TitleParameters(BaseModel):
    title: Union[StrictStr, dict[StrictStr, StrictStr]]


class FormFieldLabel(Function):
    """Label, a title without an input."""

    name = "form_field_label"
    summary = "Field template for a label"
    parameters = TitleParameters
    returns = FieldTemplate

    def run(self, params: TitleParameters) -> FieldTemplate:
        return FieldTemplate(title=_localized(params.title), type="label")


class InputParameters(BaseModel):
    title: Union[StrictStr, dict[StrictStr, StrictStr]]
    optional: bool = False


class FormFieldText(Function):
    """Single line text input."""

    name = "form_field_text"
    summary = "Field template for a text input"
    parameters = InputParameters
    returns = FieldTemplate

    def run(self, params: InputParameters) -> FieldTemplate:
        return FieldTemplate(title=_localized(params.title), type="text", optional=params.optional)


class TextAreaParameters(InputParameters):
    max_length: Optional[int] = Field(None, gt=0)


class FormFieldTextArea(Function):
    """Multi line text input."""

    name = "form_field_texta"
    summary = "Field template for a text area"
    parameters = TextAreaParameters
    returns = FieldTemplate

    def run(self, params: TextAreaParameters) -> FieldTemplate:
        return FieldTemplate(
            title=_localized(params.title), type="texta", optional=params.optional, max_length=params.max_length
        )


class OptionParameters(BaseModel):
    title: Union[StrictStr, dict[StrictStr, StrictStr]]
    # key, label
    options: dict[StrictStr, Union[StrictStr, dict[StrictStr, StrictStr]]] = Field(min_length=1)
    optional: bool = False


class FormFieldOption(Function):
    """Choice of exactly one option."""

    name = "form_field_option"
    summary = "Field template for a single choice"
    parameters = OptionParameters
    returns = FieldTemplate

    def run(self, params: OptionParameters) -> FieldTemplate:
        return FieldTemplate(
            title=_localized(params.title), type="option", optional=params.optional, options=_options(params.options)
        )


class FormFieldMultiselect(Function):
    """Choice of any number of options."""

    name = "form_field_multiselect"
    summary = "Field template for a multiple choice"
    parameters = OptionParameters
    returns = FieldTemplate

    def run(self, params: OptionParameters) -> FieldTemplate:
        return FieldTemplate(
            title=_localized(params.title),
            type="multiselect",
            optional=params.optional,
            options=_options(params.options),
        )
