"""Form resource."""

from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, BaseModel

from ...helpers.logger import LOG
from ...models.rems import (
    FIELD_TYPES,
    LocalizedText,
    RemsFieldOption,
    RemsFieldVisibility,
    RemsForm,
    RemsFormField,
)
from ..schema import attribute
from .base import Resource, null_if_empty


def _field_type(value: str) -> str:
    if value not in FIELD_TYPES:
        raise ValueError(f"field type must be one of {', '.join(FIELD_TYPES)}")
    return value


class FieldOptionModel(BaseModel):
    """Option of an option or multiselect field, or column of a table field."""

    model_config = {"extra": "forbid"}

    key: str = attribute(description="Option key stored in applications")
    label: LocalizedText = attribute(description="Option label per language")


class FieldVisibilityModel(BaseModel):
    """Conditional visibility of a form field."""

    model_config = {"extra": "forbid"}

    type: Literal["always", "only-if"] = attribute(description="Visibility type")
    field_id: Optional[str] = attribute(None, description="Id of the field the visibility depends on")
    values: Optional[list[str]] = attribute(None, description="Values of the field that show this field")


class FormFieldModel(BaseModel):
    """Form field."""

    model_config = {"extra": "forbid"}

    id: Optional[str] = attribute(
        description="Field identifier, assigned by REMS when not set",
        computed=True,
        optional=True,
        use_state_for_unknown=True,
    )
    type: Annotated[str, AfterValidator(_field_type)] = attribute(description="Field type")
    title: Optional[LocalizedText] = attribute(None, description="Field title per language")
    info_text: Optional[LocalizedText] = attribute(None, description="Field help text per language")
    placeholder: Optional[LocalizedText] = attribute(None, description="Field placeholder per language")
    optional: bool = attribute(False, description="Whether the applicant may leave the field empty")
    max_length: Optional[int] = attribute(None, description="Maximum length of text fields")
    options: Optional[list[FieldOptionModel]] = attribute(None, description="Options of option fields")
    columns: Optional[list[FieldOptionModel]] = attribute(None, description="Columns of table fields")
    privacy: Optional[Literal["private", "public"]] = attribute(None, description="Field privacy")
    visibility: Optional[FieldVisibilityModel] = attribute(None, description="Conditional visibility")


class FormModel(BaseModel):
    """Form resource model."""

    model_config = {"extra": "forbid"}

    id: Optional[int] = attribute(description="Form internal identifier", computed=True, use_state_for_unknown=True)
    organization_id: str = attribute(description="Owning REMS organization")
    title: str = attribute(description="Form internal name")
    external_title: Optional[LocalizedText] = attribute(
        None, description="Form title shown to applicants per language, defaults to the internal name in English"
    )
    fields: list[FormFieldModel] = attribute(description="Form fields in display order")
    enabled: bool = attribute(True, description="Whether the form can be used in new workflows")


def _to_rems_field(field: FormFieldModel) -> RemsFormField:
    # title, type and optional are always sent, the rest only when set
    rems_field = RemsFormField(title=field.title, type=field.type, optional=field.optional)
    if field.id is not None:
        rems_field.id = field.id
    rems_field.info_text = field.info_text
    rems_field.placeholder = field.placeholder
    rems_field.max_length = field.max_length
    if field.options is not None:
        rems_field.options = [RemsFieldOption(key=option.key, label=option.label) for option in field.options]
    if field.columns is not None:
        rems_field.columns = [RemsFieldOption(key=column.key, label=column.label) for column in field.columns]
    rems_field.privacy = field.privacy
    if field.visibility is not None:
        rems_field.visibility = RemsFieldVisibility(
            type=field.visibility.type,
            field={"field/id": field.visibility.field_id} if field.visibility.field_id is not None else None,
            values=field.visibility.values,
        )
    return rems_field


def _restore_untitled(prior: list[FormFieldModel], fields: list[FormFieldModel]) -> list[FormFieldModel]:
    """Put the fields without a title, which never reach REMS, back at their configured positions."""
    restored = list(fields)
    for index, field in enumerate(prior):
        if field.title is None:
            restored.insert(min(index, len(restored)), field)
    return restored


def _from_rems_field(rems_field: RemsFormField) -> FormFieldModel:
    visibility = None
    if rems_field.visibility is not None:
        visibility = FieldVisibilityModel(
            type=rems_field.visibility.type,
            field_id=(rems_field.visibility.field or {}).get("field/id"),
            values=rems_field.visibility.values,
        )
    return FormFieldModel(
        id=rems_field.id,
        type=rems_field.type,
        title=rems_field.title,
        info_text=rems_field.info_text,
        placeholder=rems_field.placeholder,
        optional=rems_field.optional,
        max_length=rems_field.max_length,
        options=[FieldOptionModel(key=o.key, label=o.label) for o in rems_field.options]
        if rems_field.options is not None
        else None,
        columns=[FieldOptionModel(key=c.key, label=c.label) for c in rems_field.columns]
        if rems_field.columns is not None
        else None,
        privacy=rems_field.privacy,
        visibility=visibility,
    )


class FormResource(Resource[FormModel]):
    """REMS application form."""

    model = FormModel
    type_suffix = "form"
    kind = "form"
    description = "Form"
    archivable_kind = "forms"

    @staticmethod
    def build_fields(plan: FormModel) -> list[RemsFormField]:
        """Shape the planned fields into REMS fields.

        Fields without a title are left out of the request.
        """
        fields = []
        for index, field in enumerate(plan.fields):
            if field.title is None:
                LOG.warning("Leaving out form field %d of type '%s' without a title.", index, field.type)
                continue
            fields.append(_to_rems_field(field))
        return fields

    @staticmethod
    def external_title(plan: FormModel) -> LocalizedText:
        if plan.external_title is not None:
            return plan.external_title
        return {"en": plan.title}

    async def _create(self, plan: FormModel) -> FormModel:
        form_id = await self.client.create_form(
            organization_id=plan.organization_id,
            internal_name=plan.title,
            external_title=self.external_title(plan),
            fields=self.build_fields(plan),
        )
        if not plan.enabled:
            await self._set_enabled(form_id, False)
        return await self._read_created(plan, form_id)

    async def _read_created(self, plan: FormModel, form_id: int) -> FormModel:
        state = plan.model_copy(update={"id": form_id})
        refreshed = await self._read(state)
        return refreshed if refreshed is not None else state

    async def _read(self, state: FormModel) -> Optional[FormModel]:
        form: RemsForm = await self.client.get_form(state.id)  # type: ignore[arg-type]
        if form.archived:
            return None
        title = form.internal_name or ""
        external_title = null_if_empty(state.external_title, form.external_title)
        if state.external_title is None and form.external_title == {"en": title}:
            external_title = None
        return FormModel(
            id=form.id,
            organization_id=form.organization.id,
            title=title,
            external_title=external_title,
            fields=_restore_untitled(
                getattr(state, "fields", None) or [], [_from_rems_field(field) for field in form.fields]
            ),
            enabled=form.enabled,
        )

    async def _update(self, plan: FormModel, state: FormModel) -> FormModel:
        form_id: int = state.id  # type: ignore[assignment]
        await self.client.edit_form(
            form_id=form_id,
            organization_id=plan.organization_id,
            internal_name=plan.title,
            external_title=self.external_title(plan),
            fields=self.build_fields(plan),
        )
        if plan.enabled != state.enabled:
            await self._set_enabled(form_id, plan.enabled)
        return await self._read_created(plan, form_id)
