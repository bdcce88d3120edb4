"""REMS models."""

from typing import Any, Literal, Optional, TypeAlias

from pydantic import AliasChoices, BaseModel, Field

LocalizedText: TypeAlias = dict[str, str]  # language, text

FIELD_TYPES = (
    "description",
    "email",
    "date",
    "phone-number",
    "table",
    "header",
    "texta",
    "option",
    "label",
    "multiselect",
    "ip-address",
    "attachment",
    "text",
)

WorkflowType: TypeAlias = Literal["workflow/default", "workflow/decider", "workflow/master"]

LicenseType: TypeAlias = Literal["link", "text"]


class RemsModel(BaseModel):
    """Base for REMS API models using the namespaced REMS keys."""

    model_config = {"populate_by_name": True}

    def to_rems(self) -> dict[str, Any]:
        """Serialise using the REMS keys and leave out unset optional values."""
        return self.model_dump(by_alias=True, exclude_none=True)


class RemsOrganization(RemsModel):
    """REMS organisation."""

    id: str = Field(alias="organization/id")
    name: LocalizedText = Field(default_factory=dict, alias="organization/name")
    short_name: LocalizedText = Field(default_factory=dict, alias="organization/short-name")
    owners: list[dict[str, Any]] = Field(default_factory=list, alias="organization/owners")
    review_emails: list[dict[str, Any]] = Field(default_factory=list, alias="organization/review-emails")
    enabled: bool = True
    archived: bool = False


# Forms.
#


class RemsFieldOption(RemsModel):
    """Option of an option, multiselect or table field."""

    key: str
    label: LocalizedText


class RemsFieldVisibility(RemsModel):
    """Conditional visibility of a form field."""

    type: Literal["always", "only-if"] = Field(alias="visibility/type")
    field: Optional[dict[str, str]] = Field(default=None, alias="visibility/field")
    values: Optional[list[str]] = Field(default=None, alias="visibility/values")


class RemsFormField(RemsModel):
    """REMS form field."""

    id: Optional[str] = Field(default=None, alias="field/id")
    type: str = Field(alias="field/type")
    title: Optional[LocalizedText] = Field(default=None, alias="field/title")
    info_text: Optional[LocalizedText] = Field(default=None, alias="field/info-text")
    placeholder: Optional[LocalizedText] = Field(default=None, alias="field/placeholder")
    optional: bool = Field(default=False, alias="field/optional")
    max_length: Optional[int] = Field(default=None, alias="field/max-length")
    options: Optional[list[RemsFieldOption]] = Field(default=None, alias="field/options")
    columns: Optional[list[RemsFieldOption]] = Field(default=None, alias="field/columns")
    privacy: Optional[Literal["private", "public"]] = Field(default=None, alias="field/privacy")
    visibility: Optional[RemsFieldVisibility] = Field(default=None, alias="field/visibility")


class RemsForm(RemsModel):
    """REMS form."""

    id: int = Field(alias="form/id")
    organization: RemsOrganization
    internal_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("form/internal-name", "form/title", "internal_name")
    )
    external_title: LocalizedText = Field(default_factory=dict, alias="form/external-title")
    fields: list[RemsFormField] = Field(default_factory=list, alias="form/fields")
    enabled: bool = True
    archived: bool = False


# Categories.
#


class RemsCategoryId(RemsModel):
    """Reference to a REMS category."""

    id: int = Field(alias="category/id")


class RemsCategory(RemsModel):
    """REMS category."""

    id: int = Field(alias="category/id")
    title: LocalizedText = Field(alias="category/title")
    description: Optional[LocalizedText] = Field(default=None, alias="category/description")
    display_order: Optional[int] = Field(default=None, alias="category/display-order")
    children: list[RemsCategoryId] = Field(default_factory=list, alias="category/children")


# Licenses.
#


class RemsLicenseLocalization(RemsModel):
    """REMS license localisation."""

    title: str
    textcontent: str
    attachment_id: Optional[int] = Field(default=None, alias="attachment-id")


class RemsLicense(RemsModel):
    """REMS license."""

    id: int = Field(validation_alias=AliasChoices("license/id", "id"))
    licensetype: str
    localizations: dict[str, RemsLicenseLocalization]  # language, localization
    organization: RemsOrganization
    archived: bool = False
    enabled: bool = True


# Workflows.
#


class RemsWorkflowHandler(RemsModel):
    """REMS workflow handler."""

    userid: str
    name: Optional[str] = None
    email: Optional[str] = None


class RemsWorkflowDetails(RemsModel):
    """REMS workflow details."""

    type: str
    handlers: list[RemsWorkflowHandler] = Field(default_factory=list)
    forms: list[dict[str, Any]] = Field(default_factory=list)
    licenses: list[RemsLicense] = Field(default_factory=list)


class RemsWorkflow(RemsModel):
    """REMS workflow."""

    id: int
    title: str
    organization: RemsOrganization
    workflow: RemsWorkflowDetails
    archived: bool = False
    enabled: bool = True


# Resources.
#


class RemsResource(RemsModel):
    """REMS resource."""

    id: int
    resid: str
    organization: RemsOrganization
    licenses: list[RemsLicense] = Field(default_factory=list)
    archived: bool = False
    enabled: bool = True


# Catalogue items.
#


class RemsCatalogueItemLocalization(RemsModel):
    """REMS catalogue item localisation."""

    title: str
    discovery_url: Optional[str] = Field(default=None, alias="infourl")


class RemsCatalogueItem(RemsModel):
    """REMS catalogue item."""

    id: int
    resource_id: int = Field(alias="resource-id")
    resid: Optional[str] = None
    workflow_id: int = Field(alias="wfid")
    form_id: Optional[int] = Field(default=None, alias="formid")
    organization: RemsOrganization
    localizations: dict[str, RemsCatalogueItemLocalization]  # language, localization
    categories: list[RemsCategoryId] = Field(default_factory=list)
    archived: bool = False
    enabled: bool = True
    expired: bool = False


# Command responses.
#


class RemsCommandResult(RemsModel):
    """Response of a REMS create, edit, enable or archive command."""

    success: bool
    id: Optional[int] = None
    errors: list[dict[str, Any]] = Field(default_factory=list)

    def error_messages(self) -> list[str]:
        """Format the REMS error entries."""
        messages = []
        for error in self.errors:
            error_type = error.get("type", "unknown error")
            details = {key: value for key, value in error.items() if key != "type"}
            messages.append(f"{error_type} {details}" if details else str(error_type))
        return messages or ["REMS rejected the command without an error description"]
