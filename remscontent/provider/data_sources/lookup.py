"""Lookups of existing workflows and licenses.

A lookup configured with an organization only matches objects of that organization, so content managed elsewhere
cannot be used by accident.
"""

from typing import Optional

from pydantic import BaseModel

from ...exceptions import UserException
from ..resources.license import LicenseLocalizationModel
from ..schema import attribute
from .base import DataSource


def _check_organization(kind: str, item_id: int, expected: Optional[str], actual: str) -> None:
    if expected is not None and expected != actual:
        raise UserException(f"REMS {kind} '{item_id}' does not belong to REMS organization '{expected}'")


class WorkflowLookupModel(BaseModel):
    """Workflow lookup model."""

    model_config = {"extra": "forbid"}

    id: int = attribute(description="REMS workflow id")
    organization_id: Optional[str] = attribute(
        description="Organization the workflow must belong to", computed=True, optional=True
    )
    title: Optional[str] = attribute(description="Workflow title", computed=True)
    type: Optional[str] = attribute(description="Workflow type", computed=True)
    handlers: Optional[list[str]] = attribute(description="User ids of the application handlers", computed=True)
    form_ids: Optional[list[int]] = attribute(description="Forms of the workflow", computed=True)
    license_ids: Optional[list[int]] = attribute(description="Licenses of the workflow", computed=True)
    enabled: Optional[bool] = attribute(description="Whether the workflow is enabled", computed=True)
    archived: Optional[bool] = attribute(description="Whether the workflow is archived", computed=True)


class WorkflowLookupDataSource(DataSource[WorkflowLookupModel]):
    """Existing REMS workflow."""

    model = WorkflowLookupModel
    type_suffix = "workflow_lookup"
    kind = "workflow"
    description = "Workflow lookup"

    async def _read(self, query: WorkflowLookupModel) -> WorkflowLookupModel:
        workflow = await self.client.get_workflow(query.id)
        _check_organization("workflow", query.id, query.organization_id, workflow.organization.id)
        return WorkflowLookupModel(
            id=workflow.id,
            organization_id=workflow.organization.id,
            title=workflow.title,
            type=workflow.workflow.type,
            handlers=[handler.userid for handler in workflow.workflow.handlers],
            form_ids=[form["form/id"] for form in workflow.workflow.forms],
            license_ids=[license.id for license in workflow.workflow.licenses],
            enabled=workflow.enabled,
            archived=workflow.archived,
        )


class LicenseLookupModel(BaseModel):
    """License lookup model."""

    model_config = {"extra": "forbid"}

    id: int = attribute(description="REMS license id")
    organization_id: Optional[str] = attribute(
        description="Organization the license must belong to", computed=True, optional=True
    )
    license_type: Optional[str] = attribute(description="License type", computed=True)
    localizations: Optional[dict[str, LicenseLocalizationModel]] = attribute(
        description="License title and content per language", computed=True
    )
    enabled: Optional[bool] = attribute(description="Whether the license is enabled", computed=True)
    archived: Optional[bool] = attribute(description="Whether the license is archived", computed=True)


class LicenseLookupDataSource(DataSource[LicenseLookupModel]):
    """Existing REMS license."""

    model = LicenseLookupModel
    type_suffix = "license_lookup"
    kind = "license"
    description = "License lookup"

    async def _read(self, query: LicenseLookupModel) -> LicenseLookupModel:
        license = await self.client.get_license(query.id)
        _check_organization("license", query.id, query.organization_id, license.organization.id)
        return LicenseLookupModel(
            id=license.id,
            organization_id=license.organization.id,
            license_type=license.licensetype,
            localizations={
                language: LicenseLocalizationModel(title=loc.title, text_content=loc.textcontent)
                for language, loc in license.localizations.items()
            },
            enabled=license.enabled,
            archived=license.archived,
        )
