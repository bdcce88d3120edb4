"""Workflow resource."""

from typing import Optional

from pydantic import BaseModel

from ...models.rems import WorkflowType
from ..schema import attribute
from .base import Resource


class WorkflowModel(BaseModel):
    """Workflow resource model."""

    model_config = {"extra": "forbid"}

    id: Optional[int] = attribute(
        description="Workflow internal identifier", computed=True, use_state_for_unknown=True
    )
    organization_id: str = attribute(description="Owning REMS organization")
    title: str = attribute(description="Workflow title")
    type: WorkflowType = attribute(
        "workflow/default", description="Workflow type", requires_replace=True
    )
    handlers: list[str] = attribute(default_factory=list, description="User ids of the application handlers")
    form_ids: list[int] = attribute(
        default_factory=list, description="Forms every application of the workflow fills in", requires_replace=True
    )
    license_ids: list[int] = attribute(
        default_factory=list, description="Licenses every applicant must accept", requires_replace=True
    )
    enabled: bool = attribute(True, description="Whether the workflow can be used in new catalogue items")


class WorkflowResource(Resource[WorkflowModel]):
    """REMS workflow."""

    model = WorkflowModel
    type_suffix = "workflow"
    kind = "workflow"
    description = "Workflow"
    archivable_kind = "workflows"

    async def _create(self, plan: WorkflowModel) -> WorkflowModel:
        workflow_id = await self.client.create_workflow(
            organization_id=plan.organization_id,
            title=plan.title,
            workflow_type=plan.type,
            handlers=plan.handlers,
            form_ids=plan.form_ids,
            license_ids=plan.license_ids,
        )
        if not plan.enabled:
            await self._set_enabled(workflow_id, False)
        return plan.model_copy(update={"id": workflow_id})

    async def _read(self, state: WorkflowModel) -> Optional[WorkflowModel]:
        workflow = await self.client.get_workflow(state.id)  # type: ignore[arg-type]
        if workflow.archived:
            return None
        return WorkflowModel(
            id=workflow.id,
            organization_id=workflow.organization.id,
            title=workflow.title,
            type=workflow.workflow.type,  # type: ignore[arg-type]
            handlers=[handler.userid for handler in workflow.workflow.handlers],
            form_ids=[form["form/id"] for form in workflow.workflow.forms],
            license_ids=[license.id for license in workflow.workflow.licenses],
            enabled=workflow.enabled,
        )

    async def _update(self, plan: WorkflowModel, state: WorkflowModel) -> WorkflowModel:
        workflow_id: int = state.id  # type: ignore[assignment]
        if (plan.organization_id, plan.title, plan.handlers) != (state.organization_id, state.title, state.handlers):
            await self.client.edit_workflow(
                workflow_id=workflow_id,
                organization_id=plan.organization_id,
                title=plan.title,
                handlers=plan.handlers,
            )
        if plan.enabled != state.enabled:
            await self._set_enabled(workflow_id, plan.enabled)
        return plan.model_copy(update={"id": workflow_id})
