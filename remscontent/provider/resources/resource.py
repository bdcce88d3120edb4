"""Resource resource.

A REMS resource is the external dataset, identified by its resid, that catalogue items give access to.
"""

from typing import Optional

from pydantic import BaseModel

from ..schema import attribute
from .base import Resource


class ResourceModel(BaseModel):
    """Resource resource model."""

    model_config = {"extra": "forbid"}

    id: Optional[int] = attribute(
        description="Resource internal identifier", computed=True, use_state_for_unknown=True
    )
    organization_id: str = attribute(description="Owning REMS organization", requires_replace=True)
    resid: str = attribute(description="External resource identifier, e.g. a DOI", requires_replace=True)
    license_ids: list[int] = attribute(
        default_factory=list, description="Licenses applicants must accept", requires_replace=True
    )
    enabled: bool = attribute(True, description="Whether the resource can be used in new catalogue items")


class ResourceResource(Resource[ResourceModel]):
    """REMS resource."""

    model = ResourceModel
    type_suffix = "resource"
    kind = "resource"
    description = "Resource"
    archivable_kind = "resources"

    async def _create(self, plan: ResourceModel) -> ResourceModel:
        resource_id = await self.client.create_resource(
            organization_id=plan.organization_id, resid=plan.resid, license_ids=plan.license_ids
        )
        if not plan.enabled:
            await self._set_enabled(resource_id, False)
        return plan.model_copy(update={"id": resource_id})

    async def _read(self, state: ResourceModel) -> Optional[ResourceModel]:
        resource = await self.client.get_resource(state.id)  # type: ignore[arg-type]
        if resource.archived:
            return None
        return ResourceModel(
            id=resource.id,
            organization_id=resource.organization.id,
            resid=resource.resid,
            license_ids=[license.id for license in resource.licenses],
            enabled=resource.enabled,
        )

    async def _update(self, plan: ResourceModel, state: ResourceModel) -> ResourceModel:
        if plan.enabled != state.enabled:
            await self._set_enabled(state.id, plan.enabled)  # type: ignore[arg-type]
        return state.model_copy(update={"enabled": plan.enabled})
