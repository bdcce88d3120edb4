"""Catalogue item resource."""

from typing import Optional

from pydantic import BaseModel

from ...models.rems import RemsCatalogueItemLocalization
from ..schema import attribute
from .base import Resource, null_if_empty


class CatalogueItemLocalizationModel(BaseModel):
    """Catalogue item title and discovery url in one language."""

    model_config = {"extra": "forbid"}

    title: str = attribute(description="Catalogue item title")
    info_url: Optional[str] = attribute(None, description="URL of more information about the resource")


class CatalogueItemModel(BaseModel):
    """Catalogue item resource model."""

    model_config = {"extra": "forbid"}

    id: Optional[int] = attribute(
        description="Catalogue item internal identifier", computed=True, use_state_for_unknown=True
    )
    organization_id: str = attribute(description="Owning REMS organization")
    resource_id: int = attribute(description="REMS resource applied for", requires_replace=True)
    workflow_id: int = attribute(description="REMS workflow handling applications", requires_replace=True)
    form_id: Optional[int] = attribute(None, description="REMS form applicants fill in", requires_replace=True)
    localizations: dict[str, CatalogueItemLocalizationModel] = attribute(
        description="Catalogue item title and info url per language"
    )
    category_ids: Optional[list[int]] = attribute(None, description="Categories the item is listed under")
    enabled: bool = attribute(True, description="Whether applicants can apply for the item")


def _localizations(plan: CatalogueItemModel) -> dict[str, RemsCatalogueItemLocalization]:
    return {
        language: RemsCatalogueItemLocalization(title=loc.title, discovery_url=loc.info_url)
        for language, loc in plan.localizations.items()
    }


class CatalogueItemResource(Resource[CatalogueItemModel]):
    """REMS catalogue item."""

    model = CatalogueItemModel
    type_suffix = "catalogue_item"
    kind = "catalogue item"
    description = "Catalogue item"
    archivable_kind = "catalogue-items"

    async def _create(self, plan: CatalogueItemModel) -> CatalogueItemModel:
        item_id = await self.client.create_catalogue_item(
            organization_id=plan.organization_id,
            resource_id=plan.resource_id,
            workflow_id=plan.workflow_id,
            form_id=plan.form_id,
            localizations=_localizations(plan),
            category_ids=plan.category_ids,
        )
        if not plan.enabled:
            await self._set_enabled(item_id, False)
        return plan.model_copy(update={"id": item_id})

    async def _read(self, state: CatalogueItemModel) -> Optional[CatalogueItemModel]:
        item = await self.client.get_catalogue_item(state.id)  # type: ignore[arg-type]
        if item.archived:
            return None
        return CatalogueItemModel(
            id=item.id,
            organization_id=item.organization.id,
            resource_id=item.resource_id,
            workflow_id=item.workflow_id,
            form_id=item.form_id,
            localizations={
                language: CatalogueItemLocalizationModel(title=loc.title, info_url=loc.discovery_url)
                for language, loc in item.localizations.items()
            },
            category_ids=null_if_empty(state.category_ids, [category.id for category in item.categories]),
            enabled=item.enabled,
        )

    async def _update(self, plan: CatalogueItemModel, state: CatalogueItemModel) -> CatalogueItemModel:
        item_id: int = state.id  # type: ignore[assignment]
        if (plan.organization_id, plan.localizations, plan.category_ids) != (
            state.organization_id,
            state.localizations,
            state.category_ids,
        ):
            await self.client.edit_catalogue_item(
                catalogue_item_id=item_id,
                organization_id=plan.organization_id,
                localizations=_localizations(plan),
                category_ids=plan.category_ids,
            )
        if plan.enabled != state.enabled:
            await self._set_enabled(item_id, plan.enabled)
        return plan.model_copy(update={"id": item_id})
