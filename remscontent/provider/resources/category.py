"""Category resource."""

from typing import Optional

from pydantic import BaseModel

from ...models.rems import LocalizedText
from ..schema import attribute
from .base import Resource, null_if_empty


class CategoryModel(BaseModel):
    """Category resource model."""

    model_config = {"extra": "forbid"}

    id: Optional[int] = attribute(
        description="Category internal identifier", computed=True, use_state_for_unknown=True
    )
    title: LocalizedText = attribute(description="Category title per language")
    description: Optional[LocalizedText] = attribute(None, description="Category description per language")
    display_order: Optional[int] = attribute(None, description="Position of the category when listed")
    children: Optional[list[int]] = attribute(None, description="Ids of the child categories")


class CategoryResource(Resource[CategoryModel]):
    """REMS catalogue category. Categories are the only content REMS deletes."""

    model = CategoryModel
    type_suffix = "category"
    kind = "category"
    description = "Catalogue category"

    async def _create(self, plan: CategoryModel) -> CategoryModel:
        category_id = await self.client.create_category(
            title=plan.title,
            description=plan.description,
            display_order=plan.display_order,
            children=plan.children,
        )
        return plan.model_copy(update={"id": category_id})

    async def _read(self, state: CategoryModel) -> Optional[CategoryModel]:
        category = await self.client.get_category(state.id)  # type: ignore[arg-type]
        return CategoryModel(
            id=category.id,
            title=category.title,
            description=null_if_empty(state.description, category.description),
            display_order=category.display_order,
            children=null_if_empty(state.children, [child.id for child in category.children]),
        )

    async def _update(self, plan: CategoryModel, state: CategoryModel) -> CategoryModel:
        await self.client.edit_category(
            category_id=state.id,  # type: ignore[arg-type]
            title=plan.title,
            description=plan.description,
            display_order=plan.display_order,
            children=plan.children,
        )
        return plan.model_copy(update={"id": state.id})

    async def _delete(self, state: CategoryModel) -> None:
        await self.client.delete_category(state.id)  # type: ignore[arg-type]
