"""License resource.

REMS cannot edit licenses, so every change other than enabling or disabling replaces the license.
"""

from typing import Optional

from pydantic import BaseModel

from ...models.rems import LicenseType, RemsLicenseLocalization
from ..schema import attribute
from .base import Resource


class LicenseLocalizationModel(BaseModel):
    """License title and content in one language."""

    model_config = {"extra": "forbid"}

    title: str = attribute(description="License title")
    text_content: str = attribute(description="License text, or the URL of a link license")


class LicenseModel(BaseModel):
    """License resource model."""

    model_config = {"extra": "forbid"}

    id: Optional[int] = attribute(description="License internal identifier", computed=True, use_state_for_unknown=True)
    organization_id: str = attribute(description="Owning REMS organization", requires_replace=True)
    license_type: LicenseType = attribute(description="License type", requires_replace=True)
    localizations: dict[str, LicenseLocalizationModel] = attribute(
        description="License title and content per language", requires_replace=True
    )
    enabled: bool = attribute(True, description="Whether the license can be used in new workflows and resources")


class LicenseResource(Resource[LicenseModel]):
    """REMS license."""

    model = LicenseModel
    type_suffix = "license"
    kind = "license"
    description = "License"
    archivable_kind = "licenses"

    async def _create(self, plan: LicenseModel) -> LicenseModel:
        license_id = await self.client.create_license(
            organization_id=plan.organization_id,
            license_type=plan.license_type,
            localizations={
                language: RemsLicenseLocalization(title=loc.title, textcontent=loc.text_content)
                for language, loc in plan.localizations.items()
            },
        )
        if not plan.enabled:
            await self._set_enabled(license_id, False)
        return plan.model_copy(update={"id": license_id})

    async def _read(self, state: LicenseModel) -> Optional[LicenseModel]:
        license = await self.client.get_license(state.id)  # type: ignore[arg-type]
        if license.archived:
            return None
        return LicenseModel(
            id=license.id,
            organization_id=license.organization.id,
            license_type=license.licensetype,  # type: ignore[arg-type]
            localizations={
                language: LicenseLocalizationModel(title=loc.title, text_content=loc.textcontent)
                for language, loc in license.localizations.items()
            },
            enabled=license.enabled,
        )

    async def _update(self, plan: LicenseModel, state: LicenseModel) -> LicenseModel:
        if plan.enabled != state.enabled:
            await self._set_enabled(state.id, plan.enabled)  # type: ignore[arg-type]
        return state.model_copy(update={"enabled": plan.enabled})
