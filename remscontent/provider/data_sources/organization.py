"""Organization data source."""

from typing import Optional

from pydantic import BaseModel

from ...models.rems import LocalizedText
from ..schema import attribute
from .base import DataSource


class OrganizationModel(BaseModel):
    """Organization data source model."""

    model_config = {"extra": "forbid"}

    id: str = attribute(description="REMS organization id")
    name: Optional[LocalizedText] = attribute(description="Organization name per language", computed=True)
    short_name: Optional[LocalizedText] = attribute(
        description="Organization short name per language", computed=True
    )
    owners: Optional[list[str]] = attribute(description="User ids of the organization owners", computed=True)
    review_emails: Optional[list[str]] = attribute(
        description="Addresses notified of applications to review", computed=True
    )
    enabled: Optional[bool] = attribute(description="Whether the organization is enabled", computed=True)
    archived: Optional[bool] = attribute(description="Whether the organization is archived", computed=True)


class OrganizationDataSource(DataSource[OrganizationModel]):
    """REMS organization."""

    model = OrganizationModel
    type_suffix = "organization"
    kind = "organization"
    description = "Organization"

    async def _read(self, query: OrganizationModel) -> OrganizationModel:
        organization = await self.client.get_organization(query.id)
        return OrganizationModel(
            id=organization.id,
            name=organization.name,
            short_name=organization.short_name,
            owners=[owner["userid"] for owner in organization.owners if "userid" in owner],
            review_emails=[email["email"] for email in organization.review_emails if "email" in email],
            enabled=organization.enabled,
            archived=organization.archived,
        )
