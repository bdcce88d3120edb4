"""Read-only REMS data sources."""

from .base import DataSource
from .lookup import LicenseLookupDataSource, WorkflowLookupDataSource
from .organization import OrganizationDataSource

DATA_SOURCES: list[type[DataSource]] = [
    LicenseLookupDataSource,
    OrganizationDataSource,
    WorkflowLookupDataSource,
]
