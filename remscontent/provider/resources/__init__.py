"""Managed REMS resources."""

from .base import Resource
from .catalogue_item import CatalogueItemResource
from .category import CategoryResource
from .form import FormResource
from .license import LicenseResource
from .resource import ResourceResource
from .workflow import WorkflowResource

RESOURCES: list[type[Resource]] = [
    CatalogueItemResource,
    CategoryResource,
    FormResource,
    LicenseResource,
    ResourceResource,
    WorkflowResource,
]
