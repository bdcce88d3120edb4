"""The REMS content provider.

The provider is configured once with the REMS connection and hands the REMS client to every resource and data source.
"""

from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from ..conf.rems import RemsConfig, rems_config
from ..exceptions import UserErrors, UserException
from ..helpers.logger import LOG
from ..models.health import Health
from ..services.rems_service import RemsServiceHandler
from .data_sources import DATA_SOURCES, DataSource
from .functions import FUNCTIONS, Function
from .plan import normalize_config
from .resources import RESOURCES, Resource
from .resources.base import PROVIDER_TYPE_NAME
from .schema import attribute, schema_document


class ProviderConfigModel(BaseModel):
    """Provider configuration, falling back to the REMS_* environment variables."""

    model_config = {"extra": "forbid"}

    endpoint: Optional[str] = attribute(None, description="REMS instance endpoint (DNS name only, not URI)")
    api_user: Optional[str] = attribute(None, description="REMS API user")
    api_key: Optional[str] = attribute(None, description="REMS API key", sensitive=True)


# Provider attribute of each setting.
SETTINGS = {"REMS_ENDPOINT": "endpoint", "REMS_API_USER": "api_user", "REMS_API_KEY": "api_key"}


class RemsContentProvider:
    """Manages REMS content."""

    type_name = PROVIDER_TYPE_NAME

    def __init__(self, version: str = "dev") -> None:
        """Create an unconfigured provider.

        :param version: The provider version, 'dev' when run locally
        """
        self.version = version
        self.client: Optional[RemsServiceHandler] = None
        self._resources: dict[str, Resource] = {}
        for resource_cls in RESOURCES:
            resource = resource_cls()
            self._resources[resource.type_name] = resource
        self._data_sources: dict[str, DataSource] = {}
        for data_source_cls in DATA_SOURCES:
            data_source = data_source_cls()
            self._data_sources[data_source.type_name] = data_source
        self._functions: dict[str, Function] = {function.name: function() for function in FUNCTIONS}

    @staticmethod
    def settings(config: Optional[dict[str, Any]] = None) -> RemsConfig:
        """Merge the provider block with the REMS settings from the environment.

        :param config: The provider block
        :raises UserErrors: if a setting is invalid or missing from both
        """
        values = normalize_config(ProviderConfigModel, config or {})
        try:
            return rems_config(**{setting: values[name] for setting, name in SETTINGS.items()})
        except ValidationError as ex:
            errors = []
            for error in ex.errors():
                setting = str(error["loc"][0]) if error["loc"] else ""
                name = SETTINGS.get(setting, setting)
                if error["type"] == "missing":
                    errors.append(f"Missing provider argument '{name}': set it in the provider block or {setting}")
                else:
                    errors.append(f"Invalid provider argument '{name}': {error['msg']}")
            raise UserErrors(errors) from ex

    def configure(self, config: Optional[dict[str, Any]] = None) -> RemsServiceHandler:
        """Configure the REMS client of every resource and data source.

        :param config: The provider block
        :returns: The REMS client
        """
        settings = self.settings(config)
        self.client = RemsServiceHandler(settings)
        for component in (*self._resources.values(), *self._data_sources.values()):
            component.configure(self.client)
        LOG.info("Configured provider %s %s for REMS '%s'.", self.type_name, self.version, settings.REMS_ENDPOINT)
        return self.client

    async def close(self) -> None:
        if self.client is not None:
            await self.client.http_client_close()

    async def health(self) -> Health:
        if self.client is None:
            raise UserException("The provider has not been configured")
        return await self.client.get_health()

    def resources(self) -> list[Resource]:
        return list(self._resources.values())

    def data_sources(self) -> list[DataSource]:
        return list(self._data_sources.values())

    def functions(self) -> list[Function]:
        return list(self._functions.values())

    def resource(self, type_name: str) -> Resource:
        try:
            return self._resources[type_name]
        except KeyError as ex:
            raise UserException(f"Unknown resource type '{type_name}'") from ex

    def data_source(self, type_name: str) -> DataSource:
        try:
            return self._data_sources[type_name]
        except KeyError as ex:
            raise UserException(f"Unknown data source type '{type_name}'") from ex

    def function(self, name: str) -> Function:
        try:
            return self._functions[name]
        except KeyError as ex:
            raise UserException(f"Unknown function '{name}'") from ex

    def schema(self) -> dict[str, Any]:
        """Schemas of the provider block, the resources, the data sources and the functions."""
        return {
            "provider": {"version": self.version, **schema_document(ProviderConfigModel, "REMS content provider")},
            "resource_schemas": {name: resource.schema() for name, resource in self._resources.items()},
            "data_source_schemas": {name: data_source.schema() for name, data_source in self._data_sources.items()},
            "functions": {name: function.definition() for name, function in self._functions.items()},
        }
