"""Base class of REMS data sources."""

from abc import ABC, abstractmethod
from typing import Any

from ..plan import Action, PlannedChange, normalize_config
from ..resources.base import ModelT, ProviderComponent
from ..schema import UNKNOWN, attributes_with


class DataSource(ProviderComponent[ModelT], ABC):
    """A read-only view of REMS content."""

    def plan(self, address: str, config: dict[str, Any]) -> PlannedChange:
        """Plan a read that has to wait until apply, because its configuration is not fully known."""
        values = normalize_config(self.model, config)
        computed = attributes_with(self.model, "computed")
        after = {name: UNKNOWN if name in computed and value is None else value for name, value in values.items()}
        return PlannedChange(address=address, action=Action.READ, after=after)

    @abstractmethod
    async def _read(self, query: ModelT) -> ModelT:
        """Read REMS content matching the configured attributes."""

    async def read(self, config: dict[str, Any]) -> ModelT:
        """Read the data source.

        :param config: Configured values
        :raises UserErrors: if the configuration is invalid
        :raises ProviderError: if REMS could not be read
        :returns: The data source model with every computed attribute set
        """
        query = self.load(normalize_config(self.model, config))
        with self.diagnostics("read"):
            return await self._read(query)
