"""Planning and applying a configuration.

Objects are planned and applied in dependency order. Objects that are no longer configured are deleted first, in
reverse dependency order, and a replaced object is deleted before its replacement is created. The state file is
written after every object operation, so an apply that fails midway keeps what was done.
"""

from graphlib import CycleError, TopologicalSorter
from typing import Any, Optional

from ..exceptions import SystemException, UserException
from ..helpers.logger import LOG
from ..provider import RemsContentProvider
from ..provider.plan import Action, PlannedChange
from ..provider.schema import contains_unknown
from .config import Address, Configuration, dependency_order, references, resolve
from .state import StateEntry, StateFile


class Engine:
    """Applies a configuration to REMS through the provider."""

    def __init__(self, provider: RemsContentProvider, configuration: Configuration, state_file: StateFile) -> None:
        """Load the state and order the configured objects.

        :param provider: A configured provider
        :param configuration: The loaded configuration
        :param state_file: The state file
        """
        self.provider = provider
        self.configuration = configuration
        self.state_file = state_file
        self.state = state_file.load()
        self.blocks = configuration.blocks()
        self.order = dependency_order(self.blocks)

    def _resolve(self, address: Address, values: dict[Address, dict[str, Any]]) -> dict[str, Any]:
        config = resolve(self.blocks[address], values, self.provider.function)
        if not isinstance(config, dict):
            raise UserException(f"Configuration of '{address}' must be an object")
        return config

    def save_state(self) -> None:
        self.state.provider_version = self.provider.version
        self.state_file.save(self.state)

    def _record(self, address: Address, attributes: dict[str, Any]) -> None:
        dependencies = sorted(str(dependency) for dependency in references(self.blocks.get(address, {})))
        self.state.set(
            StateEntry(
                mode=address.mode,
                type=address.type,
                name=address.name,
                attributes=attributes,
                dependencies=dependencies,
            )
        )
        self.save_state()

    def _forget(self, address: Address) -> None:
        self.state.remove(address)
        self.save_state()

    def _orphans(self, destroy: bool) -> list[StateEntry]:
        """Managed objects to delete, ordered so that dependent objects come first."""
        entries = {
            str(entry.address): entry
            for entry in self.state.managed()
            if destroy or entry.address not in self.blocks
        }
        graph = {name: {dep for dep in entry.dependencies if dep in entries} for name, entry in entries.items()}
        try:
            order = list(TopologicalSorter(graph).static_order())
        except CycleError as ex:
            raise SystemException(f"State file '{self.state_file.path}' has a dependency cycle: {ex.args[1]}") from ex
        return [entries[name] for name in reversed(order)]

    async def refresh(self) -> None:
        """Refresh the state of every managed object, dropping objects that no longer exist in REMS."""
        for entry in self.state.managed():
            resource = self.provider.resource(entry.type)
            current = await resource.read(resource.load(entry.attributes))
            if current is None:
                LOG.info("Removing '%s' from the state, it no longer exists in REMS.", entry.address)
                self.state.remove(entry.address)
            else:
                entry.attributes = resource.dump(current)

    async def plan(self, destroy: bool = False) -> list[PlannedChange]:
        """Plan the changes that bring REMS to the configuration.

        Data sources whose configuration is known are read while planning.

        :param destroy: Plan to delete every managed object instead
        :returns: The planned changes in the order they will be applied
        """
        changes: list[PlannedChange] = []
        orphans = self._orphans(destroy)
        for entry in orphans:
            resource = self.provider.resource(entry.type)
            changes.append(resource.plan(str(entry.address), None, entry.attributes))
        if destroy:
            return changes

        values: dict[Address, dict[str, Any]] = {}
        for address in self.order:
            config = self._resolve(address, values)
            if address.mode == "data":
                data_source = self.provider.data_source(address.type)
                if contains_unknown(config):
                    change = data_source.plan(str(address), config)
                    changes.append(change)
                    values[address] = change.after or {}
                else:
                    values[address] = data_source.dump(await data_source.read(config))
                continue
            resource = self.provider.resource(address.type)
            entry = self.state.get(address)
            change = resource.plan(str(address), config, entry.attributes if entry is not None else None)
            changes.append(change)
            values[address] = change.after or {}
        return changes

    async def _delete(self, entry: StateEntry) -> None:
        resource = self.provider.resource(entry.type)
        await resource.delete(resource.load(entry.attributes))
        self._forget(entry.address)

    async def _apply_resource(self, address: Address, config: dict[str, Any]) -> dict[str, Any]:
        resource = self.provider.resource(address.type)
        entry = self.state.get(address)
        prior: Optional[dict[str, Any]] = entry.attributes if entry is not None else None
        change = resource.plan(str(address), config, prior)
        if change.action == Action.REPLACE and entry is not None:
            await self._delete(entry)
            prior = None

        if prior is None:
            state = await resource.create(resource.validate(config))
        elif change.action == Action.UPDATE:
            state = await resource.update(resource.validate(config, prior), resource.load(prior))
        else:
            return prior

        attributes = resource.dump(state)
        self._record(address, attributes)
        return attributes

    async def apply(self, destroy: bool = False) -> list[PlannedChange]:
        """Apply the configuration.

        :param destroy: Delete every managed object instead
        :returns: The changes that were planned before applying
        """
        changes = await self.plan(destroy)
        for entry in self._orphans(destroy):
            await self._delete(entry)
        data_entries = [entry for entry in self.state.resources if entry.mode == "data"]
        for entry in data_entries:
            if not destroy and entry.address in self.blocks:
                continue
            self._forget(entry.address)
        if destroy:
            return changes

        values: dict[Address, dict[str, Any]] = {}
        for address in self.order:
            config = self._resolve(address, values)
            if contains_unknown(config):
                raise SystemException(f"Configuration of '{address}' is not known after applying its dependencies")
            if address.mode == "data":
                data_source = self.provider.data_source(address.type)
                values[address] = data_source.dump(await data_source.read(config))
                self._record(address, values[address])
                continue
            values[address] = await self._apply_resource(address, config)
        return changes

    async def import_resource(self, address: Address, import_id: str) -> StateEntry:
        """Bring an existing REMS object under management.

        :param address: The configured address of the object
        :param import_id: The REMS id of the object
        :raises UserException: if the address is not a configured resource or is already managed
        :returns: The new state entry
        """
        if address.mode != "managed":
            raise UserException(f"Cannot import '{address}': only resources can be imported")
        if address not in self.blocks:
            raise UserException(f"Cannot import '{address}': declare the resource in the configuration first")
        if self.state.get(address) is not None:
            raise UserException(f"Cannot import '{address}': the resource is already managed")
        resource = self.provider.resource(address.type)
        state = await resource.import_state(import_id)
        self._record(address, resource.dump(state))
        LOG.info("Imported %s '%s' as '%s'.", resource.kind, import_id, address)
        return self.state.get(address)  # type: ignore[return-value]
