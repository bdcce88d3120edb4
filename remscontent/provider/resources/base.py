"""Base classes of REMS resources and data sources."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, ClassVar, Generic, Iterator, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from ...exceptions import NotFoundUserException, ProviderError, SystemException, UserErrors, UserException
from ...helpers.logger import LOG
from ...services.rems_service import ArchivableKind, RemsServiceHandler
from ...services.service_handler import ServiceError
from ..plan import PlannedChange, merge_prior, normalize_config, plan_change
from ..schema import schema_document

PROVIDER_TYPE_NAME = "remscontent"

ModelT = TypeVar("ModelT", bound=BaseModel)


def null_if_empty(state_value: Any, remote_value: Any) -> Any:
    """Keep an unset attribute unset when REMS reports an empty value for it."""
    if state_value is None and not remote_value:
        return None
    return remote_value


class ProviderComponent(Generic[ModelT]):
    """A resource or data source backed by the REMS client.

    Subclasses set the model, the type name suffix and the kind used in messages.
    """

    model: ClassVar[type[BaseModel]]
    type_suffix: ClassVar[str]
    kind: ClassVar[str]
    description: ClassVar[str] = ""

    def __init__(self) -> None:
        """Create an unconfigured component."""
        self._client: Optional[RemsServiceHandler] = None

    @property
    def type_name(self) -> str:
        return f"{PROVIDER_TYPE_NAME}_{self.type_suffix}"

    def configure(self, client: RemsServiceHandler) -> None:
        """Attach the REMS client.

        :param client: The configured REMS service handler
        """
        if not isinstance(client, RemsServiceHandler):
            raise SystemException(
                f"Expected RemsServiceHandler, got: {type(client).__name__}. "
                "Please report this issue to the provider developers."
            )
        self._client = client

    @property
    def client(self) -> RemsServiceHandler:
        if self._client is None:
            raise SystemException(f"Unconfigured resource {self.type_name}: the provider has not been configured.")
        return self._client

    def schema(self) -> dict[str, Any]:
        return schema_document(self.model, self.description)

    @staticmethod
    def dump(model: BaseModel) -> dict[str, Any]:
        """Dump the model into state values."""
        return model.model_dump(mode="json")

    def load(self, values: dict[str, Any]) -> ModelT:
        """Load values into the model."""
        try:
            return self.model.model_validate(values)  # type: ignore[return-value]
        except ValidationError as ex:
            raise UserErrors(f"{self.type_name}: {error['msg']} at {error['loc']}" for error in ex.errors()) from ex

    @contextmanager
    def diagnostics(self, operation: str) -> Iterator[None]:
        """Report REMS failures of an operation as provider errors."""
        try:
            yield
        except (UserErrors, UserException, ServiceError) as ex:
            LOG.error("Failure to %s %s: %s", operation, self.kind, ex)
            summary = f"Failure to {operation} {self.kind}"
            raise ProviderError(summary, f"Could not {operation} {self.kind}: {ex}") from ex


class Resource(ProviderComponent[ModelT], ABC):
    """A REMS object with a create, read, update and delete lifecycle.

    Subclasses implement the REMS calls.
    """

    # REMS path of objects that are archived instead of deleted.
    archivable_kind: ClassVar[Optional[ArchivableKind]] = None

    def plan(self, address: str, config: Optional[dict[str, Any]], prior: Optional[dict[str, Any]]) -> PlannedChange:
        """Plan the change from the prior state to the configuration."""
        return plan_change(address, self.model, config, prior)

    def validate(self, config: dict[str, Any], prior: Optional[dict[str, Any]] = None) -> ModelT:
        """Validate a fully known configuration into the resource model.

        Computed attributes that are not configured take their prior state values.

        :param config: Configured values
        :param prior: Prior state values
        :raises UserErrors: if the configuration is invalid
        """
        values = normalize_config(self.model, config)
        if prior is not None:
            values = merge_prior(self.model, values, prior)
        return self.load(values)

    async def _set_enabled(self, item_id: int, enabled: bool) -> None:
        if self.archivable_kind is not None:
            await self.client.set_enabled(self.archivable_kind, item_id, enabled)

    async def _archive(self, item_id: int) -> None:
        """Disable and archive an object REMS cannot delete."""
        if self.archivable_kind is None:
            raise SystemException(f"{self.type_name} cannot be archived")
        await self.client.set_enabled(self.archivable_kind, item_id, False)
        await self.client.set_archived(self.archivable_kind, item_id, True)

    @abstractmethod
    async def _create(self, plan: ModelT) -> ModelT:
        """Create the object in REMS and return the new state."""

    @abstractmethod
    async def _read(self, state: ModelT) -> Optional[ModelT]:
        """Read the object from REMS, None if it no longer exists."""

    async def _update(self, plan: ModelT, state: ModelT) -> ModelT:
        raise SystemException(f"{self.type_name} does not support in-place updates")

    async def _delete(self, state: ModelT) -> None:
        await self._archive(getattr(state, "id"))

    async def create(self, plan: ModelT) -> ModelT:
        """Create the object.

        :param plan: The planned resource model
        :returns: The new state
        """
        with self.diagnostics("create"):
            state = await self._create(plan)
        LOG.info("Created %s '%s'.", self.kind, getattr(state, "id", None))
        return state

    async def read(self, state: ModelT) -> Optional[ModelT]:
        """Refresh the state from REMS.

        :param state: The prior state
        :returns: The refreshed state, or None if the object is gone and should be removed from the state
        """
        try:
            with self.diagnostics("read"):
                return await self._read(state)
        except ProviderError as ex:
            if isinstance(ex.__cause__, NotFoundUserException):
                LOG.info("%s '%s' no longer exists.", self.kind, getattr(state, "id", None))
                return None
            raise

    async def update(self, plan: ModelT, state: ModelT) -> ModelT:
        """Update the object in place.

        :param plan: The planned resource model
        :param state: The prior state
        :returns: The new state
        """
        with self.diagnostics("update"):
            new_state = await self._update(plan, state)
        LOG.info("Updated %s '%s'.", self.kind, getattr(new_state, "id", None))
        return new_state

    async def delete(self, state: ModelT) -> None:
        """Delete the object, or archive it where REMS does not delete.

        :param state: The prior state
        """
        with self.diagnostics("delete"):
            await self._delete(state)
        LOG.info("Deleted %s '%s'.", self.kind, getattr(state, "id", None))

    async def import_state(self, import_id: str) -> ModelT:
        """Import an existing object by its REMS id.

        :param import_id: The REMS id
        :raises UserException: if the id is invalid or the object does not exist
        :returns: The imported state
        """
        try:
            item_id = int(import_id)
        except ValueError as ex:
            raise UserException(f"Invalid {self.kind} id '{import_id}': expected an integer") from ex
        state = await self.read(self.model.model_construct(id=item_id))  # type: ignore[arg-type]
        if state is None:
            raise UserException(f"Cannot import non-existent {self.kind} '{import_id}'")
        return state
