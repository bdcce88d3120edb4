"""REMS service.

Typed access to the REMS content API: https://github.com/CSCfi/rems

Create, edit, enable and archive commands answer with a ``{"success": ..., "id": ..., "errors": [...]}`` body,
and a rejected command is reported as a REMS error even if the HTTP status was 200.
"""

from typing import Any, Literal, Optional

from aiohttp import ClientResponse, ClientTimeout, ContentTypeError
from yarl import URL

from ..conf.rems import RemsConfig
from ..exceptions import NotFoundUserException, UserErrors, UserException
from ..helpers.logger import LOG, log_debug_json
from ..models.rems import (
    LocalizedText,
    RemsCatalogueItem,
    RemsCatalogueItemLocalization,
    RemsCategory,
    RemsCommandResult,
    RemsForm,
    RemsFormField,
    RemsLicense,
    RemsLicenseLocalization,
    RemsOrganization,
    RemsResource,
    RemsWorkflow,
)
from .service_handler import ServiceClientError, ServiceHandler

ArchivableKind = Literal["forms", "licenses", "workflows", "resources", "catalogue-items"]

# Listings include disabled but not archived content.
LIST_PARAMS = {"disabled": "true", "archived": "false"}


class RemsServiceHandler(ServiceHandler):
    """REMS service."""

    def __init__(self, config: RemsConfig) -> None:
        """REMS service.

        :param config: REMS connection configuration
        """

        base_url = URL.build(scheme=config.REMS_SCHEME, host=config.REMS_ENDPOINT) / "api"

        super().__init__(
            service_name="rems",
            base_url=base_url,
            http_client_timeout=ClientTimeout(total=config.REMS_TIMEOUT),
            http_client_headers={
                "x-rems-api-key": config.REMS_API_KEY.get_secret_value(),
                "x-rems-user-id": config.REMS_API_USER,
                "accept": "application/json",
            },
            healthcheck_url=base_url / "health",
            healthcheck_callback=self.healthcheck_callback,
        )
        self.timeout = config.REMS_TIMEOUT

    @staticmethod
    async def healthcheck_callback(response: ClientResponse) -> bool:
        try:
            content = await response.json()
        except (ContentTypeError, ValueError) as e:
            LOG.error("REMS health response is not JSON: %r.", e)
            return False
        return isinstance(content, dict) and bool(content.get("healthy"))

    async def _get(self, kind: str, path: str, params: Optional[dict[str, str]] = None) -> Any:
        """Get a single REMS object.

        :param kind: Object kind used in the error message
        :param path: Object path
        :param params: URL parameters
        :raises NotFoundUserException: if the object does not exist
        :returns: The response body
        """
        try:
            return await self._request(method="GET", path=path, params=params, timeout=self.timeout)
        except ServiceClientError as ex:
            if ex.status_code == 404:
                raise NotFoundUserException(f"Unknown REMS {kind} '{path.rsplit('/', 1)[-1]}'") from ex
            raise

    async def _command(self, method: str, path: str, data: dict[str, Any]) -> RemsCommandResult:
        """Send a REMS command and check that it was accepted.

        :param method: HTTP method
        :param path: Command path
        :param data: Command body
        :raises UserErrors: if REMS did not accept the command
        :returns: The command result
        """
        LOG.debug("Sending REMS command %s '%s'.", method, path)
        log_debug_json(data)
        response = await self._request(method=method, path=path, json_data=data, timeout=self.timeout)
        result = RemsCommandResult.model_validate(response)
        if not result.success:
            raise UserErrors(result.error_messages())
        return result

    async def _create(self, path: str, data: dict[str, Any]) -> int:
        result = await self._command("POST", path, data)
        if result.id is None:
            raise UserException(f"REMS command '{path}' did not return an id")
        return result.id

    # Health and organizations.
    #

    async def get_organization(self, organization_id: str) -> RemsOrganization:
        """
        Get REMS organization.

        :param organization_id: The REMS organization id.
        :returns: The REMS organization.
        """

        response = await self._get("organization", f"/organizations/{organization_id}")
        return RemsOrganization.model_validate(response)

    async def get_organizations(self) -> list[RemsOrganization]:
        """
        Get REMS organizations.

        :returns: The list of REMS organizations.
        """

        response = await self._request(method="GET", path="/organizations", params=LIST_PARAMS)
        return [RemsOrganization.model_validate(organization) for organization in response]

    # Forms.
    #

    async def get_form(self, form_id: int) -> RemsForm:
        """
        Get REMS form.

        :param form_id: The REMS form id.
        :returns: The REMS form.
        """

        response = await self._get("form", f"/forms/{form_id}")
        return RemsForm.model_validate(response)

    async def get_forms(self) -> list[RemsForm]:
        """
        Get REMS forms that have not been archived.

        :returns: The list of REMS forms.
        """

        response = await self._request(method="GET", path="/forms", params=LIST_PARAMS)
        return [RemsForm.model_validate(form) for form in response]

    @staticmethod
    def _form_command(
        organization_id: str, internal_name: str, external_title: LocalizedText, fields: list[RemsFormField]
    ) -> dict[str, Any]:
        return {
            "organization": {"organization/id": organization_id},
            "form/internal-name": internal_name,
            "form/external-title": external_title,
            "form/fields": [field.to_rems() for field in fields],
        }

    async def create_form(
        self, organization_id: str, internal_name: str, external_title: LocalizedText, fields: list[RemsFormField]
    ) -> int:
        """Create a REMS form.

        :param organization_id: The REMS organization id.
        :param internal_name: The form name shown to REMS owners.
        :param external_title: The form title shown to applicants.
        :param fields: The form fields.
        :returns: The REMS form id.
        """

        data = self._form_command(organization_id, internal_name, external_title, fields)
        return await self._create("/forms/create", data)

    async def edit_form(
        self,
        form_id: int,
        organization_id: str,
        internal_name: str,
        external_title: LocalizedText,
        fields: list[RemsFormField],
    ) -> None:
        """Edit a REMS form.

        :param form_id: The REMS form id.
        :param organization_id: The REMS organization id.
        :param internal_name: The form name shown to REMS owners.
        :param external_title: The form title shown to applicants.
        :param fields: The form fields.
        """

        data = {"form/id": form_id, **self._form_command(organization_id, internal_name, external_title, fields)}
        await self._command("PUT", "/forms/edit", data)

    # Categories.
    #

    async def get_category(self, category_id: int) -> RemsCategory:
        """
        Get REMS category.

        :param category_id: The REMS category id.
        :returns: The REMS category.
        """

        response = await self._get("category", f"/categories/{category_id}")
        return RemsCategory.model_validate(response)

    async def get_categories(self) -> list[RemsCategory]:
        """
        Get REMS categories.

        :returns: The list of REMS categories.
        """

        response = await self._request(method="GET", path="/categories")
        return [RemsCategory.model_validate(category) for category in response]

    @staticmethod
    def _category_command(
        title: LocalizedText,
        description: Optional[LocalizedText],
        display_order: Optional[int],
        children: Optional[list[int]],
    ) -> dict[str, Any]:
        data: dict[str, Any] = {"category/title": title}
        if description is not None:
            data["category/description"] = description
        if display_order is not None:
            data["category/display-order"] = display_order
        if children is not None:
            data["category/children"] = [{"category/id": child} for child in children]
        return data

    async def create_category(
        self,
        title: LocalizedText,
        description: Optional[LocalizedText] = None,
        display_order: Optional[int] = None,
        children: Optional[list[int]] = None,
    ) -> int:
        """Create a REMS category.

        :param title: The category title.
        :param description: The category description.
        :param display_order: The category position when listed.
        :param children: The ids of the child categories.
        :returns: The REMS category id.
        """

        data = self._category_command(title, description, display_order, children)
        return await self._create("/categories/create", data)

    async def edit_category(
        self,
        category_id: int,
        title: LocalizedText,
        description: Optional[LocalizedText] = None,
        display_order: Optional[int] = None,
        children: Optional[list[int]] = None,
    ) -> None:
        """Edit a REMS category.

        :param category_id: The REMS category id.
        :param title: The category title.
        :param description: The category description.
        :param display_order: The category position when listed.
        :param children: The ids of the child categories.
        """

        data = {"category/id": category_id, **self._category_command(title, description, display_order, children)}
        await self._command("PUT", "/categories/edit", data)

    async def delete_category(self, category_id: int) -> None:
        """Delete a REMS category.

        :param category_id: The REMS category id.
        """

        await self._command("POST", "/categories/delete", {"category/id": category_id})

    # Licenses.
    #

    async def get_license(self, license_id: int) -> RemsLicense:
        """
        Get REMS license.

        :param license_id: The REMS license id.
        :returns: The REMS license.
        """

        response = await self._get("license", f"/licenses/{license_id}")
        return RemsLicense.model_validate(response)

    async def get_licenses(self) -> list[RemsLicense]:
        """
        Get REMS licenses that have not been archived.

        :returns: The list of REMS licenses.
        """

        response = await self._request(method="GET", path="/licenses", params=LIST_PARAMS)
        return [RemsLicense.model_validate(license) for license in response]

    async def create_license(
        self, organization_id: str, license_type: str, localizations: dict[str, RemsLicenseLocalization]
    ) -> int:
        """Create a REMS license.

        :param organization_id: The REMS organization id.
        :param license_type: The license type, 'link' or 'text'.
        :param localizations: The license title and content per language.
        :returns: The REMS license id.
        """

        data = {
            "licensetype": license_type,
            "organization": {"organization/id": organization_id},
            "localizations": {language: loc.to_rems() for language, loc in localizations.items()},
        }
        return await self._create("/licenses/create", data)

    # Workflows.
    #

    async def get_workflow(self, workflow_id: int) -> RemsWorkflow:
        """
        Get REMS workflow.

        :param workflow_id: The REMS workflow id.
        :returns: The REMS workflow.
        """

        response = await self._get("workflow", f"/workflows/{workflow_id}")
        return RemsWorkflow.model_validate(response)

    async def get_workflows(self) -> list[RemsWorkflow]:
        """
        Get REMS workflows that have not been archived.

        :returns: The list of REMS workflows.
        """

        response = await self._request(method="GET", path="/workflows", params=LIST_PARAMS)
        return [RemsWorkflow.model_validate(workflow) for workflow in response]

    async def create_workflow(
        self,
        organization_id: str,
        title: str,
        workflow_type: str,
        handlers: list[str],
        form_ids: list[int],
        license_ids: list[int],
    ) -> int:
        """Create a REMS workflow.

        :param organization_id: The REMS organization id.
        :param title: The workflow title.
        :param workflow_type: The workflow type, e.g. 'workflow/default'.
        :param handlers: The user ids of the handlers.
        :param form_ids: The ids of the workflow forms.
        :param license_ids: The ids of the workflow licenses.
        :returns: The REMS workflow id.
        """

        data = {
            "organization": {"organization/id": organization_id},
            "title": title,
            "type": workflow_type,
            "handlers": handlers,
            "forms": [{"form/id": form_id} for form_id in form_ids],
            "licenses": [{"license/id": license_id} for license_id in license_ids],
        }
        return await self._create("/workflows/create", data)

    async def edit_workflow(self, workflow_id: int, organization_id: str, title: str, handlers: list[str]) -> None:
        """Edit a REMS workflow.

        :param workflow_id: The REMS workflow id.
        :param organization_id: The REMS organization id.
        :param title: The workflow title.
        :param handlers: The user ids of the handlers.
        """

        data = {
            "id": workflow_id,
            "organization": {"organization/id": organization_id},
            "title": title,
            "handlers": handlers,
        }
        await self._command("PUT", "/workflows/edit", data)

    # Resources.
    #

    async def get_resource(self, resource_id: int) -> RemsResource:
        """
        Get REMS resource.

        :param resource_id: The REMS resource id.
        :returns: The REMS resource.
        """

        response = await self._get("resource", f"/resources/{resource_id}")
        return RemsResource.model_validate(response)

    async def get_resources(self, resid: Optional[str] = None) -> list[RemsResource]:
        """
        Get REMS resources that have not been archived.

        :param resid: Only return resources with this external id, e.g. a DOI.
        :returns: The list of REMS resources.
        """

        params = dict(LIST_PARAMS)
        if resid is not None:
            params["resid"] = resid
        response = await self._request(method="GET", path="/resources", params=params)
        return [RemsResource.model_validate(resource) for resource in response]

    async def create_resource(self, organization_id: str, resid: str, license_ids: list[int]) -> int:
        """Create a REMS resource.

        :param organization_id: The REMS organization id.
        :param resid: The external resource id, e.g. a DOI.
        :param license_ids: The REMS license ids.
        :returns: The REMS resource id.
        """

        data = {
            "resid": resid,
            "organization": {"organization/id": organization_id},
            "licenses": license_ids,
        }
        return await self._create("/resources/create", data)

    # Catalogue items.
    #

    async def get_catalogue_item(self, catalogue_item_id: int) -> RemsCatalogueItem:
        """
        Get REMS catalogue item.

        :param catalogue_item_id: The REMS catalogue item id.
        :returns: The REMS catalogue item.
        """

        response = await self._get("catalogue item", f"/catalogue-items/{catalogue_item_id}")
        return RemsCatalogueItem.model_validate(response)

    async def get_catalogue_items(self) -> list[RemsCatalogueItem]:
        """
        Get REMS catalogue items that have not been archived.

        :returns: The list of REMS catalogue items.
        """

        response = await self._request(method="GET", path="/catalogue-items", params=LIST_PARAMS)
        return [RemsCatalogueItem.model_validate(item) for item in response]

    async def create_catalogue_item(
        self,
        organization_id: str,
        resource_id: int,
        workflow_id: int,
        form_id: Optional[int],
        localizations: dict[str, RemsCatalogueItemLocalization],
        category_ids: Optional[list[int]] = None,
    ) -> int:
        """Create a REMS catalogue item.

        :param organization_id: The REMS organization id.
        :param resource_id: The REMS resource id.
        :param workflow_id: The REMS workflow id.
        :param form_id: The REMS form id, None for a catalogue item without a form.
        :param localizations: The title and discovery url per language.
        :param category_ids: The REMS category ids.
        :returns: The REMS catalogue item id.
        """

        data: dict[str, Any] = {
            "form": form_id,
            "resid": resource_id,
            "wfid": workflow_id,
            "organization": {"organization/id": organization_id},
            "localizations": {language: loc.to_rems() for language, loc in localizations.items()},
        }
        if category_ids is not None:
            data["categories"] = [{"category/id": category_id} for category_id in category_ids]
        return await self._create("/catalogue-items/create", data)

    async def edit_catalogue_item(
        self,
        catalogue_item_id: int,
        organization_id: str,
        localizations: dict[str, RemsCatalogueItemLocalization],
        category_ids: Optional[list[int]] = None,
    ) -> None:
        """Edit a REMS catalogue item.

        :param catalogue_item_id: The REMS catalogue item id.
        :param organization_id: The REMS organization id.
        :param localizations: The title and discovery url per language.
        :param category_ids: The REMS category ids.
        """

        data: dict[str, Any] = {
            "id": catalogue_item_id,
            "organization": {"organization/id": organization_id},
            "localizations": {language: loc.to_rems() for language, loc in localizations.items()},
        }
        if category_ids is not None:
            data["categories"] = [{"category/id": category_id} for category_id in category_ids]
        await self._command("PUT", "/catalogue-items/edit", data)

    # Enabled and archived state.
    #

    async def set_enabled(self, kind: ArchivableKind, item_id: int, enabled: bool) -> None:
        """Enable or disable a REMS object.

        :param kind: The object kind, e.g. 'forms'.
        :param item_id: The object id.
        :param enabled: True to enable.
        """

        LOG.info("Setting REMS %s '%d' enabled to %s.", kind, item_id, enabled)
        await self._command("PUT", f"/{kind}/enabled", {"id": item_id, "enabled": enabled})

    async def set_archived(self, kind: ArchivableKind, item_id: int, archived: bool) -> None:
        """Archive or unarchive a REMS object.

        :param kind: The object kind, e.g. 'forms'.
        :param item_id: The object id.
        :param archived: True to archive.
        """

        LOG.info("Setting REMS %s '%d' archived to %s.", kind, item_id, archived)
        await self._command("PUT", f"/{kind}/archived", {"id": item_id, "archived": archived})
