"""Test REMS service."""

from unittest.mock import AsyncMock

import pytest

from remscontent.exceptions import NotFoundUserException, UserErrors, UserException
from remscontent.models.rems import RemsCatalogueItemLocalization, RemsFormField, RemsLicenseLocalization
from remscontent.services.rems_service import LIST_PARAMS, RemsServiceHandler
from remscontent.services.service_handler import ServiceClientError

ORGANIZATION = {"organization/id": "umccr", "organization/name": {"en": "UMCCR"}}


def test_rems_client_headers(rems_client: RemsServiceHandler):
    assert str(rems_client.base_url) == "https://rems.example.org/api"
    assert rems_client.http_client_headers["x-rems-api-key"] == "secret"
    assert rems_client.http_client_headers["x-rems-user-id"] == "owner"
    assert str(rems_client.healthcheck_url) == "https://rems.example.org/api/health"


async def test_get_form(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(
        return_value={
            "form/id": 3,
            "organization": ORGANIZATION,
            "form/internal-name": "Main form",
            "form/external-title": {"en": "Apply"},
            "form/fields": [{"field/id": "fld1", "field/type": "label", "field/title": {"en": "Hello"}}],
            "enabled": True,
            "archived": False,
        }
    )

    form = await rems_client.get_form(3)

    assert form.id == 3
    assert form.organization.id == "umccr"
    assert form.internal_name == "Main form"
    assert form.fields[0].id == "fld1"
    rems_client._request.assert_called_once_with(method="GET", path="/forms/3", params=None, timeout=10)


async def test_get_unknown_form(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(side_effect=ServiceClientError("rems error: not found", status_code=404))

    with pytest.raises(NotFoundUserException, match="Unknown REMS form '3'"):
        await rems_client.get_form(3)


async def test_get_forbidden_form(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(side_effect=ServiceClientError("rems error: forbidden", status_code=403))

    with pytest.raises(ServiceClientError):
        await rems_client.get_form(3)


async def test_get_workflows(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(
        return_value=[
            {
                "id": 1,
                "title": "Default",
                "organization": ORGANIZATION,
                "workflow": {"type": "workflow/default", "handlers": [{"userid": "handler"}], "licenses": []},
            }
        ]
    )

    workflows = await rems_client.get_workflows()

    assert [workflow.id for workflow in workflows] == [1]
    assert workflows[0].workflow.handlers[0].userid == "handler"
    rems_client._request.assert_called_once_with(method="GET", path="/workflows", params=LIST_PARAMS)


async def test_get_organizations(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(return_value=[ORGANIZATION, {"organization/id": "other"}])

    organizations = await rems_client.get_organizations()

    assert [organization.id for organization in organizations] == ["umccr", "other"]
    assert organizations[0].name == {"en": "UMCCR"}
    rems_client._request.assert_called_once_with(method="GET", path="/organizations", params=LIST_PARAMS)


async def test_get_forms(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(
        return_value=[{"form/id": 3, "organization": ORGANIZATION, "form/internal-name": "Main form", "enabled": False}]
    )

    forms = await rems_client.get_forms()

    assert [(form.id, form.internal_name, form.enabled) for form in forms] == [(3, "Main form", False)]
    rems_client._request.assert_called_once_with(method="GET", path="/forms", params=LIST_PARAMS)


async def test_get_categories(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(
        return_value=[
            {"category/id": 1, "category/title": {"en": "Genomics"}, "category/children": [{"category/id": 2}]},
            {"category/id": 2, "category/title": {"en": "Cancer"}},
        ]
    )

    categories = await rems_client.get_categories()

    assert [category.id for category in categories] == [1, 2]
    assert categories[0].children[0].id == 2
    # Categories are never disabled or archived.
    rems_client._request.assert_called_once_with(method="GET", path="/categories")


async def test_get_licenses(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(
        return_value=[
            {
                "id": 4,
                "licensetype": "link",
                "localizations": {"en": {"title": "CC BY", "textcontent": "https://example.org/cc-by"}},
                "organization": ORGANIZATION,
                "enabled": False,
            }
        ]
    )

    licenses = await rems_client.get_licenses()

    assert [license.id for license in licenses] == [4]
    assert licenses[0].localizations["en"].textcontent == "https://example.org/cc-by"
    assert licenses[0].enabled is False
    rems_client._request.assert_called_once_with(method="GET", path="/licenses", params=LIST_PARAMS)


async def test_get_catalogue_items(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(
        return_value=[
            {
                "id": 7,
                "resource-id": 5,
                "resid": "doi:10.1/abc",
                "wfid": 1,
                "formid": 3,
                "organization": ORGANIZATION,
                "localizations": {"en": {"title": "Dataset", "infourl": "https://example.org/dataset"}},
            }
        ]
    )

    items = await rems_client.get_catalogue_items()

    assert [(item.id, item.resource_id, item.workflow_id, item.form_id) for item in items] == [(7, 5, 1, 3)]
    assert items[0].localizations["en"].discovery_url == "https://example.org/dataset"
    rems_client._request.assert_called_once_with(method="GET", path="/catalogue-items", params=LIST_PARAMS)


async def test_get_resources_by_resid(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(return_value=[])

    assert await rems_client.get_resources(resid="doi:10.1/abc") == []
    rems_client._request.assert_called_once_with(
        method="GET", path="/resources", params={**LIST_PARAMS, "resid": "doi:10.1/abc"}
    )


async def test_create_form(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(return_value={"success": True, "id": 7})

    form_id = await rems_client.create_form(
        organization_id="umccr",
        internal_name="Main form",
        external_title={"en": "Main form"},
        fields=[RemsFormField(type="text", title={"en": "Name"}, optional=False)],
    )

    assert form_id == 7
    rems_client._request.assert_called_once_with(
        method="POST",
        path="/forms/create",
        json_data={
            "organization": {"organization/id": "umccr"},
            "form/internal-name": "Main form",
            "form/external-title": {"en": "Main form"},
            "form/fields": [{"field/type": "text", "field/title": {"en": "Name"}, "field/optional": False}],
        },
        timeout=10,
    )


async def test_create_rejected(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(
        return_value={"success": False, "errors": [{"type": "t.form.validation/required", "field-id": "fld1"}]}
    )

    with pytest.raises(UserErrors) as ex:
        await rems_client.create_license(
            organization_id="umccr",
            license_type="link",
            localizations={"en": RemsLicenseLocalization(title="CC BY", textcontent="https://example.org/cc-by")},
        )
    assert ex.value.messages == ["t.form.validation/required {'field-id': 'fld1'}"]


async def test_create_without_id(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(return_value={"success": True})

    with pytest.raises(UserException, match="did not return an id"):
        await rems_client.create_resource(organization_id="umccr", resid="doi:10.1/abc", license_ids=[])


async def test_create_catalogue_item(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(return_value={"success": True, "id": 9})

    await rems_client.create_catalogue_item(
        organization_id="umccr",
        resource_id=2,
        workflow_id=3,
        form_id=None,
        localizations={"en": RemsCatalogueItemLocalization(title="Dataset", discovery_url="https://example.org")},
        category_ids=[4],
    )

    assert rems_client._request.call_args.kwargs["json_data"] == {
        "form": None,
        "resid": 2,
        "wfid": 3,
        "organization": {"organization/id": "umccr"},
        "localizations": {"en": {"title": "Dataset", "infourl": "https://example.org"}},
        "categories": [{"category/id": 4}],
    }


async def test_edit_category(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(return_value={"success": True})

    await rems_client.edit_category(category_id=5, title={"en": "Genomics"}, children=[6])

    rems_client._request.assert_called_once_with(
        method="PUT",
        path="/categories/edit",
        json_data={"category/id": 5, "category/title": {"en": "Genomics"}, "category/children": [{"category/id": 6}]},
        timeout=10,
    )


async def test_delete_category(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(return_value={"success": True})

    await rems_client.delete_category(5)

    rems_client._request.assert_called_once_with(
        method="POST", path="/categories/delete", json_data={"category/id": 5}, timeout=10
    )


async def test_set_enabled_and_archived(rems_client: RemsServiceHandler):
    rems_client._request = AsyncMock(return_value={"success": True})

    await rems_client.set_enabled("forms", 3, False)
    await rems_client.set_archived("forms", 3, True)

    assert [c.kwargs["path"] for c in rems_client._request.call_args_list] == ["/forms/enabled", "/forms/archived"]
    assert [c.kwargs["json_data"] for c in rems_client._request.call_args_list] == [
        {"id": 3, "enabled": False},
        {"id": 3, "archived": True},
    ]
