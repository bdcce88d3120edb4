"""Test data sources."""

import pytest

from remscontent.exceptions import ProviderError, UserErrors
from remscontent.provider.plan import Action
from remscontent.provider.schema import UNKNOWN
from tests.unit.patches.rems_service import MOCK_REMS_ORGANIZATION_ID, MOCK_REMS_OTHER_ORGANIZATION_ID

LICENSE_CONFIG = {
    "organization_id": MOCK_REMS_ORGANIZATION_ID,
    "license_type": "text",
    "localizations": {"en": {"title": "Terms", "text_content": "Do not share the data."}},
}


async def test_read_organization(provider):
    organizations = provider.data_source("remscontent_organization")

    organization = await organizations.read({"id": MOCK_REMS_ORGANIZATION_ID})

    assert organization.name == {"en": "umccr name", "fi": "umccr nimi"}
    assert organization.short_name == {"en": "UMCCR"}
    assert organization.owners == ["owner@umccr.org"]
    assert organization.review_emails == ["review@umccr.org"]
    assert organization.enabled is True
    assert organization.archived is False


async def test_read_unknown_organization(provider):
    organizations = provider.data_source("remscontent_organization")

    with pytest.raises(ProviderError) as ex:
        await organizations.read({"id": "missing"})
    assert ex.value.summary == "Failure to read organization"
    assert "Unknown REMS organization 'missing'" in ex.value.detail


async def test_organization_outputs_are_not_configurable(provider):
    organizations = provider.data_source("remscontent_organization")

    with pytest.raises(UserErrors, match="Value for unconfigurable attribute 'name'"):
        await organizations.read({"id": MOCK_REMS_ORGANIZATION_ID, "name": {"en": "Other"}})


def test_plan_deferred_read(provider):
    organizations = provider.data_source("remscontent_organization")

    change = organizations.plan("data.remscontent_organization.main", {"id": UNKNOWN})

    assert change.action == Action.READ
    assert not change.has_changes
    assert change.after["name"] is UNKNOWN


async def test_license_lookup(provider):
    licenses = provider.resource("remscontent_license")
    license = await licenses.create(licenses.validate(LICENSE_CONFIG))
    lookup = provider.data_source("remscontent_license_lookup")

    found = await lookup.read({"id": license.id})
    assert found.organization_id == MOCK_REMS_ORGANIZATION_ID
    assert found.license_type == "text"
    assert found.localizations["en"].text_content == "Do not share the data."

    found = await lookup.read({"id": license.id, "organization_id": MOCK_REMS_ORGANIZATION_ID})
    assert found.id == license.id

    with pytest.raises(ProviderError) as ex:
        await lookup.read({"id": license.id, "organization_id": MOCK_REMS_OTHER_ORGANIZATION_ID})
    assert f"REMS license '{license.id}' does not belong to REMS organization 'other'" in ex.value.detail


async def test_workflow_lookup(provider):
    workflows = provider.resource("remscontent_workflow")
    workflow = await workflows.create(
        workflows.validate({"organization_id": MOCK_REMS_OTHER_ORGANIZATION_ID, "title": "Other", "handlers": ["h"]})
    )
    lookup = provider.data_source("remscontent_workflow_lookup")

    found = await lookup.read({"id": workflow.id})
    assert found.title == "Other"
    assert found.handlers == ["h"]
    assert found.organization_id == MOCK_REMS_OTHER_ORGANIZATION_ID

    with pytest.raises(ProviderError, match="does not belong to REMS organization 'umccr'"):
        await lookup.read({"id": workflow.id, "organization_id": MOCK_REMS_ORGANIZATION_ID})
