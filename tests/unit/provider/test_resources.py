"""Test category, license, workflow, resource and catalogue item resources."""

import pytest

from remscontent.exceptions import ProviderError, SystemException
from remscontent.provider.plan import Action
from remscontent.services.rems_service import RemsServiceHandler
from tests.unit.patches.rems_service import MOCK_REMS_ORGANIZATION_ID

LICENSE_CONFIG = {
    "organization_id": MOCK_REMS_ORGANIZATION_ID,
    "license_type": "link",
    "localizations": {"en": {"title": "CC BY 4.0", "text_content": "https://creativecommons.org/licenses/by/4.0/"}},
}


async def create(provider, type_name, config):
    resource = provider.resource(type_name)
    return await resource.create(resource.validate(config))


async def test_category_lifecycle(provider, mock_rems):
    categories = provider.resource("remscontent_category")
    child = await create(provider, "remscontent_category", {"title": {"en": "Exomes"}})
    state = await create(
        provider,
        "remscontent_category",
        {"title": {"en": "Genomics"}, "display_order": 1, "children": [child.id]},
    )

    assert mock_rems.categories[state.id].children[0].id == child.id
    assert await categories.read(child) == child
    assert (await categories.read(child)).children is None

    config = {"title": {"en": "Genomics"}, "description": {"en": "Sequencing data"}, "children": [child.id]}
    prior = categories.dump(state)
    assert categories.plan("remscontent_category.genomics", config, prior).action == Action.UPDATE
    updated = await categories.update(categories.validate(config, prior), state)
    assert updated.description == {"en": "Sequencing data"}
    assert mock_rems.categories[state.id].display_order is None

    await categories.delete(updated)
    assert state.id not in mock_rems.categories
    assert await categories.read(updated) is None


async def test_license_lifecycle(provider, mock_rems):
    licenses = provider.resource("remscontent_license")
    state = await create(provider, "remscontent_license", LICENSE_CONFIG)

    assert mock_rems.licenses[state.id].localizations["en"].textcontent.startswith("https://")
    assert await licenses.read(state) == state

    prior = licenses.dump(state)
    change = licenses.plan("remscontent_license.cc_by", {**LICENSE_CONFIG, "license_type": "text"}, prior)
    assert change.action == Action.REPLACE

    disabled = await licenses.update(licenses.validate({**LICENSE_CONFIG, "enabled": False}, prior), state)
    assert disabled.enabled is False
    assert mock_rems.licenses[state.id].enabled is False

    await licenses.delete(disabled)
    assert mock_rems.licenses[state.id].archived is True
    assert await licenses.read(disabled) is None


async def test_license_update_is_limited_to_enabled(provider):
    licenses = provider.resource("remscontent_license")
    state = await create(provider, "remscontent_license", LICENSE_CONFIG)

    await licenses.update(licenses.validate(LICENSE_CONFIG, licenses.dump(state)), state)

    RemsServiceHandler.set_enabled.assert_not_called()


async def test_workflow_lifecycle(provider, mock_rems):
    workflows = provider.resource("remscontent_workflow")
    license = await create(provider, "remscontent_license", LICENSE_CONFIG)
    config = {
        "organization_id": MOCK_REMS_ORGANIZATION_ID,
        "title": "Data access committee",
        "handlers": ["handler@umccr.org"],
        "license_ids": [license.id],
    }
    state = await create(provider, "remscontent_workflow", config)

    assert state.type == "workflow/default"
    assert await workflows.read(state) == state

    config = {**config, "handlers": ["handler@umccr.org", "second@umccr.org"]}
    prior = workflows.dump(state)
    assert workflows.plan("remscontent_workflow.dac", config, prior).action == Action.UPDATE
    updated = await workflows.update(workflows.validate(config, prior), state)
    assert [handler.userid for handler in mock_rems.workflows[state.id].workflow.handlers] == updated.handlers

    change = workflows.plan("remscontent_workflow.dac", {**config, "type": "workflow/decider"}, prior)
    assert change.action == Action.REPLACE
    assert change.requires_replace == ["type"]


async def test_workflow_enable_without_edit(provider):
    workflows = provider.resource("remscontent_workflow")
    config = {"organization_id": MOCK_REMS_ORGANIZATION_ID, "title": "Default"}
    state = await create(provider, "remscontent_workflow", config)

    await workflows.update(workflows.validate({**config, "enabled": False}, workflows.dump(state)), state)

    RemsServiceHandler.edit_workflow.assert_not_called()
    RemsServiceHandler.set_enabled.assert_called_once_with("workflows", state.id, False)


async def test_resource_lifecycle(provider, mock_rems):
    resources = provider.resource("remscontent_resource")
    license = await create(provider, "remscontent_license", LICENSE_CONFIG)
    config = {"organization_id": MOCK_REMS_ORGANIZATION_ID, "resid": "doi:10.1000/abc", "license_ids": [license.id]}
    state = await create(provider, "remscontent_resource", config)

    assert state.license_ids == [license.id]
    assert await resources.read(state) == state
    config = {**config, "resid": "doi:10.1000/xyz"}
    change = resources.plan("remscontent_resource.dataset", config, resources.dump(state))
    assert change.action == Action.REPLACE

    await resources.delete(state)
    assert await resources.read(state) is None


async def test_resource_with_unknown_license(provider):
    config = {"organization_id": MOCK_REMS_ORGANIZATION_ID, "resid": "doi:10.1000/abc", "license_ids": [99]}
    with pytest.raises(ProviderError, match="Failure to create resource"):
        await create(provider, "remscontent_resource", config)


async def test_catalogue_item_lifecycle(provider, mock_rems):
    items = provider.resource("remscontent_catalogue_item")
    resource = await create(
        provider, "remscontent_resource", {"organization_id": MOCK_REMS_ORGANIZATION_ID, "resid": "doi:10.1000/abc"}
    )
    workflow = await create(
        provider, "remscontent_workflow", {"organization_id": MOCK_REMS_ORGANIZATION_ID, "title": "Default"}
    )
    category = await create(provider, "remscontent_category", {"title": {"en": "Genomics"}})
    config = {
        "organization_id": MOCK_REMS_ORGANIZATION_ID,
        "resource_id": resource.id,
        "workflow_id": workflow.id,
        "localizations": {"en": {"title": "Dataset", "info_url": "https://example.org/dataset"}},
        "enabled": False,
    }
    state = await create(provider, "remscontent_catalogue_item", config)

    item = mock_rems.catalogue_items[state.id]
    assert item.enabled is False
    assert item.localizations["en"].discovery_url == "https://example.org/dataset"
    assert await items.read(state) == state

    config = {**config, "category_ids": [category.id], "enabled": True}
    prior = items.dump(state)
    change = items.plan("remscontent_catalogue_item.dataset", config, prior)
    assert change.action == Action.UPDATE
    assert change.changed == ["category_ids", "enabled"]
    updated = await items.update(items.validate(config, prior), state)
    assert updated.category_ids == [category.id]
    assert mock_rems.catalogue_items[state.id].enabled is True

    change = items.plan("remscontent_catalogue_item.dataset", {**config, "workflow_id": 99}, items.dump(updated))
    assert change.action == Action.REPLACE

    await items.delete(updated)
    assert mock_rems.catalogue_items[state.id].archived is True


async def test_category_cannot_be_archived(provider):
    categories = provider.resource("remscontent_category")
    with pytest.raises(SystemException, match="cannot be archived"):
        await categories._archive(1)
