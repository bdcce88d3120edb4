"""Test command line interface."""

import pytest
import ujson

from remscontent.cli import main

from tests.unit.patches.rems_service import MOCK_REMS_ORGANIZATION_ID

CONFIGURATION = {
    "provider": {"endpoint": "rems.example.org", "api_user": "owner", "api_key": "secret"},
    "resource": {
        "remscontent_form": {
            "main": {
                "organization_id": MOCK_REMS_ORGANIZATION_ID,
                "title": "Main form",
                "fields": [{"function": "form_field_text", "args": ["Name"]}],
            }
        },
        "remscontent_category": {"datasets": {"title": {"en": "Datasets"}}},
    },
}


@pytest.fixture
def files(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = tmp_path / "remscontent.json"
    config.write_text(ujson.dumps(CONFIGURATION))
    return ["-c", str(config), "-s", str(tmp_path / "remscontent.state.json")]


def test_schema(capsys):
    assert main(["schema"]) == 0
    schema = ujson.loads(capsys.readouterr().out)
    assert "remscontent_form" in schema["resource_schemas"]
    assert "form_field_text" in schema["functions"]


def test_plan_apply_destroy(files, mock_rems, capsys):
    assert main([*files, "plan"]) == 2
    out = capsys.readouterr().out
    assert "+ remscontent_form.main will be created" in out
    assert "Plan: 2 to add, 0 to change, 0 to destroy." in out

    assert main([*files, "apply"]) == 0
    assert "Apply complete! Resources: 2 added, 0 changed, 0 destroyed." in capsys.readouterr().out
    assert len(mock_rems.forms) == 1
    assert len(mock_rems.categories) == 1

    assert main([*files, "plan"]) == 0
    assert "No changes." in capsys.readouterr().out

    assert main([*files, "destroy"]) == 0
    assert "Destroy complete! Resources: 0 added, 0 changed, 2 destroyed." in capsys.readouterr().out
    assert mock_rems.categories == {}
    assert all(form.archived for form in mock_rems.forms.values())


def test_import(files, mock_rems, capsys):
    assert main([*files, "import", "remscontent_form.main", "12"]) == 1
    assert "Error: Cannot import non-existent form '12'" in capsys.readouterr().err


def test_missing_configuration(tmp_path, capsys):
    assert main(["-c", str(tmp_path / "missing.json"), "plan"]) == 1
    assert "does not exist" in capsys.readouterr().err


def test_missing_provider_argument(files, tmp_path, capsys):
    config = CONFIGURATION | {"provider": {"endpoint": "rems.example.org"}}
    (tmp_path / "remscontent.json").write_text(ujson.dumps(config))
    assert main([*files, "plan"]) == 1
    assert "Missing provider argument 'api_user'" in capsys.readouterr().err
