import json
import shutil
from pathlib import Path

from autogql import cli
from autogql.runtime.exporter import build_manifest, export
from autogql.runtime.pipeline import build_api

REGISTRY = Path(__file__).resolve().parent.parent / "registry"


def test_export_writes_schema_and_manifest(tmp_path, user_entity, tag_entity, access):
    api = build_api([user_entity, tag_entity], access)
    paths = export(api, str(tmp_path / "out"))

    assert Path(paths["schema"]).read_text() == api.sdl
    manifest = json.loads(Path(paths["manifest"]).read_text())
    assert [e["entity"] for e in manifest["entities"]] == ["User", "Tag"]
    assert manifest["entities"][1]["create_fields"] == ["label"]
    assert manifest["mutation"] == ["create_User", "update_User", "create_Tag", "update_Tag"]


def test_manifest_lists_custom_operations(tag_entity, access):
    api = build_api([tag_entity], access, custom_resolvers=[{"query": {"ping": lambda *_: True}}])
    assert build_manifest(api)["query"][-1] == "ping"


def test_cli_sdl(tmp_path, capsys):
    shutil.copy(REGISTRY / "shop.yaml", tmp_path / "shop.yaml")
    assert cli.main(["--registry", str(tmp_path), "sdl"]) == 0
    out = capsys.readouterr().out
    assert "type Product {" in out
    assert "read_multiple_Customer(" in out


def test_cli_export(tmp_path, capsys):
    shutil.copy(REGISTRY / "shop.yaml", tmp_path / "shop.yaml")
    assert cli.main(["--registry", str(tmp_path), "export", "--out", str(tmp_path / "contracts")]) == 0
    assert (tmp_path / "contracts" / "schema.graphql").exists()
    assert (tmp_path / "contracts" / "manifest.json").exists()


def test_cli_reports_errors(tmp_path, capsys):
    assert cli.main(["--registry", str(tmp_path / "missing"), "sdl"]) == 1
    assert "Registry directory not found" in capsys.readouterr().err
