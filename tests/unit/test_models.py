"""Unit tests for fsmirror.models module."""
from pathlib import Path

import pytest
import yaml

from fsmirror.exceptions import ConfigurationError, ValidationError
from fsmirror.models import CatalogBatch, CatalogEntry, ScopeContext, ScopeLevel


class TestScopeContext:

    @pytest.mark.unit
    def test_levels(self):
        assert ScopeContext(account="a").level is ScopeLevel.ACCOUNT
        assert ScopeContext(account="a", organization="o").level is ScopeLevel.ORGANIZATION
        assert ScopeContext(account="a", organization="o", project="p").level is ScopeLevel.PROJECT

    @pytest.mark.unit
    def test_project_requires_organization(self):
        with pytest.raises(ValidationError):
            ScopeContext(account="a", project="p")

    @pytest.mark.unit
    def test_account_required(self):
        with pytest.raises(ValidationError):
            ScopeContext(account="  ")

    @pytest.mark.unit
    def test_query_params(self):
        assert ScopeContext(account="a").query_params() == {"accountIdentifier": "a"}
        assert ScopeContext(account="a", organization="o", project="p").query_params() == {
            "accountIdentifier": "a",
            "orgIdentifier": "o",
            "projectIdentifier": "p",
        }

    @pytest.mark.unit
    def test_is_hashable_value_object(self):
        assert {ScopeContext(account="a", organization="o"), ScopeContext(account="a", organization="o")} == {
            ScopeContext(account="a", organization="o")
        }


class TestCatalogEntry:

    @pytest.mark.unit
    def test_from_dict(self):
        entry = CatalogEntry.from_dict({"identifier": "x", "name": "x.yaml", "path": "/x.yaml"})
        assert entry == CatalogEntry(identifier="x", name="x.yaml", remote_path="/x.yaml")
        assert entry.to_dict() == {"identifier": "x", "name": "x.yaml", "path": "/x.yaml"}

    @pytest.mark.unit
    def test_empty_identifier_rejected(self):
        with pytest.raises(ValidationError):
            CatalogEntry(identifier="", name="x.yaml", remote_path="/x.yaml")

    @pytest.mark.unit
    def test_relative_remote_path_rejected(self):
        with pytest.raises(ValidationError):
            CatalogEntry(identifier="x", name="x.yaml", remote_path="x.yaml")

    @pytest.mark.unit
    def test_missing_identifier_key(self):
        with pytest.raises(ValidationError):
            CatalogEntry.from_dict({"name": "x.yaml", "path": "/x.yaml"})


class TestCatalogBatch:

    @pytest.fixture
    def catalog_file(self, temp_dir: Path) -> Path:
        path = temp_dir / "catalog.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "batches": [
                        {
                            "account": "acc",
                            "entries": [
                                {"identifier": "f1", "name": "folder", "path": "/folder"},
                                {"identifier": "a1", "name": "app.yaml", "path": "/folder/app.yaml"},
                            ],
                        },
                        {
                            "account": "acc",
                            "organization": "org1",
                            "project": "proj1",
                            "entries": [{"identifier": "p1", "name": "p.yaml", "path": "/p.yaml"}],
                        },
                    ]
                }
            ),
            encoding="utf-8",
        )
        return path

    @pytest.mark.unit
    def test_load_all(self, catalog_file):
        batches = CatalogBatch.load_all(catalog_file)

        assert len(batches) == 2
        assert batches[0].scope == ScopeContext(account="acc")
        assert [e.identifier for e in batches[0].entries] == ["f1", "a1"]
        assert batches[1].scope.level is ScopeLevel.PROJECT

    @pytest.mark.unit
    def test_dump_then_load_preserves_batches(self, catalog_file, temp_dir):
        batches = CatalogBatch.load_all(catalog_file)
        out = CatalogBatch.dump_all(batches, temp_dir / "copy" / "catalog.yaml")
        assert CatalogBatch.load_all(out) == batches

    @pytest.mark.unit
    def test_load_all_missing_file(self, temp_dir):
        with pytest.raises(ConfigurationError):
            CatalogBatch.load_all(temp_dir / "missing.yaml")

    @pytest.mark.unit
    def test_load_all_empty_file(self, temp_dir):
        path = temp_dir / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert CatalogBatch.load_all(path) == []

    @pytest.mark.unit
    def test_load_all_not_a_catalog(self, temp_dir):
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            CatalogBatch.load_all(path)

    @pytest.mark.unit
    def test_load_all_invalid_scope(self, temp_dir):
        path = temp_dir / "bad.yaml"
        path.write_text(
            yaml.safe_dump({"batches": [{"account": "acc", "project": "p", "entries": []}]}),
            encoding="utf-8",
        )
        with pytest.raises(ValidationError, match="Batch 1"):
            CatalogBatch.load_all(path)
