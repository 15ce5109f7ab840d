"""Unit tests for fsmirror.scope module."""
from pathlib import Path

import pytest

from fsmirror.exceptions import ValidationError
from fsmirror.models import ScopeContext
from fsmirror.scope import (
    ACCOUNT_SCOPE_FOLDER,
    build_destination,
    destination_for,
    resolve_scope_folder,
)


class TestResolveScopeFolder:
    """Scope → folder mapping over the three levels."""

    @pytest.mark.unit
    def test_account_scope(self):
        assert resolve_scope_folder(ScopeContext(account="acc")) == "account"
        assert ACCOUNT_SCOPE_FOLDER == "account"

    @pytest.mark.unit
    def test_organization_scope(self):
        assert resolve_scope_folder(ScopeContext(account="acc", organization="org1")) == "org1"

    @pytest.mark.unit
    def test_project_scope(self):
        ctx = ScopeContext(account="acc", organization="org1", project="proj1")
        assert resolve_scope_folder(ctx) == "org1/proj1"

    @pytest.mark.unit
    def test_scope_folder_never_contains_root(self):
        for ctx in (
            ScopeContext(account="acc"),
            ScopeContext(account="acc", organization="org1"),
            ScopeContext(account="acc", organization="org1", project="proj1"),
        ):
            assert "filestore" not in resolve_scope_folder(ctx)


class TestBuildDestination:
    """Root + scope folder + remote path composition."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "folder, remote_path, expected",
        [
            ("account", "/manifests/app.yaml", "./filestore/account/manifests/app.yaml"),
            ("org1", "/manifests/app.yaml", "./filestore/org1/manifests/app.yaml"),
            ("org1/proj1", "/manifests/app.yaml", "./filestore/org1/proj1/manifests/app.yaml"),
            ("org1/project1", "/templates/pipeline.yaml", "./filestore/org1/project1/templates/pipeline.yaml"),
        ],
    )
    def test_scope_levels(self, folder, remote_path, expected):
        assert build_destination("./filestore", folder, remote_path) == Path(expected)

    @pytest.mark.unit
    def test_idempotent_and_single_root(self):
        first = build_destination("./filestore", "org1/proj1", "/configs/service.yaml")
        second = build_destination("./filestore", "org1/proj1", "/configs/service.yaml")

        assert first == second
        assert str(first) == str(second)
        assert first.parts.count("filestore") == 1
        assert "filestore/filestore" not in first.as_posix()

    @pytest.mark.unit
    def test_leading_slash_does_not_reanchor(self, tmp_path):
        dest = build_destination(tmp_path / "filestore", "account", "/etc/passwd.txt")
        assert dest == tmp_path / "filestore" / "account" / "etc" / "passwd.txt"

    @pytest.mark.unit
    def test_empty_segments_collapsed(self):
        dest = build_destination("filestore", "account", "//manifests//app.yaml")
        assert dest == Path("filestore/account/manifests/app.yaml")

    @pytest.mark.unit
    @pytest.mark.parametrize("remote_path", ["/../secrets.yaml", "/a/../../b.yaml", "/./a.yaml"])
    def test_relative_segments_rejected(self, remote_path):
        with pytest.raises(ValidationError):
            build_destination("filestore", "account", remote_path)

    @pytest.mark.unit
    def test_destination_for_uses_scope(self):
        ctx = ScopeContext(account="acc", organization="org1", project="proj1")
        assert destination_for("filestore", ctx, "/a.yaml") == Path("filestore/org1/proj1/a.yaml")

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "ctx",
        [
            ScopeContext(account="acc", organization="filestore"),
            ScopeContext(account="acc", organization="org1", project="filestore"),
        ],
    )
    def test_scope_named_like_root_rejected(self, ctx):
        with pytest.raises(ValidationError):
            destination_for("./filestore", ctx, "/m/app.yaml")

    @pytest.mark.unit
    def test_scope_named_like_root_allowed_under_other_root(self):
        ctx = ScopeContext(account="acc", organization="filestore")
        assert destination_for("mirror", ctx, "/m/app.yaml") == Path("mirror/filestore/m/app.yaml")

    @pytest.mark.unit
    def test_null_byte_rejected(self):
        with pytest.raises(ValidationError):
            build_destination("filestore", "account", "/bad\x00dir/a.yaml")
