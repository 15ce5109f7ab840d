"""Unit tests for fsmirror.classify module."""
import pytest

from fsmirror.classify import EntryKind, classify_entry, has_extension
from fsmirror.models import CatalogEntry


def _entry(name: str) -> CatalogEntry:
    return CatalogEntry(identifier=f"id-{name or 'blank'}", name=name, remote_path=f"/{name or 'blank'}")


class TestClassifyEntry:

    @pytest.mark.unit
    def test_folder_is_skipped(self):
        assert classify_entry(_entry("folder")) is EntryKind.SKIP

    @pytest.mark.unit
    def test_file_is_downloadable(self):
        assert classify_entry(_entry("file.yaml")) is EntryKind.DOWNLOADABLE

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("archive.tar.gz", True),
            (".gitignore", True),
            ("notes.", False),
            ("", False),
            ("Makefile", False),
            ("dir.d/readme", False),
            ("dir/readme.md", True),
        ],
    )
    def test_extension_rule(self, name, expected):
        assert has_extension(name) is expected
