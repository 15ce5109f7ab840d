"""Shared fixtures for fsmirror tests."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional
from unittest.mock import Mock

import pytest

from fsmirror.models import CatalogEntry, ScopeContext
from fsmirror.utils.http_session import FileStoreClient

BASE_URL = "https://filestore.test/gateway"


def make_response(
    status_code: int = 200,
    body: bytes = b"",
    reason: str = "OK",
    headers: Optional[Dict[str, str]] = None,
    chunks: Optional[Iterable[bytes]] = None,
) -> Mock:
    """Mock of a streamed ``requests.Response``."""
    resp = Mock()
    resp.status_code = status_code
    resp.reason = reason
    resp.headers = headers or {"Content-Type": "application/octet-stream"}
    resp.iter_content.return_value = list(chunks) if chunks is not None else [body]
    return resp


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo ``configure_logging`` so later tests still reach caplog."""
    names = ["summary", "fsmirror", "fsmirror.handlers", "fsmirror.utils.io"]
    root = logging.getLogger()
    saved_root = (root.level, list(root.handlers))
    saved = {n: (logging.getLogger(n).propagate, logging.getLogger(n).level) for n in names}
    yield
    for name, (propagate, level) in saved.items():
        lg = logging.getLogger(name)
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()
        lg.propagate = propagate
        lg.setLevel(level)
    root.setLevel(saved_root[0])
    for handler in list(root.handlers):
        if handler not in saved_root[1] and type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Temporary directory for tests that write files."""
    return tmp_path


@pytest.fixture
def mock_session() -> Mock:
    session = Mock()
    session.get.return_value = make_response(body=b"test file content")
    return session


@pytest.fixture
def client(mock_session: Mock) -> FileStoreClient:
    return FileStoreClient(BASE_URL, "test-api-key", session=mock_session)


@pytest.fixture
def account_scope() -> ScopeContext:
    return ScopeContext(account="test-account")


@pytest.fixture
def org_scope() -> ScopeContext:
    return ScopeContext(account="test-account", organization="test-org")


@pytest.fixture
def project_scope() -> ScopeContext:
    return ScopeContext(account="test-account", organization="test-org", project="test-project")


@pytest.fixture
def yaml_entry() -> CatalogEntry:
    return CatalogEntry(identifier="test-file-1", name="test-file.yaml", remote_path="/manifests/test-file.yaml")
