"""Domain models: catalog entries, scopes, catalog batches and fetch results."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Final, List, Optional, Union

import yaml

from .exceptions import ConfigurationError, FileStoreError, ValidationError

log: Final = logging.getLogger(__name__)


class ScopeLevel(Enum):
    """The three levels of the remote hierarchy."""
    ACCOUNT = "account"
    ORGANIZATION = "organization"
    PROJECT = "project"


@dataclass(slots=True, frozen=True)
class ScopeContext:
    """Where an entry lives in the account → organization → project hierarchy."""

    account: str
    organization: str = ""
    project: str = ""

    def __post_init__(self) -> None:
        if not self.account.strip():
            raise ValidationError("Scope account cannot be empty", field_name="account")
        if self.project and not self.organization:
            raise ValidationError(
                f"Project '{self.project}' requires an organization",
                field_name="organization",
            )

    @property
    def level(self) -> ScopeLevel:
        if self.project:
            return ScopeLevel.PROJECT
        if self.organization:
            return ScopeLevel.ORGANIZATION
        return ScopeLevel.ACCOUNT

    def query_params(self) -> Dict[str, str]:
        """Scope identifiers as the remote API expects them in the query string."""
        params = {"accountIdentifier": self.account}
        if self.organization:
            params["orgIdentifier"] = self.organization
        if self.project:
            params["projectIdentifier"] = self.project
        return params

    def __str__(self) -> str:
        return "/".join(p for p in (self.account, self.organization, self.project) if p)


@dataclass(slots=True, frozen=True)
class CatalogEntry:
    """One file-or-folder node of the remote file store."""

    identifier: str
    name: str
    remote_path: str

    def __post_init__(self) -> None:
        if not self.identifier.strip():
            raise ValidationError("Catalog entry identifier cannot be empty", field_name="identifier")
        if not self.remote_path.startswith("/"):
            raise ValidationError(
                f"Remote path of '{self.identifier}' must start with '/': {self.remote_path!r}",
                field_name="path",
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CatalogEntry:
        """Build an entry from a catalog mapping (``identifier``, ``name``, ``path``)."""
        try:
            return cls(
                identifier=str(data["identifier"]),
                name=str(data.get("name", "")),
                remote_path=str(data.get("path", data.get("remote_path", ""))),
            )
        except KeyError as exc:
            raise ValidationError(f"Catalog entry missing key {exc}", field_name=str(exc)) from exc

    def to_dict(self) -> Dict[str, str]:
        return {"identifier": self.identifier, "name": self.name, "path": self.remote_path}


@dataclass(slots=True, frozen=True)
class CatalogBatch:
    """A group of catalog entries sharing one scope."""

    scope: ScopeContext
    entries: List[CatalogEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CatalogBatch:
        scope = ScopeContext(
            account=str(data.get("account") or ""),
            organization=str(data.get("organization") or ""),
            project=str(data.get("project") or ""),
        )
        raw_entries = data.get("entries") or []
        if not isinstance(raw_entries, list):
            raise ValidationError(f"Entries of scope '{scope}' must be a list", field_name="entries")
        return cls(scope=scope, entries=[CatalogEntry.from_dict(e) for e in raw_entries])

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"account": self.scope.account}
        if self.scope.organization:
            data["organization"] = self.scope.organization
        if self.scope.project:
            data["project"] = self.scope.project
        data["entries"] = [e.to_dict() for e in self.entries]
        return data

    @classmethod
    def load_all(cls, yaml_path: Path | str) -> List[CatalogBatch]:
        """🔄 Load all catalog batches from a YAML file.

        Args:
            yaml_path: Path to a YAML file with a top-level ``batches`` list.

        Returns:
            The batches in file order.

        Raises:
            ConfigurationError: The file is missing or is not a catalog.
            ValidationError: A batch or entry is invalid.
        """
        path = Path(yaml_path)
        if not path.exists():
            raise ConfigurationError(f"Catalog file not found: {path}", config_file=str(path))

        try:
            with path.open("r", encoding="utf-8") as fh:
                content = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {path}: {exc}", config_file=str(path)) from exc

        if not isinstance(content, dict) or not isinstance(content.get("batches", []), list):
            raise ConfigurationError(
                f"Catalog file {path} must contain a 'batches' list", config_file=str(path)
            )

        batches: List[CatalogBatch] = []
        for i, raw in enumerate(content.get("batches", [])):
            if not isinstance(raw, dict):
                raise ValidationError(f"Batch {i + 1} in {path} is not a mapping", field_name=f"batches[{i}]")
            try:
                batches.append(cls.from_dict(raw))
            except ValidationError as exc:
                raise ValidationError(
                    f"Batch {i + 1} validation failed: {exc.message}",
                    field_name=f"batches[{i}]",
                ) from exc

        log.info("📚 Loaded %d catalog batches (%d entries) from %s",
                 len(batches), sum(len(b.entries) for b in batches), path)
        return batches

    @staticmethod
    def dump_all(batches: List[CatalogBatch], yaml_path: Path | str) -> Path:
        """Write batches back out in the catalog format read by :meth:`load_all`."""
        path = Path(yaml_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            yaml.safe_dump({"batches": [b.to_dict() for b in batches]}, fh, sort_keys=False)
        return path


# ---------------------------------------------------------------- results
@dataclass(slots=True, frozen=True)
class Downloaded:
    """The entry's content was written to ``destination``."""
    entry: CatalogEntry
    destination: Path
    bytes_written: int


@dataclass(slots=True, frozen=True)
class Skipped:
    """The entry is not a file (folder or placeholder node)."""
    entry: CatalogEntry
    reason: str
    destination: Optional[Path] = None


@dataclass(slots=True, frozen=True)
class Failed:
    """Fetching or writing the entry failed with a classified error."""
    entry: CatalogEntry
    error: FileStoreError
    destination: Optional[Path] = None

    @property
    def kind(self):
        return self.error.kind


FetchResult = Union[Downloaded, Skipped, Failed]
