"""🛤️ Scope-aware destination paths.

The scope folder never contains the storage root; the root is applied
exactly once by :func:`build_destination`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Final, List

from .exceptions import ValidationError
from .models import ScopeContext

ACCOUNT_SCOPE_FOLDER: Final[str] = "account"


def resolve_scope_folder(ctx: ScopeContext) -> str:
    """📂 Map a scope to the folder its entries live under, relative to the root."""
    if ctx.project:
        return f"{ctx.organization}/{ctx.project}"
    if ctx.organization:
        return ctx.organization
    return ACCOUNT_SCOPE_FOLDER


def _segments(path: str) -> List[str]:
    parts = [p for p in path.split("/") if p]
    for part in parts:
        if part in (".", ".."):
            raise ValidationError(f"Relative segment '{part}' not allowed in {path!r}", field_name="path")
        if "\x00" in part:
            raise ValidationError(f"Null byte not allowed in {path!r}", field_name="path")
    return parts


def build_destination(root_dir: Path | str, scope_folder: str, remote_path: str) -> Path:
    """Compose ``root_dir / scope_folder / remote_path`` as one ordered join.

    ``remote_path`` is relative to the scope root and starts with ``/``; its
    leading slash is dropped so it can never re-anchor the path. A scope
    folder naming the root itself is rejected so ``root/root`` cannot occur.
    """
    root = Path(root_dir)
    scope_parts = _segments(scope_folder)
    if root.name and root.name in scope_parts:
        raise ValidationError(
            f"Scope folder {scope_folder!r} repeats the storage root '{root.name}'",
            field_name="scope",
        )
    return root.joinpath(*scope_parts, *_segments(remote_path))


def destination_for(root_dir: Path | str, ctx: ScopeContext, remote_path: str) -> Path:
    return build_destination(root_dir, resolve_scope_folder(ctx), remote_path)
