from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Final

log: Final = logging.getLogger(__name__)

DIR_MODE: Final[int] = 0o755
FILE_MODE: Final[int] = 0o644


def _format_bytes(bytes_val: int) -> str:
    """🔄 Format bytes to human-readable string."""
    val: float = float(bytes_val)
    for unit in ["B", "KB", "MB", "GB"]:
        if val < 1024.0:
            return f"{val:.1f} {unit}"
        val /= 1024.0
    return f"{val:.1f} TB"


def ensure_parent(dest: Path) -> Path:
    """Create every ancestor directory of ``dest``; existing ones are fine."""
    dest.parent.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
    return dest.parent


def atomic_write_bytes(dest: Path, data: bytes) -> int:
    """Replace ``dest`` with ``data`` via temp file + rename.

    Readers see either the previous file or the complete new one. The temp
    file is removed when anything fails.
    """
    ensure_parent(dest)
    fd, temp_path = tempfile.mkstemp(dir=dest.parent, prefix=f".{dest.name}.", suffix=".part")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.chmod(temp_path, FILE_MODE)
        os.replace(temp_path, dest)
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise

    log.debug("💾 %s (%s)", dest, _format_bytes(len(data)))
    return len(data)
