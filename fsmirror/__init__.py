"""Mirror a scoped remote file store onto the local filesystem – expose a single convenience *run()* function."""

from pathlib import Path
from typing import Any, Optional

from .config import load_config
from .pipeline import Pipeline, process_entry
from .utils.run_summary import Summary


def run(catalog: str | Path = "catalog.yaml", config: Optional[str | Path] = None, **kwargs: Any) -> Summary:
    """Run the whole pipeline (mainly for notebooks / interactive use)."""
    cfg = load_config(Path(config) if config else None)
    return Pipeline(Path(catalog), config=cfg, **kwargs).run()


__all__ = ["run", "Pipeline", "process_entry", "Summary"]
