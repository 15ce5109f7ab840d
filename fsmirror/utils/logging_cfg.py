# fsmirror/utils/logging_cfg.py
from __future__ import annotations

import logging
import logging.config
from datetime import datetime
from pathlib import Path
from typing import Final

# ---------------------------------------------------------------------------

LOG_DIR: Final = Path("logs")


def configure_logging(level_on_console: str = "INFO", log_dir: Path | str = LOG_DIR) -> Path:
    """Initialise two log files + console summary output."""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    today = datetime.now().strftime("%Y%m%d")

    summary_file = log_dir / f"fsmirror-{today}.log"
    debug_file = log_dir / f"fsmirror-{today}-debug.log"

    cfg: dict = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "summary": {
                "format": "%(asctime)s  %(levelname)-7s  %(message)s",
                "datefmt": "%H:%M:%S",
            },
            "debug": {
                "format": (
                    "%(asctime)s  %(levelname)-7s  "
                    "[%(name)s:%(lineno)d]  %(threadName)s  %(message)s"
                ),
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level_on_console.upper(),
                "formatter": "summary",
            },
            "summary_file": {
                "class": "logging.FileHandler",
                "level": "INFO",
                "filename": str(summary_file),
                "encoding": "utf-8",
                "formatter": "summary",
            },
            "debug_file": {
                "class": "logging.FileHandler",
                "level": "DEBUG",
                "filename": str(debug_file),
                "encoding": "utf-8",
                "formatter": "debug",
            },
        },
        "loggers": {
            "summary": {
                "level": "INFO",
                "handlers": ["console", "summary_file"],
                "propagate": False,
            },
            "fsmirror.handlers": {
                "level": "DEBUG",
                "handlers": ["console", "summary_file", "debug_file"],
                "propagate": False,
            },
            "fsmirror.utils.io": {
                "level": "DEBUG",
                "handlers": ["debug_file"],
                "propagate": False,
            },
            "fsmirror": {
                "level": "INFO",
                "handlers": ["console", "summary_file", "debug_file"],
                "propagate": False,
            },
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console", "debug_file"],
        },
    }
    logging.config.dictConfig(cfg)
    logging.getLogger("summary").info("🟢 Logging initialised → %s", log_dir)
    return log_dir
