"""Structured JSON logging and run ID context.

Records emitted by the lookups carry the site as ``extra`` fields
(latitude, longitude, site_kind, release_class); the JSON formatter
copies them into the log entry so a failed lookup can be traced to a
site without parsing the message.
"""

from __future__ import annotations

import json
import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

from sitefin.config import settings

run_id_var: ContextVar[str] = ContextVar("run_id", default="")

# Site context attached by sitefin.emissions via ``extra=``.
SITE_FIELDS: tuple[str, ...] = ("latitude", "longitude", "site_kind", "release_class")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, tagged with the current run ID."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        rid = run_id_var.get()
        if rid:
            log_entry["run_id"] = rid

        log_entry.update(
            (key, getattr(record, key))
            for key in SITE_FIELDS
            if getattr(record, key, None) is not None
        )

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


@contextmanager
def run_context(run_id: str | None = None) -> Iterator[str]:
    """Tag every log record emitted inside the block with a run ID."""
    rid = run_id or str(uuid.uuid4())[:8]
    token = run_id_var.set(rid)
    try:
        yield rid
    finally:
        run_id_var.reset(token)


def setup_logging(json_format: bool | None = None, level: str | None = None) -> None:
    """Configure root logger. Unset arguments fall back to :data:`settings`."""
    if json_format is None:
        json_format = settings.log_json
    if level is None:
        level = settings.log_level

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()
    root.addHandler(handler)

    # Quiet noisy libraries
    logging.getLogger("h5py").setLevel(logging.WARNING)
    logging.getLogger("pyproj").setLevel(logging.WARNING)
