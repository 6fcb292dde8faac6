"""Durable key/value stores backing the tiered cache.

A CacheStore persists one JSON document per namespace. Both operations are
best-effort: absence (first run) and corruption (malformed JSON) load as None,
and callers treat save failures as non-fatal.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class CacheStore(Protocol):
    """Protocol for durable snapshot stores.

    Implementations may be synchronous or return awaitables from either
    method; the cache handles both.
    """

    def load(self, namespace: str) -> Any:
        """Return the stored document for ``namespace`` or None."""
        ...

    def save(self, namespace: str, data: Any) -> Any:
        """Replace the stored document for ``namespace``."""
        ...


class InMemoryStore:
    """Process-local store that keeps serialized JSON text per namespace.

    Serializing on save means loads never alias what was saved, the same as a
    real browser or file store.
    """

    def __init__(self) -> None:
        self.raw: dict[str, str] = {}

    def load(self, namespace: str) -> Any:
        text = self.raw.get(namespace)
        if text is None:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.warning("cache_store_corrupt", extra={"namespace": namespace})
            return None

    def save(self, namespace: str, data: Any) -> None:
        self.raw[namespace] = json.dumps(data)


class JSONFileStore:
    """Stores each namespace as ``<directory>/<namespace>.json``."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory)

    def path_for(self, namespace: str) -> Path:
        safe = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in namespace)
        return self.directory / f"{safe}.json"

    def load(self, namespace: str) -> Any:
        path = self.path_for(namespace)
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(
                "cache_store_corrupt",
                extra={"namespace": namespace, "path": str(path), "error_message": str(e)},
            )
            return None

    def save(self, namespace: str, data: Any) -> None:
        path = self.path_for(namespace)
        path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling temp file then swap, so readers never see half a file
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
