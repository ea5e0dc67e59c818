"""Documentation context — docs root, content cache, version stamp.

One DocsContext is created per server. Everything in it is resolved lazily
and computed at most once: tools run in worker threads, so first-time
initialisation is guarded by a lock (checked again inside the lock).
Cached content is never invalidated; the docs ship with the package.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from xanodev import paths
from xanodev.errors import DocFileMissing, DocsNotFound

logger = logging.getLogger("xanodev.context")

UNKNOWN_VERSION = "unknown"


class DocsContext:
    """Resolved documentation root plus read caches."""

    def __init__(self, override: str | Path | None = None, candidates: list[Path] | None = None):
        self._candidates = candidates if candidates is not None else paths.docs_candidates(override)
        self._lock = threading.RLock()
        self._root: Path | None = None
        self._version: str | None = None
        self._content: dict[str, str] = {}

    @property
    def docs_root(self) -> Path:
        """First candidate holding version.json, else the first existing directory.

        Raises DocsNotFound when no candidate directory exists at all.
        """
        if self._root is None:
            with self._lock:
                if self._root is None:
                    self._root = self._resolve_root()
        return self._root

    def _resolve_root(self) -> Path:
        for candidate in self._candidates:
            if paths.is_docs_root(candidate):
                logger.info("Docs root resolved to %s", candidate)
                return candidate
        existing = [c for c in self._candidates if c.is_dir()]
        if not existing:
            raise DocsNotFound([str(c) for c in self._candidates])
        fallback = existing[0]
        logger.warning(
            "No docs root with %s among %s, falling back to %s",
            paths.VERSION_FILE,
            [str(c) for c in self._candidates],
            fallback,
        )
        return fallback

    def read(self, reference: str, topic: str = "") -> str:
        """Return the content of a backing file (cached).

        Raises DocFileMissing if the file does not exist; failures are not cached.
        """
        cached = self._content.get(reference)
        if cached is not None:
            return cached
        path = self.docs_root / reference
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise DocFileMissing(topic or reference, reference) from e
        with self._lock:
            self._content.setdefault(reference, text)
        return text

    def size(self, reference: str) -> int:
        """Size in bytes of a backing file, 0 if missing."""
        try:
            return (self.docs_root / reference).stat().st_size
        except OSError:
            return 0

    @property
    def version(self) -> str:
        """Docs version from version.json, or "unknown" on any failure."""
        if self._version is None:
            with self._lock:
                if self._version is None:
                    self._version = self._read_version()
        return self._version

    def _read_version(self) -> str:
        path = self.docs_root / paths.VERSION_FILE
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Could not read docs version from %s: %s", path, e)
            return UNKNOWN_VERSION
        if not isinstance(data, dict) or not data.get("version"):
            return UNKNOWN_VERSION
        return str(data["version"])
