"""
On-disk cache of summary replies.

Re-indexing a tree whose files did not change sends byte-identical
requests, so replies are kept on disk keyed by a SHA-256 of the
canonical JSON of (model, messages). One JSON file per entry; an entry
expires ttl_hours after it was written (file mtime).

Cache problems are logged and treated as misses. They never fail a run.
"""

import hashlib
import json
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

if TYPE_CHECKING:
    from .adapter import LLMResponse

logger = structlog.get_logger()

# Hex digits of the SHA-256 kept in entry file names
KEY_LENGTH = 24


class LocalLLMCache:
    """Reply cache stored as ``<dir>/<key>.json`` files."""

    def __init__(self, cache_dir: Path, ttl_hours: int = 24) -> None:
        self._dir = Path(cache_dir).expanduser().resolve()
        self._ttl_seconds = ttl_hours * 3600
        self._log = logger.bind(component="llm_cache")
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._log.warning("llm_cache.unavailable", path=str(self._dir), error=str(e))

    @property
    def directory(self) -> Path:
        return self._dir

    def get(self, model: str, messages: list[dict[str, Any]]) -> "LLMResponse | None":
        """The cached reply for this request, or None if missing or expired."""
        from .adapter import LLMResponse

        entry = self._cache_path(model, messages)
        try:
            if self._is_expired(entry, time.time()):
                return None
            response = LLMResponse.model_validate_json(entry.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValidationError) as e:
            self._log.warning("llm_cache.unreadable", file=entry.name, error=str(e))
            return None

        self._log.debug("llm_cache.hit", file=entry.name)
        return response

    def set(self, model: str, messages: list[dict[str, Any]], response: "LLMResponse") -> None:
        entry = self._cache_path(model, messages)
        try:
            entry.write_text(response.model_dump_json(), encoding="utf-8")
        except OSError as e:
            self._log.warning("llm_cache.write_failed", file=entry.name, error=str(e))

    def clear(self) -> int:
        """Delete every entry. Returns how many were deleted."""
        deleted = 0
        for entry in self._entries():
            try:
                entry.unlink()
            except OSError as e:
                self._log.warning("llm_cache.unlink_failed", file=entry.name, error=str(e))
            else:
                deleted += 1
        self._log.info("llm_cache.cleared", count=deleted)
        return deleted

    def stats(self) -> dict[str, Any]:
        entries = self._entries()
        now = time.time()
        expired = size = 0
        for entry in entries:
            try:
                info = entry.stat()
            except OSError:
                continue
            size += info.st_size
            if now - info.st_mtime > self._ttl_seconds:
                expired += 1
        return {
            "entries": len(entries),
            "expired": expired,
            "total_size_bytes": size,
            "dir": str(self._dir),
        }

    def _entries(self) -> list[Path]:
        try:
            return sorted(self._dir.glob("*.json"))
        except OSError:
            return []

    def _is_expired(self, entry: Path, now: float) -> bool:
        age = now - entry.stat().st_mtime
        if age > self._ttl_seconds:
            self._log.debug("llm_cache.expired", file=entry.name, age_hours=round(age / 3600, 1))
            return True
        return False

    def _cache_path(self, model: str, messages: list[dict[str, Any]]) -> Path:
        return self._dir / f"{self._make_key(model, messages)}.json"

    def _make_key(self, model: str, messages: list[dict[str, Any]]) -> str:
        canonical = json.dumps(
            {"model": model, "messages": messages},
            sort_keys=True,
            ensure_ascii=False,
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:KEY_LENGTH]
