"""Result cache — bounded, time-expiring in-memory store keyed by fingerprint.

Eviction is FIFO by insertion order, not LRU: reading an entry never protects
it from eviction.
"""

import hashlib
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

import structlog

from compliance_engine.validators.models import AggregatedResult, ValidationConfig

logger = structlog.get_logger()


@dataclass(frozen=True)
class CacheEntry:
    value: AggregatedResult
    expires_at: float


class MemoryCache:
    """In-memory result cache with a size bound and per-entry TTL.

    Not synchronized: concurrent validations share it and the last write wins.
    """

    def __init__(
        self,
        max_size: int = 100,
        default_ttl: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Args:
            max_size: Maximum number of entries; 0 disables storage
            default_ttl: Entry lifetime in seconds when set() is given none
            clock: Monotonic time source in seconds
        """
        self.max_size = max_size
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    def get(self, key: str) -> Optional[AggregatedResult]:
        """Return the cached value, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() > entry.expires_at:
            # Lazy expiry
            del self._entries[key]
            logger.debug("cache_entry_expired", key=key)
            return None

        return entry.value

    def set(self, key: str, value: AggregatedResult, ttl: Optional[float] = None) -> None:
        """Store a value, evicting the oldest-inserted entry when full."""
        if self.max_size <= 0:
            return

        # Overwriting an existing key keeps its insertion position
        if key not in self._entries and len(self._entries) >= self.max_size:
            oldest_key, _ = self._entries.popitem(last=False)
            logger.debug("cache_entry_evicted", key=oldest_key, max_size=self.max_size)

        lifetime = self.default_ttl if ttl is None else ttl
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + lifetime)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        return len(self._entries)

    def keys(self) -> list[str]:
        """Keys in insertion order (oldest first)."""
        return list(self._entries.keys())


def _sha256(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def compute_fingerprint(
    code: str,
    file_path: str,
    validator_ids: Iterable[str],
    config: ValidationConfig,
) -> str:
    """Composite cache key for a content + validator set + config triple.

    Args:
        code: Source text being validated
        file_path: Path reported for the source text
        validator_ids: Active validator ids and plugin names (order-insensitive)
        config: Fully merged run configuration

    Returns:
        Hex SHA-256 over path, content hash, sorted validator set, and config hash
    """
    content_hash = _sha256(code)
    validator_set = ",".join(sorted(set(validator_ids)))
    config_hash = _sha256(config.model_dump_json())
    return _sha256("\x1f".join([file_path, content_hash, validator_set, config_hash]))
