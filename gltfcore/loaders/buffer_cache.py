# gltfcore/loaders/buffer_cache.py
"""Per-loader byte cache keyed by URI text."""

from __future__ import annotations

import threading
from typing import Callable, Dict

from gltfcore import log


class BufferCache:
    """
    Memoizes fetched bytes. Entries are never replaced or evicted.

    get_or_fetch() runs at most one fetch per key, even with concurrent
    callers: a fetch runs under that key's lock and later callers see its
    stored result. A fetch that raises stores nothing.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._key_locks: Dict[str, threading.Lock] = {}
        self._entries: Dict[str, bytes] = {}

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._entries.get(key)

    def get_or_fetch(self, key: str, fetch: Callable[[], bytes]) -> bytes:
        with self._lock:
            data = self._entries.get(key)
            if data is not None:
                return data
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            with self._lock:
                data = self._entries.get(key)
            if data is not None:
                log.debug(f"[BufferCache] Hit after wait: {key[:64]}")
                return data

            data = bytes(fetch())
            with self._lock:
                self._entries[key] = data
            return data
