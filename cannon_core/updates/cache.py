from __future__ import annotations

import threading

from .models import Manifest


class ManifestCache:
    """Parsed manifests keyed by the exact location they were fetched from.

    Lives for one run: no eviction and no expiry. Concurrent fetches of the same
    location are not coalesced.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Manifest] = {}
        self._lock = threading.Lock()

    def get(self, location: str) -> Manifest | None:
        with self._lock:
            return self._entries.get(location)

    def put(self, location: str, manifest: Manifest) -> None:
        with self._lock:
            self._entries[location] = manifest

    def __contains__(self, location: object) -> bool:
        with self._lock:
            return location in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
