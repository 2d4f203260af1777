"""Locate local archives and the update location embedded in each one."""

from __future__ import annotations

import json
import logging
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterator

from cannon_core.updates.errors import DiscoveryError
from cannon_core.updates.models import LocalArtifact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveredArchive:
    artifact: LocalArtifact
    location: str | None = None
    error: DiscoveryError | None = None

    @property
    def skipped(self) -> bool:
        return self.location is None and self.error is None


def read_update_location(path: Path, *, metadata_entry: str, metadata_key: str) -> str | None:
    """Return the update location declared inside the archive at ``path``.

    ``None`` means the archive carries no usable metadata and is left alone.
    """
    try:
        with zipfile.ZipFile(path) as archive:
            member = next(
                (info for info in archive.infolist() if PurePosixPath(info.filename).name == metadata_entry),
                None,
            )
            if member is None:
                return None
            raw = archive.read(member)
    except (zipfile.BadZipFile, zlib.error, EOFError, OSError, RuntimeError, NotImplementedError) as exc:
        raise DiscoveryError(f"unable to open {path.name} as an archive: {exc}") from exc

    try:
        payload = json.loads(raw.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DiscoveryError(f"{metadata_entry} in {path.name} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        return None
    value = payload.get(metadata_key)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def discover_archives(
    directory: Path,
    *,
    pattern: str = "*.smod",
    metadata_entry: str = "manifest.json",
    metadata_key: str = "steve_cannon",
) -> Iterator[DiscoveredArchive]:
    for path in sorted(item for item in directory.glob(pattern) if item.is_file()):
        artifact = LocalArtifact(path=path)
        logger.debug("checking %s for an update location", path.name)
        try:
            location = read_update_location(path, metadata_entry=metadata_entry, metadata_key=metadata_key)
        except DiscoveryError as exc:
            logger.warning("%s", exc)
            yield DiscoveredArchive(artifact=artifact, error=exc)
            continue
        if location is None:
            logger.debug("%s declares no update location; skipping", path.name)
        yield DiscoveredArchive(artifact=artifact, location=location)
