"""Payload classification for update endpoints.

Servers are inconsistent about the ``Content-Type`` they attach to manifests
and archives, so the declared type is only trusted when it clearly names JSON
or plain text. Everything else is decided from the leading bytes.
"""

from __future__ import annotations

import io
import struct
import zipfile

from .errors import IntegrityCheckFailed
from .models import ContentKind

ZIP_LOCAL_HEADER = 0x04034B50
SNIFF_LENGTH = 4
_MANIFEST_TYPES = ("application/json",)


def _media_type(content_type: str | None) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def classify(content_type: str | None, first_bytes: bytes) -> ContentKind:
    """Classify a response as a manifest, an artifact or neither."""
    declared = (content_type or "").strip().lower()
    if _media_type(declared) in _MANIFEST_TYPES or declared.startswith("text/plain"):
        return ContentKind.MANIFEST

    head = bytes(first_bytes[:SNIFF_LENGTH])
    if len(head) == SNIFF_LENGTH and struct.unpack("<I", head)[0] == ZIP_LOCAL_HEADER:
        return ContentKind.ARTIFACT
    if head[:1] == b"{":
        return ContentKind.MANIFEST
    return ContentKind.UNKNOWN


def verify_archive(body: bytes, *, location: str | None = None) -> int:
    """Open ``body`` as a zip archive and return its entry count."""
    try:
        with zipfile.ZipFile(io.BytesIO(body)) as archive:
            return len(archive.infolist())
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError, EOFError) as exc:
        raise IntegrityCheckFailed(
            f"server likely replied with a zip archive but it failed to open: {exc}",
            location=location,
        ) from exc
