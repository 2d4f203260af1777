from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any
from urllib.parse import urlsplit

from .errors import MalformedEntry, ManifestParseError, NameNotFound
from .models import Descriptor, Manifest, ManifestEntry, Redirect, to_utc

logger = logging.getLogger(__name__)


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _require_absolute(name: str, target: str, location: str | None) -> str:
    parts = urlsplit(target.strip())
    if not parts.scheme or not parts.netloc:
        raise MalformedEntry(f"'{name}' points to {target!r}, which is not an absolute URI", location=location)
    return target.strip()


def parse_manifest(body: bytes, *, location: str | None = None) -> Manifest:
    try:
        payload = json.loads(body.decode("utf-8-sig"))
    except UnicodeDecodeError as exc:
        raise ManifestParseError(f"manifest is not valid UTF-8: {exc}", location=location) from exc
    except json.JSONDecodeError as exc:
        raise ManifestParseError(f"could not parse manifest JSON: {exc}", location=location) from exc
    if not isinstance(payload, dict):
        raise ManifestParseError(
            f"manifest must be a JSON object, got {_json_type(payload)}", location=location
        )
    return payload


def parse_last_modified(value: Any, *, location: str | None = None) -> datetime:
    """Interpret a manifest ``last_modified`` value as an aware UTC datetime.

    Accepts a datetime, an ISO 8601 or HTTP-date string, or integer Unix seconds.
    """
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, bool):
        raise MalformedEntry(
            "expected last_modified to be a string or an integer but got boolean",
            location=location,
        )
    if isinstance(value, int):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise MalformedEntry(f"last_modified {value} is out of range", location=location) from exc
    if isinstance(value, str):
        text = value.strip()
        try:
            return to_utc(datetime.fromisoformat(text))
        except ValueError:
            pass
        try:
            return to_utc(parsedate_to_datetime(text))
        except (TypeError, ValueError, IndexError):
            pass
        raise MalformedEntry(f"unable to parse date string provided ({value})", location=location)
    raise MalformedEntry(
        f"expected last_modified to be a string or an integer but got {_json_type(value)}",
        location=location,
    )


def lookup(manifest: Manifest, name: str, *, location: str | None = None) -> ManifestEntry:
    if name not in manifest:
        raise NameNotFound(name, location=location)
    value = manifest[name]

    if isinstance(value, str):
        return Redirect(target=_require_absolute(name, value, location))

    if isinstance(value, dict):
        uri = value.get("uri")
        if uri is None:
            raise MalformedEntry(f"'{name}' exists in manifest but uri is not defined", location=location)
        if not isinstance(uri, str):
            raise MalformedEntry(
                f"'{name}' specifies uri as {_json_type(uri)}; expected string", location=location
            )
        modified = None
        if "last_modified" in value:
            modified = parse_last_modified(value["last_modified"], location=location)
        logger.debug("manifest entry name=%s uri=%s last_modified=%s", name, uri, modified)
        return Descriptor(target=_require_absolute(name, uri, location), server_modified=modified)

    raise MalformedEntry(
        f"manifest contained {_json_type(value)} for '{name}'; expected object or string",
        location=location,
    )
