from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Union

from .errors import UpdateError

Manifest = Mapping[str, Any]


class Action(str, Enum):
    UNKNOWN = "unknown"
    NONE = "none"
    UPDATE = "update"
    FAIL = "fail"


class ContentKind(str, Enum):
    MANIFEST = "manifest"
    ARTIFACT = "artifact"
    UNKNOWN = "unknown"


def to_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class LocalArtifact:
    path: Path

    @property
    def name(self) -> str:
        return self.path.stem

    @property
    def modified(self) -> datetime:
        return datetime.fromtimestamp(os.stat(self.path).st_mtime, tz=timezone.utc)


@dataclass(frozen=True)
class Redirect:
    target: str


@dataclass(frozen=True)
class Descriptor:
    target: str
    server_modified: datetime | None = None


ManifestEntry = Union[Redirect, Descriptor]


@dataclass(frozen=True)
class HeadResponse:
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    content_type: str | None = None
    last_modified: datetime | None = None


@dataclass(frozen=True)
class GetResponse:
    status: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)
    content_type: str | None = None
    last_modified: datetime | None = None


@dataclass(frozen=True)
class InstallResult:
    path: Path
    bytes_written: int
    mtime_applied: bool


@dataclass
class ResolutionState:
    """Mutable per-attempt state; never shared between archives."""

    location: str
    redirect_consumed: bool = False
    server_modified: datetime | None = None
    action: Action = Action.UNKNOWN
    error: UpdateError | None = None

    def finish(self, action: Action, error: UpdateError | None = None) -> None:
        if self.action is not Action.UNKNOWN:
            raise RuntimeError(f"action already decided: {self.action.value}")
        self.action = action
        self.error = error


@dataclass(frozen=True)
class UpdateOutcome:
    artifact: LocalArtifact
    initial_location: str
    action: Action
    location: str
    server_modified: datetime | None = None
    error: UpdateError | None = None
    changed: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.action in (Action.NONE, Action.UPDATE)

    @property
    def cause(self) -> str | None:
        return str(self.error) if self.error is not None else None
