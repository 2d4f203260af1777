"""Error taxonomy for archive update resolution."""

from __future__ import annotations


class UpdateError(RuntimeError):
    """Base class for failures that end one archive's resolution attempt."""

    def __init__(self, message: str, *, location: str | None = None) -> None:
        super().__init__(message)
        self.location = location


class TransportError(UpdateError):
    """Network-level failure: DNS, refused connection, timeout."""


class UnexpectedStatus(UpdateError):
    def __init__(self, status: int, *, location: str | None = None) -> None:
        target = f" from {location}" if location else ""
        super().__init__(f"unexpected server response {status}{target}", location=location)
        self.status = status


class ContentUnrecognized(UpdateError):
    pass


class ManifestParseError(UpdateError):
    pass


class NameNotFound(UpdateError):
    def __init__(self, name: str, *, location: str | None = None) -> None:
        target = f" at {location}" if location else ""
        super().__init__(f"'{name}' not present in manifest{target}", location=location)
        self.name = name


class MalformedEntry(UpdateError):
    pass


class RedirectLoopExceeded(UpdateError):
    pass


class IntegrityCheckFailed(UpdateError):
    pass


class InstallError(UpdateError):
    pass


class DiscoveryError(UpdateError):
    """An archive could not be inspected for its update location."""
