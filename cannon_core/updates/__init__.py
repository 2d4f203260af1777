from .cache import ManifestCache
from .classifier import classify, verify_archive
from .engine import UpdateResolver
from .errors import (
    ContentUnrecognized,
    DiscoveryError,
    InstallError,
    IntegrityCheckFailed,
    MalformedEntry,
    ManifestParseError,
    NameNotFound,
    RedirectLoopExceeded,
    TransportError,
    UnexpectedStatus,
    UpdateError,
)
from .installer import ArtifactInstaller
from .manifest import lookup, parse_last_modified, parse_manifest
from .models import (
    Action,
    ContentKind,
    Descriptor,
    GetResponse,
    HeadResponse,
    InstallResult,
    LocalArtifact,
    Redirect,
    ResolutionState,
    UpdateOutcome,
)
from .transport import HttpTransport, Transport, TransportConfig

__all__ = [
    "Action",
    "ArtifactInstaller",
    "ContentKind",
    "ContentUnrecognized",
    "Descriptor",
    "DiscoveryError",
    "GetResponse",
    "HeadResponse",
    "HttpTransport",
    "InstallError",
    "InstallResult",
    "IntegrityCheckFailed",
    "LocalArtifact",
    "MalformedEntry",
    "ManifestCache",
    "ManifestParseError",
    "NameNotFound",
    "Redirect",
    "RedirectLoopExceeded",
    "ResolutionState",
    "Transport",
    "TransportConfig",
    "TransportError",
    "UnexpectedStatus",
    "UpdateError",
    "UpdateOutcome",
    "UpdateResolver",
    "classify",
    "lookup",
    "parse_last_modified",
    "parse_manifest",
    "verify_archive",
]
