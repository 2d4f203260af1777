"""Update resolution protocol for one local archive.

The resolver walks a single explicit loop:

1. probe the current location with a conditional HEAD,
2. GET the body and classify it as a manifest or an archive,
3. look the archive name up in the manifest and follow at most one hop,
4. compare a descriptor's ``last_modified`` directly against the local file,
5. install the downloaded archive and stamp the server time on it.

Every failure is reported on the returned :class:`UpdateOutcome`; nothing is
raised to the caller.
"""

from __future__ import annotations

import logging
from datetime import datetime

from .cache import ManifestCache
from .classifier import SNIFF_LENGTH, classify, verify_archive
from .errors import ContentUnrecognized, RedirectLoopExceeded, UnexpectedStatus, UpdateError
from .installer import ArtifactInstaller
from .manifest import lookup, parse_manifest
from .models import (
    Action,
    ContentKind,
    GetResponse,
    LocalArtifact,
    Manifest,
    Redirect,
    ResolutionState,
    UpdateOutcome,
)
from .transport import Transport

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_NOT_MODIFIED = 304


class UpdateResolver:
    def __init__(
        self,
        transport: Transport,
        cache: ManifestCache | None = None,
        installer: ArtifactInstaller | None = None,
    ) -> None:
        self.transport = transport
        self.cache = cache if cache is not None else ManifestCache()
        self.installer = installer or ArtifactInstaller()

    def resolve(self, artifact: LocalArtifact, location: str) -> UpdateOutcome:
        state = ResolutionState(location=location)
        changed = False
        try:
            try:
                local_modified = artifact.modified
            except OSError as exc:
                raise UpdateError(f"unable to read {artifact.path}: {exc}") from exc
            changed = self._run(artifact, state, local_modified)
        except UpdateError as exc:
            logger.warning("update of %s failed: %s", artifact.path.name, exc)
            state.finish(Action.FAIL, exc)

        logger.info("status of %s is %s", artifact.path.name, state.action.value)
        return UpdateOutcome(
            artifact=artifact,
            initial_location=location,
            action=state.action,
            location=state.location,
            server_modified=state.server_modified,
            error=state.error,
            changed=changed,
        )

    def _run(self, artifact: LocalArtifact, state: ResolutionState, local_modified: datetime) -> bool:
        while True:
            manifest = self.cache.get(state.location)
            if manifest is not None:
                logger.debug("using cached manifest for %s", state.location)
            else:
                if not self._probe(state, local_modified):
                    return False
                response = self._fetch(state)
                kind = classify(response.content_type, response.body[:SNIFF_LENGTH])
                if kind is ContentKind.ARTIFACT:
                    verify_archive(response.body, location=state.location)
                    if state.server_modified is None:
                        logger.info(
                            "%s has no Last-Modified; installing without a time comparison",
                            state.location,
                        )
                    return self._install(artifact, state, response)
                if kind is ContentKind.UNKNOWN:
                    raise ContentUnrecognized(
                        f"no recognizable content kind (type={response.content_type!r}, "
                        f"leading bytes={response.body[:SNIFF_LENGTH]!r})",
                        location=state.location,
                    )
                manifest = self._load_manifest(state.location, response.body)

            entry = lookup(manifest, artifact.name, location=state.location)
            if isinstance(entry, Redirect):
                logger.info("manifest redirects %s to %s", artifact.name, entry.target)
                self._hop(state, entry.target)
                continue

            if entry.server_modified is None:
                logger.info("manifest points %s to %s without last_modified", artifact.name, entry.target)
                self._hop(state, entry.target)
                continue

            state.location = entry.target
            state.server_modified = entry.server_modified
            if entry.server_modified <= local_modified:
                logger.info(
                    "manifest reports last_modified %s, not newer than %s",
                    entry.server_modified.isoformat(),
                    local_modified.isoformat(),
                )
                state.finish(Action.NONE)
                return False
            logger.info(
                "manifest reports last_modified %s, newer than %s",
                entry.server_modified.isoformat(),
                local_modified.isoformat(),
            )
            return self._install(artifact, state, self._fetch(state))

    def _probe(self, state: ResolutionState, local_modified: datetime) -> bool:
        """Run the conditional HEAD; return False once the action is decided."""
        response = self.transport.head(state.location, local_modified)
        if response.status == HTTP_NOT_MODIFIED:
            logger.info("%s replied 304 Not Modified", state.location)
            state.finish(Action.NONE)
            return False
        if response.status != HTTP_OK:
            raise UnexpectedStatus(response.status, location=state.location)
        if response.last_modified is not None:
            if response.last_modified <= local_modified:
                logger.info(
                    "Last-Modified %s is not newer than %s; no action required",
                    response.last_modified.isoformat(),
                    local_modified.isoformat(),
                )
                state.finish(Action.NONE)
                return False
            state.server_modified = response.last_modified
        return True

    def _fetch(self, state: ResolutionState) -> GetResponse:
        response = self.transport.get(state.location)
        if response.status != HTTP_OK:
            raise UnexpectedStatus(response.status, location=state.location)
        return response

    def _load_manifest(self, location: str, body: bytes) -> Manifest:
        manifest = parse_manifest(body, location=location)
        self.cache.put(location, manifest)
        return manifest

    @staticmethod
    def _hop(state: ResolutionState, target: str) -> None:
        if state.redirect_consumed:
            raise RedirectLoopExceeded(
                f"manifest redirected more than once (next hop {target})", location=state.location
            )
        state.redirect_consumed = True
        state.location = target

    def _install(self, artifact: LocalArtifact, state: ResolutionState, response: GetResponse) -> bool:
        if state.server_modified is None:
            state.server_modified = response.last_modified
        self.installer.install(artifact.path, response.body, state.server_modified)
        state.finish(Action.UPDATE)
        return True
