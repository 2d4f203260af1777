"""Atomic replacement of a local archive with downloaded bytes."""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from .errors import InstallError
from .models import InstallResult, to_utc

logger = logging.getLogger(__name__)


class ArtifactInstaller:
    def install(self, path: Path, body: bytes, modified: datetime | None = None) -> InstallResult:
        """Replace ``path`` with ``body`` in full, then stamp ``modified`` as its mtime.

        The bytes go to a temporary file in the same directory which is renamed
        over the destination, so a failed write leaves the old archive intact.
        """
        path = Path(path)
        directory = path.parent
        try:
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{path.name}.", suffix=".part")
        except OSError as exc:
            raise InstallError(f"unable to stage {path.name}: {exc}") from exc

        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(body)
                handle.flush()
                os.fsync(handle.fileno())
            _copy_mode(path, Path(tmp_name))
            os.replace(tmp_name, path)
        except OSError as exc:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise InstallError(f"unable to write {path.name}: {exc}") from exc

        logger.info("wrote %s bytes to %s", len(body), path)
        return InstallResult(path=path, bytes_written=len(body), mtime_applied=self._stamp(path, modified))

    @staticmethod
    def _stamp(path: Path, modified: datetime | None) -> bool:
        if modified is None:
            logger.warning(
                "no server modification time for %s; the local write time is kept and the next check may be approximate",
                path.name,
            )
            return False
        timestamp = to_utc(modified).timestamp()
        try:
            os.utime(path, (timestamp, timestamp))
        except OSError as exc:
            logger.warning("unable to set modification time on %s: %s", path, exc)
            return False
        return True


def _copy_mode(source: Path, target: Path) -> None:
    try:
        mode = source.stat().st_mode & 0o7777
    except FileNotFoundError:
        return
    os.chmod(target, mode)
