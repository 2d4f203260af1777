"""Sequential driver: resolve every discovered archive, then decide on launching."""

from __future__ import annotations

import logging
import subprocess
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from cannon_core.discovery import DiscoveredArchive
from cannon_core.updates.engine import UpdateResolver
from cannon_core.updates.models import Action, UpdateOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallLayout:
    archives_dir: Path
    launch_target: Path | None


@dataclass
class RunReport:
    outcomes: list[UpdateOutcome] = field(default_factory=list)
    skipped: list[DiscoveredArchive] = field(default_factory=list)
    discovery_failures: list[DiscoveredArchive] = field(default_factory=list)

    @property
    def counts(self) -> dict[Action, int]:
        return dict(Counter(outcome.action for outcome in self.outcomes))

    @property
    def failures(self) -> list[UpdateOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def ok(self) -> bool:
        return not self.discovery_failures and not self.failures


def resolve_install_layout(directory: Path, launch_target: str, archives_subdir: str) -> InstallLayout:
    """Archives live under ``archives_subdir`` next to the launch target when it exists."""
    directory = directory.resolve()
    executable = directory / launch_target
    if executable.is_file():
        return InstallLayout(archives_dir=directory / archives_subdir, launch_target=executable)
    return InstallLayout(archives_dir=directory, launch_target=None)


def run_updates(archives: Iterable[DiscoveredArchive], resolver: UpdateResolver) -> RunReport:
    report = RunReport()
    for discovered in archives:
        if discovered.error is not None:
            report.discovery_failures.append(discovered)
            continue
        if discovered.location is None:
            report.skipped.append(discovered)
            continue
        logger.info("checking %s for updates on %s", discovered.location, discovered.artifact.path.name)
        report.outcomes.append(resolver.resolve(discovered.artifact, discovered.location))
    logger.info(
        "processed %s archives (%s skipped, %s failed)",
        len(report.outcomes) + len(report.skipped) + len(report.discovery_failures),
        len(report.skipped),
        len(report.failures) + len(report.discovery_failures),
    )
    return report


def launch(executable: Path) -> subprocess.Popen:
    logger.info("launching %s", executable)
    return subprocess.Popen([str(executable)], cwd=str(executable.parent))
