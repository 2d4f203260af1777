from __future__ import annotations

import logging
from argparse import ArgumentParser
from pathlib import Path
from typing import Sequence

from cannon_core import __version__
from cannon_core.config import load_updater_config
from cannon_core.discovery import discover_archives
from cannon_core.runner import RunReport, launch, resolve_install_layout, run_updates
from cannon_core.updates import HttpTransport, ManifestCache, UpdateResolver

from .logging_utils import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="cannon", description="Update local archives from their declared remote locations.")
    parser.add_argument("--dir", dest="directory", default=".", help="Installation directory (default: current directory)")
    parser.add_argument("--nolaunch", action="store_true", help="Do not start the application after updating")
    parser.add_argument("--launch-target", help="Executable that marks an installation directory and is launched")
    parser.add_argument("--pattern", help="Glob selecting archive files (default from config: *.smod)")
    parser.add_argument("--config", help="Path to config.toml (default: <dir>/config/config.toml)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every protocol step")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _print_report(report: RunReport) -> None:
    for discovered in report.discovery_failures:
        print(f"[cannon:update] {discovered.artifact.path.name}: fail ({discovered.error})")
    for discovered in report.skipped:
        print(f"[cannon:update] {discovered.artifact.path.name}: skipped (no update location)")
    for outcome in report.outcomes:
        line = f"[cannon:update] {outcome.artifact.path.name}: {outcome.action.value}"
        if outcome.cause:
            line += f" ({outcome.cause})"
        print(line)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    directory = Path(args.directory)
    if not directory.is_dir():
        print(f"[cannon:update] directory not found: {directory}")
        return 1

    try:
        config = load_updater_config(directory, Path(args.config) if args.config else None)
    except ValueError as exc:
        print(f"[cannon:update] invalid configuration: {exc}")
        return 1

    layout = resolve_install_layout(directory, args.launch_target or config.launch_target, config.archives_subdir)
    if not layout.archives_dir.is_dir():
        print(f"[cannon:update] archive directory not found: {layout.archives_dir}")
        return 1
    print(f"[cannon:update] start updating in {layout.archives_dir}")

    transport = HttpTransport(config.transport_config())
    try:
        resolver = UpdateResolver(transport, ManifestCache())
        report = run_updates(
            discover_archives(
                layout.archives_dir,
                pattern=args.pattern or config.archive_pattern,
                metadata_entry=config.metadata_entry,
                metadata_key=config.metadata_key,
            ),
            resolver,
        )
    finally:
        transport.close()

    _print_report(report)
    if not report.ok:
        print("[cannon:update] some archives could not be updated; not launching")
        return 1

    if layout.launch_target is not None and not args.nolaunch:
        try:
            launch(layout.launch_target)
        except OSError as exc:
            print(f"[cannon:update] unable to launch {layout.launch_target}: {exc}")
            return 1
        print(f"[cannon:update] launched {layout.launch_target.name}")
    return 0
