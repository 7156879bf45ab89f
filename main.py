#!/usr/bin/env python3
"""Bannerlord Mod Installer - Entry Point

Prints the install plan for an archive (or an already unpacked folder) as JSON.
"""

import argparse
import json
import logging
import os
import sys
import tempfile
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path

from archive_listing import (
    SUPPORTED_EXTENSIONS,
    extract_archive,
    list_archive_names,
    list_directory_names,
)
from path_classifier import GAME_ID, MODULES
from plugin import BannerlordPlugin
from submodule_schema import DataInvalid

EXIT_OK = 0
EXIT_NOT_SUPPORTED = 1
EXIT_DATA_INVALID = 2

# Handlers installed by setup_logging, replaced on the next call
_handlers: list[logging.Handler] = []


def setup_logging(log_dir: Path | None = None, verbose: bool = False) -> tuple[logging.Logger, Path]:
    if log_dir is None:
        log_dir = Path(os.environ.get("APPDATA", "~")).expanduser() / "BannerlordModInstaller"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "bannerlordmodinstaller.log"

    handler = RotatingFileHandler(
        log_file,
        maxBytes=1 * 1024 * 1024,  # 1 MB
        backupCount=2,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(asctime)s  %(levelname)-8s  %(message)s"))

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    # Library modules log under their own names, so configure the root logger.
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)
    for old in _handlers:
        logger.removeHandler(old)
        old.close()
    _handlers[:] = [handler, console]
    for new in _handlers:
        logger.addHandler(new)
    return logger, log_dir


def install_crash_handler(logger: logging.Logger):
    def handle_exception(exc_type, exc_value, exc_tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        logger.critical(
            "Unhandled exception:\n%s",
            "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
        )

    sys.excepthook = handle_exception


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Bannerlord Mod Installer")
    parser.add_argument("source", help="mod archive (.zip/.7z/.rar) or unpacked folder")
    parser.add_argument("--game-id", default=GAME_ID)
    parser.add_argument("--destination", default=MODULES)
    parser.add_argument("--workers", type=int, default=None)
    parser.add_argument("--log-dir", type=Path)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def plan(source: Path, game_id: str, destination: str, workers: int | None = None) -> tuple[int, dict]:
    # No host profiles or notifications in standalone mode
    plugin = BannerlordPlugin(profile_game=lambda _: None, send_notification=lambda _: None)

    files = list_directory_names(source) if source.is_dir() else list_archive_names(source)
    installer, supported = plugin.classify(files, game_id)
    if not supported.supported:
        return EXIT_NOT_SUPPORTED, {"installer": None, "instructions": []}

    with tempfile.TemporaryDirectory() as tmpdir:
        staging: Path | None = None
        if source.is_dir():
            staging = source
        elif installer.reads_files:
            # Only the submodule installer opens files, for root-level SubModule.xml ids
            staging = extract_archive(source, Path(tmpdir))

        try:
            installer, result = plugin.build(
                files, destination, source_root=staging, game_id=game_id, max_workers=workers
            )
        except DataInvalid as exc:
            return EXIT_DATA_INVALID, {"installer": installer.id, "error": str(exc)}

    return EXIT_OK, {"installer": installer.id, **result.to_dict()}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logger, _ = setup_logging(args.log_dir, args.verbose)
    install_crash_handler(logger)

    source = Path(args.source)
    if not source.is_dir() and source.suffix.lower() not in SUPPORTED_EXTENSIONS:
        logger.error("Not an archive or folder: %s", source)
        return EXIT_NOT_SUPPORTED

    logger.info("Planning install for %s", source)
    code, payload = plan(source, args.game_id, args.destination, args.workers)
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return code


if __name__ == "__main__":
    sys.exit(main())
