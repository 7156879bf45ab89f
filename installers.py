"""
Bannerlord Mod Installer - Install plans

Turns an accepted archive file list into copy instructions relative to the
game's mod path. Nothing here touches the files themselves; the host's
deployment step carries out the copies.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional

from path_classifier import (
    MODULES,
    ROOT_FOLDERS,
    PathEntry,
    SupportedResult,
    find_anchor_index,
    is_submodule_file,
    supports_root_mod,
    supports_submodules,
    to_entries,
)
from submodule_schema import NameResolution, resolve_mod_name

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CopyInstruction:
    source: str
    destination: str
    type: str = "copy"

    def to_dict(self) -> dict:
        return {"type": self.type, "source": self.source, "destination": self.destination}


@dataclass
class InstallResult:
    instructions: list[CopyInstruction] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"instructions": [i.to_dict() for i in self.instructions]}


# ── Root mods ─────────────────────────────────────────────────────────


def install_root_mod(files: Iterable[str], destination_path: str) -> InstallResult:
    """Copy every file under a known root folder, keeping its path from Modules on.

    The anchor is located on the literal "Modules" segment here, unlike the
    case-insensitive match in ``supports_root_mod``.
    """
    entries = to_entries(files)
    anchor = find_anchor_index(entries, case_sensitive=True)
    assert anchor is not None, f"install_root_mod called without a {MODULES} folder"
    _, idx = anchor

    instructions = []
    for entry in entries:
        key_segments = entry.key_segments
        # Ignore directories and anything without a known root folder at the anchor.
        if idx >= len(key_segments) or key_segments[idx] not in ROOT_FOLDERS:
            continue
        if entry.is_directory_marker:
            continue
        destination = os.sep.join(entry.segments[idx:])
        instructions.append(CopyInstruction(source=entry.original, destination=destination))

    _log.info("Root mod: %d file(s) to copy from anchor index %d", len(instructions), idx)
    return InstallResult(instructions)


# ── Submodules ────────────────────────────────────────────────────────


def _resolve_names(
    anchors: list[PathEntry],
    source_root: str | Path | None,
    max_workers: int | None,
) -> list[NameResolution]:
    # Only identity-file reads do I/O, so only those go to the pool.
    if not max_workers or max_workers <= 1 or len(anchors) <= 1:
        return [resolve_mod_name(a, source_root) for a in anchors]
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(lambda a: resolve_mod_name(a, source_root), anchors))


def install_submodules(
    files: Iterable[str],
    destination_path: str,
    source_root: str | Path | None = None,
    max_workers: int | None = None,
) -> InstallResult:
    """Copy each submodule into Modules/<name>/.

    ``source_root`` is the directory the archive was unpacked into; it is only
    read when a SubModule.xml sits at the archive root and the module id has
    to come from the file. Raises ``DataInvalid`` if any such read fails, in
    which case no instructions are returned.
    """
    # Remove directories straight away.
    filtered = [e for e in to_entries(files) if not e.is_directory_marker]
    anchors = [e for e in filtered if is_submodule_file(e)]

    resolutions = _resolve_names(anchors, source_root, max_workers)

    instructions: list[CopyInstruction] = []
    for anchor, resolution in zip(anchors, resolutions):
        mod_name = resolution.unwrap()
        idx = len(anchor.original) - len(anchor.basename)
        prefix = anchor.original[:idx]
        members = [e for e in filtered if e.original[:idx] == prefix]
        _log.info(
            "Submodule %r (%s): %d file(s) under %r",
            mod_name, resolution.source, len(members), prefix or ".",
        )
        for member in members:
            # Empty segments are dropped so a leading separator cannot make
            # the destination absolute.
            suffix = [seg for seg in member.original[idx:].split(os.sep) if seg]
            instructions.append(CopyInstruction(
                source=member.original,
                destination=os.sep.join([MODULES, mod_name, *suffix]),
            ))

    return InstallResult(instructions)


# ── Installer table ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Installer:
    """A test/install pair the host tries in ascending priority."""

    id: str
    priority: int
    test: Callable[[Iterable[str], str], SupportedResult]
    install: Callable[..., InstallResult]
    # Reads SubModule.xml files from the unpacked archive
    reads_files: bool = False


INSTALLERS: tuple[Installer, ...] = (
    Installer("bannerlordrootmod", 20, supports_root_mod, install_root_mod),
    Installer("bannerlordsubmodules", 25, supports_submodules, install_submodules, reads_files=True),
)


def select_installer(
    files: list[str], game_id: str, installers: Iterable[Installer] = INSTALLERS
) -> Optional[Installer]:
    for installer in sorted(installers, key=lambda i: i.priority):
        if installer.test(files, game_id).supported:
            _log.debug("Installer %s accepts the archive", installer.id)
            return installer
    return None
