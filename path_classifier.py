"""
Bannerlord Mod Installer - Archive classification

Decides whether an unpacked archive's flat file list looks like a root mod
(mirrors the game's own top-level layout) or a set of submodules (one or
more folders carrying a SubModule.xml). Pure functions, no I/O.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Iterable

GAME_ID = "mountandblade2bannerlord"
MODULES = "Modules"

# Folder names (lowercased) that sit alongside the game's Modules folder.
ROOT_FOLDERS = frozenset({
    "bin", "data", "gui", "icons", "modules",
    "music", "shaders", "sounds", "xmlschemas",
})

# Real casing is "SubModule.xml"
SUBMOD_FILE = "submodule.xml"

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathEntry:
    """One archive path kept in two views: original casing and lowered key."""

    original: str
    key: str

    @classmethod
    def of(cls, path: str) -> PathEntry:
        return cls(original=path, key=path.lower())

    @property
    def segments(self) -> list[str]:
        return self.original.split(os.sep)

    @property
    def key_segments(self) -> list[str]:
        return self.key.split(os.sep)

    @property
    def basename(self) -> str:
        return os.path.basename(self.original)

    @property
    def is_directory_marker(self) -> bool:
        # No extension on the final segment means the host listed a folder.
        return os.path.splitext(self.segments[-1])[1] == ""


@dataclass
class SupportedResult:
    supported: bool
    required_files: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"supported": self.supported, "requiredFiles": list(self.required_files)}


def to_entries(files: Iterable[str]) -> list[PathEntry]:
    return [PathEntry.of(f) for f in files]


def find_anchor_index(
    entries: list[PathEntry], case_sensitive: bool = False
) -> tuple[PathEntry, int] | None:
    """Locate the first entry with a Modules segment and that segment's index.

    Classification matches case-insensitively; the root installer matches the
    literal folder name. Both callers go through here so the rules stay put.
    """
    target = MODULES if case_sensitive else MODULES.lower()
    for entry in entries:
        segments = entry.segments if case_sensitive else entry.key_segments
        if target in segments:
            return entry, segments.index(target)
    return None


# ── Root mods ─────────────────────────────────────────────────────────


def supports_root_mod(files: Iterable[str], game_id: str) -> SupportedResult:
    if game_id != GAME_ID:
        return SupportedResult(False)

    entries = to_entries(files)
    anchor = find_anchor_index(entries)
    if anchor is None:
        _log.debug("No %s folder in archive, not a root mod", MODULES)
        return SupportedResult(False)

    _, idx = anchor
    matches = [
        e for e in entries
        if len(e.key_segments) - 1 > idx and e.key_segments[idx] in ROOT_FOLDERS
    ]
    _log.debug("Root mod test: anchor index %d, %d root folder match(es)", idx, len(matches))
    return SupportedResult(len(matches) > 0)


# ── Submodules ────────────────────────────────────────────────────────


def is_submodule_file(entry: PathEntry) -> bool:
    return entry.basename.lower() == SUBMOD_FILE


def supports_submodules(files: Iterable[str], game_id: str) -> SupportedResult:
    if game_id != GAME_ID:
        return SupportedResult(False)
    supported = any(is_submodule_file(e) for e in to_entries(files))
    return SupportedResult(supported)
