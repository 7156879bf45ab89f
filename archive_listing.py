"""
Archive access for the command-line front end.

The host normally hands the installer an already unpacked file list. When run
standalone, archives are listed and unpacked here.
"""

from __future__ import annotations

import logging
import os
import sys
import zipfile
from pathlib import Path

import py7zr
import rarfile

_log = logging.getLogger(__name__)

# Point rarfile at UnRAR.exe when one ships next to the script
if getattr(sys, "frozen", False):
    _unrar = Path(sys._MEIPASS) / "UnRAR.exe"
else:
    _unrar = Path(__file__).parent / "assets" / "UnRAR.exe"
if _unrar.exists():
    rarfile.UNRAR_TOOL = str(_unrar)

SUPPORTED_EXTENSIONS = {".zip", ".7z", ".rar"}


def _to_native(name: str) -> str:
    # Archive members use "/" (or "\\" from some Windows zippers); directory
    # entries keep their name without the trailing separator.
    return name.replace("\\", "/").rstrip("/").replace("/", os.sep)


def list_archive_names(filepath: str | Path) -> list[str]:
    filepath = Path(filepath)
    ext = filepath.suffix.lower()

    if ext == ".zip":
        with zipfile.ZipFile(filepath, "r") as zf:
            names = zf.namelist()
    elif ext == ".7z":
        with py7zr.SevenZipFile(filepath, "r") as sz:
            names = sz.getnames()
    elif ext == ".rar":
        with rarfile.RarFile(filepath, "r") as rf:
            names = [info.filename for info in rf.infolist()]
    else:
        raise ValueError(f"Unsupported archive format: {ext}")

    return [n for n in (_to_native(n) for n in names) if n]


def extract_archive(filepath: str | Path, dest: str | Path) -> Path:
    filepath = Path(filepath)
    dest = Path(dest)
    ext = filepath.suffix.lower()
    _log.debug("Extracting %s to %s", filepath.name, dest)

    if ext == ".zip":
        with zipfile.ZipFile(filepath, "r") as zf:
            zf.extractall(dest)
    elif ext == ".7z":
        with py7zr.SevenZipFile(filepath, "r") as sz:
            sz.extractall(dest)
    elif ext == ".rar":
        with rarfile.RarFile(filepath, "r") as rf:
            rf.extractall(dest)
    else:
        raise ValueError(f"Unsupported archive format: {ext}")

    return dest


def list_directory_names(root: str | Path) -> list[str]:
    """List a staging directory the way the host does: folders and files, relative."""
    root = Path(root)
    names = []
    for path in sorted(root.rglob("*")):
        names.append(str(path.relative_to(root)))
    return names
