"""
Shared fixtures and helpers for the Bannerlord Mod Installer test suite.
"""

import os
import zipfile
from pathlib import Path

import pytest

SUBMODULE_XML = """<?xml version="1.0" encoding="utf-8"?>
<Module>
    <Name value="{name}"/>
    <Id value="{id}"/>
    <Version value="v1.0.0"/>
</Module>
"""


def p(*segments: str) -> str:
    """Join path segments with the platform separator, as the host does."""
    return os.sep.join(segments)


def make_zip(path: Path, members: dict[str, str | bytes]) -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        for member, data in members.items():
            zf.writestr(member, data)
    return path


def write_files(root: Path, members: dict[str, str]) -> Path:
    """Lay out an unpacked archive under root."""
    for member, data in members.items():
        target = root / member
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(data, encoding="utf-8")
    return root


@pytest.fixture
def staging(tmp_path):
    """An empty folder standing in for the host's unpacked-archive directory."""
    root = tmp_path / "staging"
    root.mkdir()
    return root
