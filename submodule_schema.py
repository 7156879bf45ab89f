"""
SubModule.xml schema for Bannerlord Mod Installer.

Every Bannerlord module ships a ``SubModule.xml`` describing itself. When the
file sits inside a named folder the installer takes the folder name as the
module name; when it sits at the archive root there is no folder to borrow,
so the module id is read from the document instead.

Document example
----------------

    <Module>
        <Name value="Better Armies"/>
        <Id value="BetterArmies"/>
        <Version value="v1.2.0"/>
        ...
    </Module>

Only ``Id`` is required. ``Name`` and ``Version`` are picked up when present.
"""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ValidationError, field_validator

from path_classifier import PathEntry

_log = logging.getLogger(__name__)


class DataInvalid(ValueError):
    """A SubModule.xml could not be parsed or lacks its module id."""


class SubModuleIdentity(BaseModel):
    """Identity fields read from a SubModule.xml."""

    id: str
    name: str | None = None
    version: str | None = None

    @field_validator("id")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("module id is empty")
        return v


def _attr_value(root: ET.Element, tag: str) -> str | None:
    # First element with this tag anywhere in the document
    element = root.find(f".//{tag}") if root.tag != tag else root
    if element is None:
        return None
    return element.get("value")


def parse_submodule(data: str | bytes) -> SubModuleIdentity:
    """Parse SubModule.xml text or raw bytes into a SubModuleIdentity.

    Raw bytes are decoded by the parser according to the BOM and the XML
    declaration. Raises ``DataInvalid`` if the markup is malformed, cannot be
    decoded, or ``Id`` is missing.
    """
    try:
        root = ET.fromstring(data)
    except (ET.ParseError, ValueError, LookupError) as exc:
        raise DataInvalid(f"Failed to parse SubModule.xml file: {exc}") from exc

    module_id = _attr_value(root, "Id")
    if module_id is None:
        raise DataInvalid("Unexpected SubModule.xml format: no Id value")

    try:
        return SubModuleIdentity(
            id=module_id,
            name=_attr_value(root, "Name"),
            version=_attr_value(root, "Version"),
        )
    except ValidationError as exc:
        raise DataInvalid(f"Unexpected SubModule.xml format: {exc}") from exc


def read_submodule_id(path: str | Path) -> str:
    """Read a SubModule.xml from disk and return its module id.

    OS-level read errors propagate as-is; content problems raise ``DataInvalid``.
    """
    identity = parse_submodule(Path(path).read_bytes())
    _log.debug("Read module id %r from %s", identity.id, path)
    return identity.id


# ── Name resolution ───────────────────────────────────────────────────


@dataclass(frozen=True)
class NameResolution:
    """Outcome of naming one submodule.

    ``source`` is ``"path"`` when the enclosing folder gave the name (cannot
    fail) and ``"identity"`` when the SubModule.xml had to be read.
    """

    source: Literal["path", "identity"]
    name: str | None = None
    error: DataInvalid | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> str:
        if self.error is not None:
            raise self.error
        assert self.name is not None
        return self.name


def resolve_mod_name(entry: PathEntry, source_root: str | Path | None = None) -> NameResolution:
    """Name the submodule whose SubModule.xml is ``entry``."""
    segments = [seg for seg in entry.segments if seg]
    if len(segments) > 1:
        return NameResolution(source="path", name=segments[-2])

    relative = entry.original.lstrip(os.sep)
    path = Path(source_root) / relative if source_root is not None else Path(relative)
    try:
        return NameResolution(source="identity", name=read_submodule_id(path))
    except DataInvalid as exc:
        _log.warning("Could not name submodule from %s: %s", path, exc)
        return NameResolution(source="identity", error=exc)

