"""
Bannerlord Mod Installer - Plugin entry

Ties the game's registration details, the installer table and the deployment
notice together for one host session.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from deploy_notifier import DeploymentNotifier, Notification
from installers import INSTALLERS, InstallResult, Installer, select_installer
from path_classifier import GAME_ID, MODULES, SupportedResult

_log = logging.getLogger(__name__)

STEAMAPP_ID = 1059770
EXECUTABLE = os.path.join("bin", "Win64_Shipping_Client", "TaleWorlds.MountAndBlade.Launcher.exe")


@dataclass(frozen=True)
class GameRegistration:
    """What the host needs to know about the game itself."""

    id: str = GAME_ID
    name: str = "Mount & Blade II: Bannerlord"
    executable: str = EXECUTABLE
    steam_app_id: int = STEAMAPP_ID
    merge_mods: bool = True
    mod_path: str = "."
    logo: str = "gameart.jpg"
    required_files: tuple[str, ...] = (EXECUTABLE,)
    environment: dict[str, str] = field(
        default_factory=lambda: {"SteamAPPId": str(STEAMAPP_ID)}
    )
    details: dict[str, Any] = field(
        default_factory=lambda: {"steamAppId": STEAMAPP_ID, "customOpenModsPath": MODULES}
    )


class BannerlordPlugin:
    """
    One registration of the Bannerlord support.

    Workflow:
        1. classify() to pick the installer for an archive's file list
        2. build() to turn the list into copy instructions
        3. on_did_deploy() from the host's deployment event
    """

    def __init__(
        self,
        profile_game: Callable[[str], Optional[str]],
        send_notification: Callable[[Notification], None],
        installers: tuple[Installer, ...] = INSTALLERS,
    ):
        self.registration = GameRegistration()
        self.installers = installers
        self.notifier = DeploymentNotifier(GAME_ID, profile_game, send_notification)
        _log.debug(
            "Registered %s with installers %s",
            self.registration.id, [i.id for i in installers],
        )

    def classify(self, files: list[str], game_id: str) -> tuple[Optional[Installer], SupportedResult]:
        installer = select_installer(files, game_id, self.installers)
        return installer, SupportedResult(installer is not None)

    def build(
        self,
        files: list[str],
        destination_path: str = MODULES,
        source_root: str | Path | None = None,
        game_id: str = GAME_ID,
        max_workers: int | None = None,
    ) -> tuple[Optional[Installer], InstallResult]:
        installer = select_installer(files, game_id, self.installers)
        if installer is None:
            _log.info("No installer accepts this archive")
            return None, InstallResult()
        if installer.reads_files:
            result = installer.install(
                files, destination_path, source_root=source_root, max_workers=max_workers
            )
        else:
            result = installer.install(files, destination_path)
        return installer, result

    def on_did_deploy(self, profile_id: str, deployment: Any) -> bool:
        return self.notifier.on_did_deploy(profile_id, deployment)
