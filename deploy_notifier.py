"""
Deployment notice for Bannerlord.

Bannerlord only loads modules that are ticked in its own launcher, so after a
deployment changes what is on disk the user gets a one-off, suppressible hint
to go and enable them there. Repeat deployments of the same snapshot stay quiet.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

_log = logging.getLogger(__name__)

LAUNCHER_MESSAGE = "Use game launcher to activate mods"

_NEVER_SEEN = object()


@dataclass(frozen=True)
class Notification:
    message: str = LAUNCHER_MESSAGE
    type: str = "info"
    allow_suppress: bool = True


class DeploymentNotifier:
    """
    Remembers the last deployment seen for one game.

    State starts as "never seen" when the plugin registers and lives as long
    as the plugin does; nothing is persisted.

    ``profile_game`` maps a profile id to its game id (None for unknown
    profiles). ``send_notification`` is fire-and-forget.
    """

    def __init__(
        self,
        game_id: str,
        profile_game: Callable[[str], Optional[str]],
        send_notification: Callable[[Notification], None],
    ):
        self.game_id = game_id
        self._profile_game = profile_game
        self._send = send_notification
        self._lock = threading.Lock()
        self._previous: Any = _NEVER_SEEN

    @property
    def last_deployment(self) -> Any:
        return None if self._previous is _NEVER_SEEN else self._previous

    def reset(self):
        with self._lock:
            self._previous = _NEVER_SEEN

    def on_did_deploy(self, profile_id: str, deployment: Any) -> bool:
        """Handle a did-deploy event. Returns True if a notification was sent."""
        game_id = self._profile_game(profile_id)
        if game_id != self.game_id:
            return False

        with self._lock:
            if self._previous is not _NEVER_SEEN and self._previous == deployment:
                return False
            self._previous = deployment

        _log.info("Deployment changed for profile %s, asking user to use the launcher", profile_id)
        self._send(Notification())
        return True
