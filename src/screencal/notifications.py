"""Best-effort desktop notifications.

:class:`DesktopNotifier` shells out to ``osascript`` on macOS and
``notify-send`` elsewhere.  Callers treat every failure as non-fatal.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from typing import Protocol

logger = logging.getLogger(__name__)

APP_NAME = "ScreenCal"
NOTIFY_TIMEOUT = 5


class Notifier(Protocol):
    """Shows a short message to the user."""

    def notify(self, title: str, body: str) -> None: ...


class DesktopNotifier:
    """Posts a native notification through the platform command-line tool."""

    def notify(self, title: str, body: str) -> None:
        command = self._command(title, body)
        if command is None:
            logger.info("No notification backend available; skipping '%s'", title)
            return

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=NOTIFY_TIMEOUT,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("Notification command failed: %s", exc)
            return

        if result.returncode != 0:
            logger.warning(
                "Notification command exited with %d: %s",
                result.returncode,
                result.stderr.strip(),
            )
            return
        logger.debug("Notification posted: %s - %s", title, body)

    @staticmethod
    def _command(title: str, body: str) -> list[str] | None:
        if sys.platform == "darwin":
            script = (
                f"display notification {_applescript_string(body)} "
                f"with title {_applescript_string(APP_NAME)} "
                f"subtitle {_applescript_string(title)}"
            )
            return ["osascript", "-e", script]
        if shutil.which("notify-send"):
            return ["notify-send", "--app-name", APP_NAME, title, body]
        return None


def _applescript_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
