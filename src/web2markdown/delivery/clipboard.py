"""Clipboard writing through platform clipboard commands."""

import logging
import shutil
import subprocess
import sys
from typing import Optional

from ..errors import DeliveryError

logger = logging.getLogger(__name__)

# Tried in order; the first command found on PATH is used
CLIPBOARD_COMMANDS: list[list[str]] = [
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["clip"],
]


class ClipboardWriter:
    """
    Copies text to the system clipboard.

    Example:
        writer = ClipboardWriter()
        if writer.is_available():
            writer.copy(markdown)
    """

    def __init__(self, commands: Optional[list[list[str]]] = None, timeout: float = 10.0):
        """
        Initialize the clipboard writer.

        Args:
            commands: Candidate clipboard commands (defaults to CLIPBOARD_COMMANDS)
            timeout: Seconds to wait for the clipboard command
        """
        self._commands = commands if commands is not None else CLIPBOARD_COMMANDS
        self._timeout = timeout

    def find_command(self) -> Optional[list[str]]:
        """Return the first clipboard command available on this system."""
        for command in self._commands:
            if shutil.which(command[0]):
                return command
        return None

    def is_available(self) -> bool:
        return self.find_command() is not None

    def copy(self, text: str) -> None:
        """
        Write ``text`` to the clipboard.

        Raises:
            DeliveryError: If no clipboard command exists or it fails
        """
        command = self.find_command()
        if command is None:
            raise DeliveryError(f"No clipboard command available on {sys.platform}")

        try:
            subprocess.run(
                command,
                input=text.encode("utf-8"),
                capture_output=True,
                timeout=self._timeout,
                check=True,
            )
        except subprocess.TimeoutExpired as e:
            raise DeliveryError(f"Clipboard command {command[0]} timed out") from e
        except (subprocess.CalledProcessError, OSError) as e:
            raise DeliveryError(f"Clipboard command {command[0]} failed: {e}") from e

        logger.debug(f"Copied {len(text)} characters with {command[0]}")
