"""Delivery collaborators: clipboard, notifications, attribution."""

from .clipboard import CLIPBOARD_COMMANDS, ClipboardWriter
from .notifier import Notifier
from .page_info import append_page_info

__all__ = ["CLIPBOARD_COMMANDS", "ClipboardWriter", "Notifier", "append_page_info"]
