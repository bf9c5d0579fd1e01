from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from modloader.core.errors import LoaderError, Severity
from modloader.core.logger import LOGGER_NAME, MESSAGE


class MessageType(str, Enum):
    Debug = "Debug"
    Info = "Info"
    Message = "Message"
    Warning = "Warning"
    Error = "Error"


_LEVELS = {
    MessageType.Debug: logging.DEBUG,
    MessageType.Info: logging.INFO,
    MessageType.Message: MESSAGE,
    MessageType.Warning: logging.WARNING,
    MessageType.Error: logging.ERROR,
}

_SEVERITY_TYPES = {
    Severity.INFO: MessageType.Info,
    Severity.WARN: MessageType.Warning,
    Severity.ERROR: MessageType.Error,
    Severity.CRITICAL: MessageType.Error,
}


class ModConsole:
    """Line-oriented reporting sink shared by every loader stage."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    def write_line(self, message: str, message_type: MessageType = MessageType.Message) -> None:
        self.logger.log(_LEVELS[MessageType(message_type)], str(message))

    def report(self, error: LoaderError) -> None:
        self.write_line(error.user_message, _SEVERITY_TYPES.get(error.severity, MessageType.Error))
