from __future__ import annotations

import json
import logging
import os
import socket
from logging.handlers import RotatingFileHandler
from typing import Optional

MESSAGE = 25
logging.addLevelName(MESSAGE, "MESSAGE")

LOGGER_NAME = "modloader"


class SocketConsoleHandler(logging.Handler):
    """
    Streams records as JSON lines to a console listening on 127.0.0.1:<port>.
    Used when the loader is started by an external manager with consolePort.
    """

    def __init__(self, port: int, host: str = "127.0.0.1", timeout: float = 2.0):
        super().__init__()
        self.host = host
        self.port = int(port)
        self.timeout = float(timeout)
        self._sock: Optional[socket.socket] = None
        self._failed = False

    def _connect(self) -> socket.socket:
        if self._sock is None:
            self._sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        return self._sock

    def emit(self, record: logging.LogRecord) -> None:
        if self._failed:
            return
        try:
            payload = {"type": record.levelname, "message": self.format(record), "sender": LOGGER_NAME}
            data = (json.dumps(payload, ensure_ascii=False) + "\n").encode("utf-8")
        except Exception:  # noqa: BLE001
            self.handleError(record)
            return
        try:
            self._connect().sendall(data)
        except OSError as e:
            # one notice through the remaining handlers, then stay silent
            self._failed = True
            self._drop()
            logging.getLogger(LOGGER_NAME).warning(f"Console on port {self.port} unavailable ({e}); console output disabled.")

    def _drop(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError:
                pass
            self._sock = None

    def close(self) -> None:
        self.acquire()
        try:
            self._drop()
        finally:
            self.release()
        super().close()


def setup_logging(
    log_file: str = os.path.join("logs", "loader.log"),
    *,
    output_file: str = "",
    verbose: bool = False,
    console_port: Optional[int] = None,
) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    if log_file and not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        h = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=5, encoding="utf-8")
        h.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
        logger.addHandler(h)

    if output_file and not any(type(h) is logging.FileHandler for h in logger.handlers):
        os.makedirs(os.path.dirname(output_file) or ".", exist_ok=True)
        oh = logging.FileHandler(output_file, mode="w", encoding="utf-8")
        oh.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(oh)

    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        sh = logging.StreamHandler()
        sh.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(sh)

    if console_port and not any(isinstance(h, SocketConsoleHandler) for h in logger.handlers):
        logger.addHandler(SocketConsoleHandler(console_port))

    return logger
