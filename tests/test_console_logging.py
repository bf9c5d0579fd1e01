from __future__ import annotations

import json
import logging
import socket
from logging.handlers import RotatingFileHandler

import pytest

from modloader.core.console import MessageType, ModConsole
from modloader.core.errors import FileStageError, HostNotFoundError, VersionMismatchWarning
from modloader.core.logger import LOGGER_NAME, MESSAGE, SocketConsoleHandler, setup_logging


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def capture_logger():
    logger = logging.getLogger("modloader.tests.capture")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = ListHandler()
    logger.addHandler(handler)
    yield logger, handler
    logger.removeHandler(handler)


@pytest.mark.parametrize(
    "message_type,level",
    [
        (MessageType.Debug, logging.DEBUG),
        (MessageType.Info, logging.INFO),
        (MessageType.Message, MESSAGE),
        (MessageType.Warning, logging.WARNING),
        (MessageType.Error, logging.ERROR),
    ],
)
def test_message_types_map_onto_log_levels(capture_logger, message_type, level):
    logger, handler = capture_logger
    ModConsole(logger).write_line("hello", message_type)
    assert [(r.levelno, r.getMessage()) for r in handler.records] == [(level, "hello")]


def test_report_uses_error_severity(capture_logger):
    logger, handler = capture_logger
    console = ModConsole(logger)
    console.report(VersionMismatchWarning("old game"))
    console.report(FileStageError("copy failed"))
    console.report(HostNotFoundError())
    assert [r.levelno for r in handler.records] == [logging.WARNING, logging.ERROR, logging.ERROR]


def test_setup_logging_is_idempotent(tmp_path, clean_loader_logger):
    log_file = str(tmp_path / "logs" / "loader.log")
    output_file = str(tmp_path / "logs" / "output.txt")

    setup_logging(log_file, output_file=output_file)
    logger = setup_logging(log_file, output_file=output_file)

    assert sum(isinstance(h, RotatingFileHandler) for h in logger.handlers) == 1
    assert sum(type(h) is logging.FileHandler for h in logger.handlers) == 1
    assert logger.level == logging.INFO

    ModConsole(logger).write_line("* Test.A v1.0.0", MessageType.Message)
    ModConsole(logger).write_line("hidden", MessageType.Debug)
    for h in logger.handlers:
        h.flush()
    with open(output_file, encoding="utf-8") as f:
        text = f.read()
    assert "* Test.A v1.0.0" in text
    assert "hidden" not in text


def test_socket_console_handler_sends_json_lines():
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    server.settimeout(5)
    port = server.getsockname()[1]
    handler = SocketConsoleHandler(port)
    try:
        logger = logging.getLogger("modloader.tests.socket")
        logger.propagate = False
        logger.setLevel(logging.DEBUG)
        logger.addHandler(handler)
        logger.log(MESSAGE, "Found mods:")

        conn, _ = server.accept()
        conn.settimeout(5)
        data = b""
        while not data.endswith(b"\n"):
            chunk = conn.recv(4096)
            if not chunk:
                break
            data += chunk
        conn.close()
        logger.removeHandler(handler)
    finally:
        handler.close()
        server.close()

    payload = json.loads(data.decode("utf-8"))
    assert payload == {"type": "MESSAGE", "message": "Found mods:", "sender": LOGGER_NAME}


def test_missing_console_listener_is_reported_once_and_stays_quiet(clean_loader_logger, capsys):
    free_sock = socket.socket()
    free_sock.bind(("127.0.0.1", 0))
    port = free_sock.getsockname()[1]
    free_sock.close()
    notices = ListHandler()
    clean_loader_logger.addHandler(notices)
    handler = SocketConsoleHandler(port, timeout=0.5)
    logger = logging.getLogger("modloader.tests.socket_down")
    logger.propagate = False
    logger.addHandler(handler)
    try:
        logger.warning("first line")
        logger.warning("second line")
    finally:
        logger.removeHandler(handler)
        handler.close()

    assert capsys.readouterr().err == ""
    messages = [r.getMessage() for r in notices.records]
    assert len(messages) == 1
    assert f"port {port} unavailable" in messages[0]
