from __future__ import annotations

import logging
import os

import pytest

from modloader.core.config.manager import ConfigManager
from modloader.core.config.paths import ConfigFsPaths
from modloader.core.logger import LOGGER_NAME

from .helpers.fakes import RecordingConsole
from .helpers.mod_builders import make_game_dir


@pytest.fixture
def tmp_loader_root(tmp_path):
    """
    Provides an isolated loader root with config/ and mods/ under tmp_path.
    """
    fs = ConfigFsPaths(root=str(tmp_path / "loader"))
    os.makedirs(fs.config_dir, exist_ok=True)
    os.makedirs(os.path.join(fs.root, "mods"), exist_ok=True)
    return fs


@pytest.fixture
def config_manager(tmp_loader_root):
    cm = ConfigManager(fs=tmp_loader_root, logger=None, read_only=False)
    cm.load()
    return cm


@pytest.fixture
def mods_root(tmp_loader_root):
    return os.path.join(tmp_loader_root.root, "mods")


@pytest.fixture
def game_dir(tmp_path):
    return make_game_dir(str(tmp_path / "games" / "OuterWilds"), version="1.1.15.1018")


@pytest.fixture
def console():
    return RecordingConsole()


@pytest.fixture
def clean_loader_logger():
    """Detach the process-wide modloader handlers for the duration of a test."""
    logger = logging.getLogger(LOGGER_NAME)
    saved = list(logger.handlers)
    level = logger.level
    for h in saved:
        logger.removeHandler(h)
    yield logger
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    for h in saved:
        logger.addHandler(h)
    logger.setLevel(level)
