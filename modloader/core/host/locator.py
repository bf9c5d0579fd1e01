from __future__ import annotations

import os
from typing import List, Mapping, Optional

from modloader.core.config.models import LoaderConfig
from modloader.core.constants import GAME_PATH_ENV
from modloader.core.errors import HostNotFoundError
from modloader.core.host.models import HostInstallation


class HostPathFinder:
    """
    Finds the game install. Candidates, first match wins:
    stored game_path, $MODLOADER_GAME_PATH, then configured search_paths.
    A candidate matches when the game executable exists inside it.
    """

    def __init__(self, config: LoaderConfig, *, env: Optional[Mapping[str, str]] = None):
        self.config = config
        self.env = os.environ if env is None else env

    def candidates(self) -> List[str]:
        out: List[str] = []
        for p in [self.config.game_path, self.env.get(GAME_PATH_ENV, ""), *self.config.search_paths]:
            p = str(p or "").strip()
            if p and p not in out:
                out.append(p)
        return out

    def is_valid_game_path(self, path: str) -> bool:
        return os.path.isfile(os.path.join(path, self.config.exe_name))

    def find_game_path(self) -> str:
        tried = self.candidates()
        for path in tried:
            if self.is_valid_game_path(path):
                return os.path.normpath(path)
        raise HostNotFoundError(
            f"Game not found ({self.config.exe_name}). Set game_path in config/loader.json or {GAME_PATH_ENV}.",
            tried=tried,
        )

    def locate(self) -> HostInstallation:
        game_path = self.find_game_path()
        return HostInstallation(
            game_path=game_path,
            managed_path=os.path.join(game_path, self.config.managed_dir),
            exe_path=os.path.join(game_path, self.config.exe_name),
            version=read_game_version(os.path.join(game_path, self.config.game_version_file)),
        )


def read_game_version(path: str) -> str:
    """First non-empty line of the version file; empty when unavailable."""
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            for line in f:
                line = line.strip()
                if line:
                    return line[:64]
    except (OSError, UnicodeDecodeError):
        return ""
    return ""
