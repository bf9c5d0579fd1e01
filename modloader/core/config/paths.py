from __future__ import annotations

import os
from dataclasses import dataclass

from modloader.core.constants import LOADER_CONFIG_FILE_NAME


@dataclass(frozen=True)
class ConfigFsPaths:
    root: str = "."

    @property
    def config_dir(self) -> str:
        return os.path.join(self.root, "config")

    @property
    def backups_dir(self) -> str:
        return os.path.join(self.config_dir, "backups")

    @property
    def logs_dir(self) -> str:
        return os.path.join(self.root, "logs")

    # Files
    @property
    def loader(self) -> str:
        return os.path.join(self.config_dir, LOADER_CONFIG_FILE_NAME)

    @property
    def ops_log(self) -> str:
        return os.path.join(self.logs_dir, "ops.jsonl")
