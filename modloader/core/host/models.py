from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class HostInstallation:
    game_path: str
    managed_path: str
    exe_path: str
    version: str = ""
