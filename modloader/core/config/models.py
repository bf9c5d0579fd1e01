from __future__ import annotations

import os
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modloader.core import constants


class IsolationMode(str, Enum):
    process = "process"
    inline = "inline"


class ExecutionConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    isolation: IsolationMode = IsolationMode.process
    timeout_seconds: Optional[float] = Field(default=None, gt=0)

    @field_validator("isolation", mode="before")
    @classmethod
    def _norm_isolation(cls, v: Any) -> Any:
        if v is None or v == "":
            return IsolationMode.process
        if isinstance(v, IsolationMode):
            return v
        vv = str(v).strip().lower()
        if vv in {"process", "subprocess", "local_process"}:
            return IsolationMode.process
        if vv in {"inline", "in_process"}:
            return IsolationMode.inline
        return v


class LoaderConfig(BaseModel):
    """
    Persisted loader configuration (config/loader.json).
    Relative directories are resolved against game_path or the loader root.
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: int = Field(default=1, ge=1, le=10)
    game_path: str = ""
    managed_dir: str = os.path.join("OuterWilds_Data", "Managed")
    exe_name: str = "OuterWilds.exe"
    mods_dir: str = "mods"
    output_file: str = os.path.join("logs", "output.txt")
    log_file: str = os.path.join("logs", "loader.log")
    verbose: bool = False
    force_exe: bool = False

    expected_game_version: str = constants.EXPECTED_GAME_VERSION
    game_version_file: str = "version.txt"
    search_paths: List[str] = Field(default_factory=list)

    companion_files: List[str] = Field(default_factory=lambda: list(constants.DEFAULT_COMPANION_FILES))
    core_patch_dir: str = "patches"
    core_patch_files: List[str] = Field(default_factory=list)

    epic_marker: str = constants.EPIC_MARKER
    epic_launch_uri: str = constants.EPIC_LAUNCH_URI
    steam_marker: str = constants.STEAM_MARKER
    steam_app_id: str = constants.STEAM_APP_ID

    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    mods: Dict[str, bool] = Field(default_factory=dict)

    @field_validator("search_paths", "companion_files", "core_patch_files", mode="before")
    @classmethod
    def _norm_str_list(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if isinstance(v, (list, tuple)):
            return [str(x) for x in v if str(x or "").strip()]
        return v

    @property
    def managed_path(self) -> str:
        return os.path.join(self.game_path, self.managed_dir)

    @property
    def exe_path(self) -> str:
        return os.path.join(self.game_path, self.exe_name)

    @property
    def steam_launch_uri(self) -> str:
        return f"steam://rungameid/{self.steam_app_id}"

    def mods_path(self, root: str) -> str:
        if os.path.isabs(self.mods_dir):
            return self.mods_dir
        return os.path.join(root, self.mods_dir)

    def resolve(self, root: str, rel: str) -> str:
        if not rel or os.path.isabs(rel):
            return rel
        return os.path.join(root, rel)


def default_loader_config_dict() -> Dict[str, Any]:
    return LoaderConfig().model_dump(mode="json")
