from __future__ import annotations

import time
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from modloader.core.execution.models import PatcherResult
from modloader.core.launch.models import LaunchPlan


class RunState(str, Enum):
    START = "START"
    LOCATE_HOST = "LOCATE_HOST"
    CHECK_VERSION = "CHECK_VERSION"
    STAGE_FILES = "STAGE_FILES"
    DISCOVER = "DISCOVER"
    REPORT_MOD_LIST = "REPORT_MOD_LIST"
    APPLY_CORE_PATCHES = "APPLY_CORE_PATCHES"
    RUN_EXTENSIONS = "RUN_EXTENSIONS"
    LAUNCH = "LAUNCH"
    DETACH_EXIT = "DETACH_EXIT"
    WAIT_FOREGROUND = "WAIT_FOREGROUND"


class StageStatus(str, Enum):
    OK = "OK"
    DEGRADED = "DEGRADED"
    FAILED = "FAILED"


class StageResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    state: RunState
    status: StageStatus
    message: str = ""


class ModSummary(BaseModel):
    model_config = ConfigDict(extra="forbid")

    unique_name: str
    version: str
    enabled: bool
    outcome: str
    error: str = ""


class RunReport(BaseModel):
    model_config = ConfigDict(extra="forbid")

    trace_id: str
    loader_version: str
    game_path: str = ""
    game_version: str = ""
    stages: List[StageResult] = Field(default_factory=list)
    mods: List[ModSummary] = Field(default_factory=list)
    manifest_errors: List[str] = Field(default_factory=list)
    patchers: List[PatcherResult] = Field(default_factory=list)
    launch_plan: Optional[LaunchPlan] = None
    launched: bool = False
    terminal_state: Optional[RunState] = None
    started_at: float = Field(default_factory=lambda: time.time())

    def stage(self, state: RunState) -> Optional[StageResult]:
        for st in self.stages:
            if st.state == state:
                return st
        return None

    @property
    def visited(self) -> List[RunState]:
        return [st.state for st in self.stages]
