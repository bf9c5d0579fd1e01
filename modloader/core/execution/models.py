from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from modloader.core.config.models import IsolationMode


class PatcherRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    unique_name: str
    version: str
    patcher_path: str
    patcher_callable: str = ""
    base_dir: str
    timeout_seconds: Optional[float] = Field(default=None, gt=0)

    @property
    def patcher_dir(self) -> str:
        return os.path.dirname(self.patcher_path)


class PatcherResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    unique_name: str
    version: str = ""
    ok: bool
    skipped: bool = False
    isolation: Optional[IsolationMode] = None
    error: str = ""
    error_type: str = ""
    exit_code: Optional[int] = None
    timed_out: bool = False
    duration_ms: float = 0.0
