from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class LaunchKind(str, Enum):
    exe = "exe"
    epic = "epic"
    steam = "steam"


class LaunchPlan(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: LaunchKind
    target: str
    arguments: List[str] = Field(default_factory=list)
    reason: str = ""

    @property
    def via_storefront(self) -> bool:
        return self.kind != LaunchKind.exe
