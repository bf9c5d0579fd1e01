from __future__ import annotations

"""
Mod manifest + runtime record models.

The manifest is the contract-of-record for a mod. It is validated without
importing any mod code; only the patcher reference is resolved to a path.
"""

import os
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modloader.core.errors import ManifestError

_CALLABLE_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class ModManifest(BaseModel):
    # third-party metadata keys are kept, not rejected
    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    unique_name: str = Field(alias="uniqueName", min_length=1)
    version: str = Field(min_length=1)
    name: str = ""
    author: str = ""
    description: str = ""
    patcher: str = ""
    dependencies: List[str] = Field(default_factory=list)
    enabled: bool = True
    loader_version: str = Field(default="", alias="loaderVersion")

    @field_validator("unique_name", "version", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("patcher", mode="before")
    @classmethod
    def _patcher_safe(cls, v: Any) -> str:
        if v is None:
            return ""
        v = str(v).strip().replace("\\", "/")
        if not v:
            return ""
        file_part = v
        head, sep, tail = v.rpartition(":")
        if sep and _CALLABLE_RE.fullmatch(tail):
            file_part = head
        if os.path.isabs(file_part) or re.match(r"^[A-Za-z]:", file_part):
            raise ValueError("patcher must be a path relative to the mod directory")
        parts = [p for p in file_part.split("/") if p]
        if not parts or ".." in parts:
            raise ValueError("patcher must stay inside the mod directory")
        return v

    @field_validator("dependencies", mode="before")
    @classmethod
    def _norm_deps(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if isinstance(v, (list, tuple)):
            return [str(x).strip() for x in v if str(x or "").strip()]
        return v

    @property
    def patcher_file(self) -> str:
        head, sep, tail = self.patcher.rpartition(":")
        if sep and _CALLABLE_RE.fullmatch(tail):
            return head
        return self.patcher

    @property
    def patcher_callable(self) -> str:
        head, sep, tail = self.patcher.rpartition(":")
        if sep and _CALLABLE_RE.fullmatch(tail):
            return tail
        return ""

    @property
    def label(self) -> str:
        return f"{self.unique_name} v{self.version}"


class ModOutcome(str, Enum):
    PENDING = "PENDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


@dataclass
class ModRecord:
    manifest: ModManifest
    mod_dir: str
    manifest_path: str
    enabled: bool = True
    outcome: ModOutcome = ModOutcome.PENDING
    error: str = ""

    @property
    def unique_name(self) -> str:
        return self.manifest.unique_name

    @property
    def patcher_path(self) -> Optional[str]:
        if not self.manifest.patcher_file:
            return None
        return os.path.normpath(os.path.join(self.mod_dir, self.manifest.patcher_file))


@dataclass
class DiscoveryResult:
    records: List[ModRecord] = field(default_factory=list)
    errors: List[ManifestError] = field(default_factory=list)

    def by_name(self, unique_name: str) -> Optional[ModRecord]:
        for rec in self.records:
            if rec.unique_name == unique_name:
                return rec
        return None
