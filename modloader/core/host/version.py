from __future__ import annotations

import re
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from modloader.core.console import MessageType, ModConsole
from modloader.core.errors import VersionMismatchWarning
from modloader.core.modules.models import ModRecord


class VersionStatus(str, Enum):
    MATCH = "MATCH"
    NEWER = "NEWER"
    OLDER = "OLDER"
    MISMATCH = "MISMATCH"


class VersionCheckResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: VersionStatus
    detected: str = ""
    expected: str = ""
    structured: bool = False


_SEGMENT_RE = re.compile(r"\d+")


def parse_version(value: object) -> Optional[Tuple[int, ...]]:
    """
    "1.1.15.1018" -> (1, 1, 15, 1018). Leading "v" and build suffixes after
    "-" or "+" are ignored. Returns None for anything non-numeric.
    """
    s = str(value or "").strip().lower()
    if s.startswith("v"):
        s = s[1:]
    s = re.split(r"[-+ ]", s, maxsplit=1)[0]
    if not s:
        return None
    parts = s.split(".")
    if not all(_SEGMENT_RE.fullmatch(p) for p in parts):
        return None
    nums = [int(p) for p in parts]
    while len(nums) > 1 and nums[-1] == 0:
        nums.pop()
    return tuple(nums)


def compare_versions(detected: object, expected: object) -> VersionCheckResult:
    d_raw = str(detected or "").strip()
    e_raw = str(expected or "").strip()
    d = parse_version(d_raw)
    e = parse_version(e_raw)
    if d is None or e is None:
        status = VersionStatus.MATCH if d_raw == e_raw and d_raw else VersionStatus.MISMATCH
        return VersionCheckResult(status=status, detected=d_raw, expected=e_raw, structured=False)
    if d == e:
        status = VersionStatus.MATCH
    elif d > e:
        status = VersionStatus.NEWER
    else:
        status = VersionStatus.OLDER
    return VersionCheckResult(status=status, detected=d_raw, expected=e_raw, structured=True)


class GameVersionHandler:
    def __init__(self, *, console: ModConsole, expected_version: str):
        self.console = console
        self.expected_version = expected_version

    def compare_versions(self, detected: str) -> VersionCheckResult:
        res = compare_versions(detected, self.expected_version)
        if res.status == VersionStatus.MATCH:
            self.console.write_line(f"Game version {res.detected} matches the supported version.", MessageType.Debug)
            return res
        if res.status == VersionStatus.NEWER:
            warning = VersionMismatchWarning(
                f"Game version {res.detected} is newer than the supported version {res.expected}. The loader may be out of date.",
                detected=res.detected,
                expected=res.expected,
            )
        else:
            shown = res.detected or "unknown"
            warning = VersionMismatchWarning(
                f"Game version {shown} does not match the supported version {res.expected}. The game may be out of date or unsupported.",
                detected=res.detected,
                expected=res.expected,
            )
        self.console.report(warning)
        return res


def check_loader_compatibility(records: List[ModRecord], loader_version: str) -> List[str]:
    """Unique names of mods built against a newer loader than this one."""
    current = parse_version(loader_version)
    out: List[str] = []
    for rec in records:
        wanted = rec.manifest.loader_version
        if not wanted:
            continue
        w = parse_version(wanted)
        if current is None or w is None:
            continue
        if w > current:
            out.append(rec.unique_name)
    return out
