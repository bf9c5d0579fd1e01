from __future__ import annotations

"""
Mod discovery (no-import scanning).

Reads manifest.json from every immediate subdirectory of the mods root, in the
order the directory listing returns them. A broken manifest costs only that
one mod; the scan always runs to completion.
"""

import json
import os
from typing import Callable, Dict, List, Mapping, Optional

from pydantic import ValidationError

from modloader.core.constants import MANIFEST_FILE_NAME
from modloader.core.errors import ManifestError
from modloader.core.modules.models import DiscoveryResult, ModManifest, ModRecord


def _validation_summary(e: ValidationError) -> str:
    parts = []
    for err in e.errors()[:3]:
        loc = ".".join(str(x) for x in err.get("loc") or ()) or "manifest"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


class ModDiscovery:
    def __init__(
        self,
        *,
        mods_root: str,
        overrides: Optional[Mapping[str, bool]] = None,
        list_dir: Callable[[str], List[str]] = os.listdir,
    ):
        self.mods_root = str(mods_root)
        self.overrides: Dict[str, bool] = dict(overrides or {})
        self._list_dir = list_dir

    def scan(self) -> DiscoveryResult:
        result = DiscoveryResult()
        if not os.path.isdir(self.mods_root):
            return result
        try:
            names = list(self._list_dir(self.mods_root))
        except OSError as e:
            result.errors.append(ManifestError(f"Cannot list mods directory {self.mods_root}: {e}", mod_dir=self.mods_root))
            return result

        claimed: Dict[str, str] = {}
        for name in names:
            if name.startswith(".") or name.startswith("_"):
                continue
            mod_dir = os.path.join(self.mods_root, name)
            # folders without a manifest are not mods
            if not os.path.isfile(os.path.join(mod_dir, MANIFEST_FILE_NAME)):
                continue
            try:
                record = self._load_record(mod_dir)
            except ManifestError as e:
                result.errors.append(e)
                continue

            owner = claimed.get(record.unique_name)
            if owner is not None:
                # first-seen wins; later duplicates never reach the executable set
                result.errors.append(
                    ManifestError(
                        f"Duplicate mod {record.unique_name} in {name} (already provided by {os.path.basename(owner)})",
                        mod_dir=mod_dir,
                        unique_name=record.unique_name,
                        duplicate_of=owner,
                    )
                )
                continue
            claimed[record.unique_name] = mod_dir
            result.records.append(record)
        return result

    def _load_record(self, mod_dir: str) -> ModRecord:
        manifest_path = os.path.join(mod_dir, MANIFEST_FILE_NAME)
        folder = os.path.basename(mod_dir)
        try:
            with open(manifest_path, "r", encoding="utf-8-sig") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ManifestError(f"Invalid JSON in {folder}/{MANIFEST_FILE_NAME}: {e}", mod_dir=mod_dir) from e
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestError(f"Cannot read {folder}/{MANIFEST_FILE_NAME}: {e}", mod_dir=mod_dir) from e
        if not isinstance(raw, dict):
            raise ManifestError(f"Manifest in {folder} is not an object", mod_dir=mod_dir)
        try:
            manifest = ModManifest.model_validate(raw)
        except ValidationError as e:
            raise ManifestError(f"Invalid manifest in {folder}: {_validation_summary(e)}", mod_dir=mod_dir) from e

        enabled = self.overrides.get(manifest.unique_name, manifest.enabled)
        return ModRecord(manifest=manifest, mod_dir=mod_dir, manifest_path=manifest_path, enabled=bool(enabled))


def missing_dependencies(records: List[ModRecord]) -> Dict[str, List[str]]:
    """
    For each enabled mod, the declared dependencies no enabled mod provides.
    Advisory only: execution order stays discovery order.
    """
    available = {r.unique_name for r in records if r.enabled}
    out: Dict[str, List[str]] = {}
    for rec in records:
        if not rec.enabled:
            continue
        missing = [d for d in rec.manifest.dependencies if d not in available]
        if missing:
            out[rec.unique_name] = missing
    return out
