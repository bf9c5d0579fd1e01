from __future__ import annotations

import json
import sys

from modloader.core.config import ConfigManager
from modloader.core.config.paths import ConfigFsPaths


def main() -> None:
    root = sys.argv[1] if len(sys.argv) > 1 else "."
    cm = ConfigManager(fs=ConfigFsPaths(root), logger=None, read_only=True)
    cfg = cm.load()
    out = cfg.model_dump(mode="json")
    out["_derived"] = {
        "managed_path": cfg.managed_path,
        "exe_path": cfg.exe_path,
        "mods_path": cfg.mods_path(root),
        "steam_launch_uri": cfg.steam_launch_uri,
    }
    print(json.dumps(out, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
