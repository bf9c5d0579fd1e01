from __future__ import annotations

import os
import subprocess
import sys
from typing import List, Optional, Sequence


class ProcessHelper:
    """Thin process boundary; swapped for a fake in tests."""

    def start(self, exe_path: str, arguments: Sequence[str] = ()) -> subprocess.Popen:
        cmd: List[str] = [exe_path, *[str(a) for a in arguments]]
        return subprocess.Popen(cmd, cwd=os.path.dirname(exe_path) or None)  # noqa: S603

    def open_uri(self, uri: str) -> Optional[subprocess.Popen]:
        """Hand a storefront URI to the OS; the loader does not own what it starts."""
        if sys.platform.startswith("win"):
            os.startfile(uri)  # type: ignore[attr-defined]  # noqa: S606
            return None
        opener = "open" if sys.platform == "darwin" else "xdg-open"
        return subprocess.Popen(
            [opener, uri],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )  # noqa: S603,S607

    def exit_current_process(self, code: int = 0) -> None:
        sys.exit(code)
