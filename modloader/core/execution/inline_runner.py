from __future__ import annotations

import os
import sys
import time
from contextlib import contextmanager
from typing import Iterator

from modloader.core.config.models import IsolationMode
from modloader.core.execution.models import PatcherRequest, PatcherResult
from modloader.core.execution.worker import exit_code_of, invoke_patcher, prepare_patcher_state


@contextmanager
def isolated_interpreter_state() -> Iterator[None]:
    """
    Snapshot cwd, argv, sys.path and sys.modules; restore them on exit so one
    patcher's imports and chdir never leak into the next.
    """
    cwd = os.getcwd()
    argv = list(sys.argv)
    path = list(sys.path)
    modules = set(sys.modules)
    try:
        yield
    finally:
        os.chdir(cwd)
        sys.argv = argv
        sys.path[:] = path
        for name in [m for m in sys.modules if m not in modules]:
            sys.modules.pop(name, None)


class InlinePatcherRunner:
    """In-process boundary: faults are contained, interpreter state is restored."""

    def run(self, request: PatcherRequest) -> PatcherResult:
        base = {"unique_name": request.unique_name, "version": request.version, "isolation": IsolationMode.inline}
        start_ts = time.monotonic()
        try:
            with isolated_interpreter_state():
                prepare_patcher_state(patcher_path=request.patcher_path, base_dir=request.base_dir)
                invoke_patcher(patcher_path=request.patcher_path, patcher_callable=request.patcher_callable)
        except SystemExit as e:
            code = exit_code_of(e)
            duration_ms = (time.monotonic() - start_ts) * 1000.0
            if code == 0:
                return PatcherResult(ok=True, exit_code=0, duration_ms=duration_ms, **base)
            return PatcherResult(ok=False, error=f"patcher exited with code {code}", error_type="SystemExit", exit_code=code, duration_ms=duration_ms, **base)
        except Exception as e:  # noqa: BLE001
            duration_ms = (time.monotonic() - start_ts) * 1000.0
            return PatcherResult(ok=False, error=f"{e.__class__.__name__}: {e}"[:500], error_type=e.__class__.__name__, duration_ms=duration_ms, **base)
        return PatcherResult(ok=True, duration_ms=(time.monotonic() - start_ts) * 1000.0, **base)
