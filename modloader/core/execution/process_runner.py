from __future__ import annotations

import multiprocessing as mp
import queue
import time
from typing import Any, Dict, List, Optional

from modloader.core.config.models import IsolationMode
from modloader.core.execution.models import PatcherRequest, PatcherResult
from modloader.core.execution.worker import describe_error, patcher_main


class ProcessPatcherRunner:
    """
    Runs one patcher in a fresh spawn-context process. The process and its
    queue are released on every exit path, including timeouts and crashes.
    """

    def __init__(self, *, start_method: str = "spawn", poll_interval: float = 0.1, grace_seconds: float = 2.0):
        self._ctx = mp.get_context(start_method)
        self.poll_interval = float(poll_interval)
        self.grace_seconds = float(grace_seconds)

    def run(self, request: PatcherRequest) -> PatcherResult:
        q = self._ctx.Queue()  # type: ignore[attr-defined]
        proc = self._ctx.Process(  # type: ignore[attr-defined]
            target=patcher_main,
            args=(request.model_dump(), q),
            name=f"{request.unique_name}.Patcher",
            daemon=True,
        )
        start_ts = time.monotonic()
        try:
            proc.start()
            events, timed_out = self._collect(proc, q, request.timeout_seconds)
            if not timed_out:
                proc.join(timeout=self.grace_seconds)
            exit_code = proc.exitcode
        finally:
            self._teardown(proc, q)
        duration_ms = (time.monotonic() - start_ts) * 1000.0

        base = {
            "unique_name": request.unique_name,
            "version": request.version,
            "isolation": IsolationMode.process,
            "duration_ms": duration_ms,
        }
        if timed_out:
            return PatcherResult(ok=False, error=f"patcher timed out after {request.timeout_seconds:g}s", error_type="timeout", timed_out=True, **base)

        finished = next((e for e in events if e.get("event_type") == "finished"), None)
        error = next((e for e in events if e.get("event_type") == "error"), None)
        if finished is not None and bool((finished.get("payload") or {}).get("ok")):
            return PatcherResult(ok=True, exit_code=exit_code, **base)
        if error is not None:
            payload: Dict[str, Any] = error.get("payload") or {}
            return PatcherResult(
                ok=False,
                error=describe_error(payload),
                error_type=str(payload.get("type") or ""),
                exit_code=payload.get("exit_code", exit_code),
                **base,
            )
        return PatcherResult(ok=False, error=f"patcher process exited unexpectedly (exit code {exit_code})", error_type="crash", exit_code=exit_code, **base)

    def _collect(self, proc, q, timeout_seconds: Optional[float]) -> tuple[List[Dict[str, Any]], bool]:  # noqa: ANN001
        events: List[Dict[str, Any]] = []
        deadline = None if timeout_seconds is None else time.monotonic() + float(timeout_seconds)
        while True:
            try:
                msg = q.get(timeout=self.poll_interval)
            except queue.Empty:
                msg = None
            if isinstance(msg, dict):
                events.append(msg)
                if msg.get("event_type") == "finished":
                    return events, False
                continue
            if not proc.is_alive():
                # drain anything flushed right before exit
                while True:
                    try:
                        msg = q.get(timeout=self.poll_interval)
                    except queue.Empty:
                        break
                    if isinstance(msg, dict):
                        events.append(msg)
                return events, False
            if deadline is not None and time.monotonic() > deadline:
                return events, True

    def _teardown(self, proc, q) -> None:  # noqa: ANN001
        try:
            if proc.is_alive():
                proc.terminate()
                proc.join(timeout=self.grace_seconds)
            if proc.is_alive():
                proc.kill()
                proc.join(timeout=self.grace_seconds)
        finally:
            q.close()
            q.join_thread()
            if not proc.is_alive():
                proc.close()
