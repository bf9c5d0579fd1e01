from __future__ import annotations

import os
import runpy
import sys
import time
import traceback
from typing import Any, Dict


def exit_code_of(exc: SystemExit) -> int:
    code = exc.code
    if code is None:
        return 0
    if isinstance(code, bool):
        return int(code)
    if isinstance(code, int):
        return code
    return 1


def prepare_patcher_state(*, patcher_path: str, base_dir: str) -> None:
    """Working directory = game root, argv[1] = the patcher's own directory."""
    patcher_dir = os.path.dirname(patcher_path)
    os.chdir(base_dir)
    sys.argv = [patcher_path, patcher_dir]
    if patcher_dir not in sys.path:
        sys.path.insert(0, patcher_dir)


def invoke_patcher(*, patcher_path: str, patcher_callable: str = "") -> None:
    if not os.path.isfile(patcher_path):
        raise FileNotFoundError(f"patcher not found: {patcher_path}")
    patcher_dir = os.path.dirname(patcher_path)
    if not patcher_callable:
        runpy.run_path(patcher_path, run_name="__main__")
        return
    namespace = runpy.run_path(patcher_path, run_name="modloader_patcher")
    fn = namespace.get(patcher_callable)
    if not callable(fn):
        raise AttributeError(f"{os.path.basename(patcher_path)} has no callable {patcher_callable!r}")
    fn(patcher_dir)


def patcher_main(request: Dict[str, Any], q) -> None:  # noqa: ANN001
    """
    Process entrypoint (spawn-safe).
    Emits events back to the loader via q:
      {"event_type": "...", "payload": {...}, "ts": <epoch>}
    """

    def emit(event_type: str, payload: Dict[str, Any]) -> None:
        q.put({"event_type": event_type, "payload": payload, "ts": time.time()})

    emit("started", {"pid": os.getpid()})
    try:
        prepare_patcher_state(patcher_path=request["patcher_path"], base_dir=request["base_dir"])
        invoke_patcher(patcher_path=request["patcher_path"], patcher_callable=request.get("patcher_callable") or "")
        emit("finished", {"ok": True})
    except SystemExit as e:
        code = exit_code_of(e)
        if code == 0:
            emit("finished", {"ok": True})
            return
        emit("error", {"type": "SystemExit", "message": f"patcher exited with code {code}", "exit_code": code})
        emit("finished", {"ok": False})
    except Exception as e:  # noqa: BLE001
        emit(
            "error",
            {
                "type": e.__class__.__name__,
                "message": str(e)[:500],
                "traceback": traceback.format_exc(limit=20)[-4000:],
            },
        )
        emit("finished", {"ok": False})


def describe_error(payload: Dict[str, Any]) -> str:
    kind = str(payload.get("type") or "Error")
    message = str(payload.get("message") or "")
    if kind == "SystemExit" or not message:
        return message or kind
    return f"{kind}: {message}"
