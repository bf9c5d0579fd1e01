from __future__ import annotations

from typing import Dict, Optional, Protocol

from modloader.core.config.models import IsolationMode
from modloader.core.console import MessageType, ModConsole
from modloader.core.errors import ExtensionExecutionError
from modloader.core.execution.inline_runner import InlinePatcherRunner
from modloader.core.execution.models import PatcherRequest, PatcherResult
from modloader.core.execution.process_runner import ProcessPatcherRunner
from modloader.core.modules.models import ModRecord


class PatcherRunner(Protocol):
    def run(self, request: PatcherRequest) -> PatcherResult: ...


def should_execute(record: ModRecord) -> bool:
    return bool(record.manifest.patcher) and bool(record.enabled)


class PatcherExecutor:
    """
    Runs each selected mod's patcher exactly once, one at a time, behind the
    configured isolation boundary. Faults come back as results; nothing raised by
    a patcher escapes execute().
    """

    def __init__(
        self,
        *,
        console: ModConsole,
        base_dir: str,
        isolation: IsolationMode = IsolationMode.process,
        timeout_seconds: Optional[float] = None,
        runners: Optional[Dict[IsolationMode, PatcherRunner]] = None,
    ):
        self.console = console
        self.base_dir = base_dir
        self.isolation = IsolationMode(isolation)
        self.timeout_seconds = timeout_seconds
        self._runners: Dict[IsolationMode, PatcherRunner] = dict(runners or {})

    def _runner(self) -> PatcherRunner:
        runner = self._runners.get(self.isolation)
        if runner is None:
            runner = ProcessPatcherRunner() if self.isolation == IsolationMode.process else InlinePatcherRunner()
            self._runners[self.isolation] = runner
        return runner

    def execute(self, record: ModRecord) -> PatcherResult:
        manifest = record.manifest
        if not should_execute(record):
            self.console.write_line(f"Skipping patcher for {manifest.label}", MessageType.Debug)
            return PatcherResult(unique_name=manifest.unique_name, version=manifest.version, ok=True, skipped=True)

        self.console.write_line(f"Executing patcher for {manifest.label}", MessageType.Message)
        try:
            request = PatcherRequest(
                unique_name=manifest.unique_name,
                version=manifest.version,
                patcher_path=record.patcher_path or "",
                patcher_callable=manifest.patcher_callable,
                base_dir=self.base_dir,
                timeout_seconds=self.timeout_seconds,
            )
            result = self._runner().run(request)
        except Exception as e:  # noqa: BLE001
            result = PatcherResult(
                unique_name=manifest.unique_name,
                version=manifest.version,
                ok=False,
                isolation=self.isolation,
                error=f"{e.__class__.__name__}: {e}"[:500],
                error_type=e.__class__.__name__,
            )

        if not result.ok:
            self.console.report(
                ExtensionExecutionError(
                    f"Cannot run patcher for mod {manifest.label}: {result.error}",
                    unique_name=manifest.unique_name,
                    version=manifest.version,
                    error_type=result.error_type,
                )
            )
        return result
