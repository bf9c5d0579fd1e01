from __future__ import annotations

import os
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from modloader import __version__
from modloader.core.arguments import ArgumentHelper
from modloader.core.config.manager import ConfigManager
from modloader.core.config.models import IsolationMode, LoaderConfig
from modloader.core.console import MessageType, ModConsole
from modloader.core.constants import CONSOLE_PORT_ARGUMENT
from modloader.core.errors import ConfigError, HostNotFoundError
from modloader.core.execution.executor import PatcherExecutor, PatcherRunner
from modloader.core.host.files import HostFilePreparer, HostPatcher
from modloader.core.host.locator import HostPathFinder
from modloader.core.host.models import HostInstallation
from modloader.core.host.version import GameVersionHandler, VersionStatus, check_loader_compatibility
from modloader.core.launch.launcher import GameLauncher
from modloader.core.launch.process import ProcessHelper
from modloader.core.launch.selector import select_launch_plan
from modloader.core.modules.discovery import ModDiscovery, missing_dependencies
from modloader.core.modules.models import DiscoveryResult, ModOutcome, ModRecord
from modloader.core.ops_log import OpsLogger
from modloader.core.run.models import ModSummary, RunReport, RunState, StageResult, StageStatus

StageReturn = Tuple[Any, StageStatus, str]


def wait_for_enter() -> None:
    try:
        input()
    except (EOFError, KeyboardInterrupt):
        return


class LoaderApp:
    """
    Runs one loader pass:
    locate game -> check version -> stage files -> discover mods -> list mods
    -> core patches -> mod patchers -> launch -> detach or wait.

    Only a missing game install stops the run. Every other stage failure is
    reported and the next stage still runs.
    """

    def __init__(
        self,
        *,
        config_manager: ConfigManager,
        console: ModConsole,
        loader_root: str,
        process_helper: Optional[ProcessHelper] = None,
        path_finder: Optional[HostPathFinder] = None,
        ops: Optional[OpsLogger] = None,
        wait_for_exit: Optional[Callable[[], None]] = None,
        patcher_runners: Optional[Dict[IsolationMode, PatcherRunner]] = None,
        loader_version: str = __version__,
    ):
        self.config_manager = config_manager
        self.console = console
        self.loader_root = loader_root
        self.process_helper = process_helper or ProcessHelper()
        self._path_finder = path_finder
        self.ops = ops
        self.wait_for_exit = wait_for_exit or wait_for_enter
        self.patcher_runners = patcher_runners
        self.loader_version = loader_version

    @property
    def config(self) -> LoaderConfig:
        return self.config_manager.get()

    # ---------- run ----------
    def run(self, arguments: Iterable[str]) -> RunReport:
        args = ArgumentHelper(arguments)
        report = RunReport(trace_id=uuid.uuid4().hex[:12], loader_version=self.loader_version)
        self.console.write_line(f"Started modloader v{self.loader_version}", MessageType.Info)
        self._ops(report, "run.begin", "start", {"arguments": args.arguments})
        report.stages.append(StageResult(state=RunState.START, status=StageStatus.OK))

        host = self._locate_host(report)

        self._stage(report, RunState.CHECK_VERSION, lambda: self._check_version(host))
        self._stage(report, RunState.STAGE_FILES, lambda: self._copy_game_files(host))
        discovery: Optional[DiscoveryResult] = self._stage(report, RunState.DISCOVER, self._discover)
        records: List[ModRecord] = discovery.records if discovery is not None else []
        if discovery is not None:
            report.manifest_errors = [e.user_message for e in discovery.errors]
        self._stage(report, RunState.REPORT_MOD_LIST, lambda: self._show_mod_list(records, discovery))
        self._stage(report, RunState.APPLY_CORE_PATCHES, lambda: self._patch_host(host))
        self._stage(report, RunState.RUN_EXTENSIONS, lambda: self._execute_patchers(records, host, report))

        has_port_argument = args.has_argument(CONSOLE_PORT_ARGUMENT)
        self._stage(report, RunState.LAUNCH, lambda: self._start_game(host, args, report))

        report.mods = [
            ModSummary(
                unique_name=r.unique_name,
                version=r.manifest.version,
                enabled=r.enabled,
                outcome=r.outcome.value,
                error=r.error,
            )
            for r in records
        ]
        terminal = RunState.DETACH_EXIT if has_port_argument else RunState.WAIT_FOREGROUND
        report.stages.append(StageResult(state=terminal, status=StageStatus.OK))
        report.terminal_state = terminal
        self._ops(report, "run.complete", terminal.value, {"launched": report.launched})

        if terminal == RunState.DETACH_EXIT:
            self.process_helper.exit_current_process(0)
        else:
            self.wait_for_exit()
        return report

    # ---------- stage plumbing ----------
    def _stage(self, report: RunReport, state: RunState, fn: Callable[[], StageReturn]) -> Any:
        try:
            value, status, message = fn()
        except Exception as e:  # noqa: BLE001
            self.console.write_line(f"Error in {state.value.lower()}: {e}", MessageType.Error)
            report.stages.append(StageResult(state=state, status=StageStatus.FAILED, message=str(e)[:300]))
            self._ops(report, f"stage.{state.value.lower()}", StageStatus.FAILED.value, {"error": str(e)[:300]})
            return None
        report.stages.append(StageResult(state=state, status=status, message=message))
        self._ops(report, f"stage.{state.value.lower()}", status.value, {"message": message})
        return value

    def _ops(self, report: RunReport, event: str, outcome: str, details: Dict[str, Any]) -> None:
        if self.ops is None:
            return
        try:
            self.ops.log(trace_id=report.trace_id, event=event, outcome=outcome, details=details)
        except OSError as e:
            self.console.write_line(f"Unable to write ops log: {e}", MessageType.Debug)

    # ---------- stages ----------
    def _locate_host(self, report: RunReport) -> HostInstallation:
        finder = self._path_finder or HostPathFinder(self.config)
        try:
            host = finder.locate()
        except HostNotFoundError as e:
            self.console.report(e)
            report.stages.append(StageResult(state=RunState.LOCATE_HOST, status=StageStatus.FAILED, message=e.user_message))
            self._ops(report, "stage.locate_host", StageStatus.FAILED.value, e.to_dict())
            raise
        self.console.write_line(f"Game found in {host.game_path}", MessageType.Info)
        report.game_path = host.game_path
        report.game_version = host.version

        status, message = StageStatus.OK, ""
        if not self.config.game_path or os.path.normpath(self.config.game_path) != host.game_path:
            try:
                self.config_manager.set_game_path(host.game_path)
                message = "game path saved"
            except (ConfigError, OSError) as e:
                self.console.write_line(f"Unable to save game path: {e}", MessageType.Warning)
                status, message = StageStatus.DEGRADED, "game path not saved"
        report.stages.append(StageResult(state=RunState.LOCATE_HOST, status=status, message=message))
        self._ops(report, "stage.locate_host", status.value, {"game_path": host.game_path, "version": host.version})
        return host

    def _check_version(self, host: HostInstallation) -> StageReturn:
        handler = GameVersionHandler(console=self.console, expected_version=self.config.expected_game_version)
        res = handler.compare_versions(host.version)
        status = StageStatus.OK if res.status == VersionStatus.MATCH else StageStatus.DEGRADED
        return res, status, res.status.value

    def _copy_game_files(self, host: HostInstallation) -> StageReturn:
        preparer = HostFilePreparer(console=self.console, files=self.config.companion_files)
        copied = preparer.copy_game_files(host.managed_path, self.loader_root)
        total = len(preparer.files)
        status = StageStatus.OK if len(copied) == total else StageStatus.DEGRADED
        return copied, status, f"{len(copied)}/{total} copied"

    def _discover(self) -> StageReturn:
        cfg = self.config
        result = ModDiscovery(mods_root=cfg.mods_path(self.loader_root), overrides=cfg.mods).scan()
        status = StageStatus.DEGRADED if result.errors else StageStatus.OK
        return result, status, f"{len(result.records)} mods, {len(result.errors)} errors"

    def _show_mod_list(self, records: List[ModRecord], discovery: Optional[DiscoveryResult]) -> StageReturn:
        warnings = 0
        for err in discovery.errors if discovery is not None else []:
            self.console.report(err)
            warnings += 1

        if not records:
            self.console.write_line("Warning - No mods found.", MessageType.Warning)
            return None, StageStatus.OK if not warnings else StageStatus.DEGRADED, "no mods"

        self.console.write_line("Found mods:", MessageType.Info)
        for rec in records:
            state_text = "" if rec.enabled else " (disabled)"
            kind = MessageType.Message if rec.enabled else MessageType.Warning
            self.console.write_line(f"* {rec.manifest.label}{state_text}", kind)

        for name, missing in missing_dependencies(records).items():
            self.console.write_line(f"Warning - {name} depends on missing or disabled mods: {', '.join(missing)}", MessageType.Warning)
            warnings += 1
        for name in check_loader_compatibility(records, self.loader_version):
            self.console.write_line(f"Warning - {name} was built for a newer modloader than v{self.loader_version}", MessageType.Warning)
            warnings += 1
        return None, StageStatus.DEGRADED if warnings else StageStatus.OK, f"{len(records)} listed"

    def _patch_host(self, host: HostInstallation) -> StageReturn:
        cfg = self.config
        patcher = HostPatcher(
            console=self.console,
            patch_root=cfg.resolve(self.loader_root, cfg.core_patch_dir),
            files=cfg.core_patch_files,
        )
        patched = patcher.patch_host(host.managed_path)
        total = len(patcher.files)
        status = StageStatus.OK if len(patched) == total else StageStatus.DEGRADED
        return patched, status, f"{len(patched)}/{total} patched"

    def _execute_patchers(self, records: List[ModRecord], host: HostInstallation, report: RunReport) -> StageReturn:
        cfg = self.config
        executor = PatcherExecutor(
            console=self.console,
            base_dir=host.game_path,
            isolation=cfg.execution.isolation,
            timeout_seconds=cfg.execution.timeout_seconds,
            runners=self.patcher_runners,
        )
        self.console.write_line("Executing patchers...", MessageType.Debug)
        failed = 0
        for rec in records:
            result = executor.execute(rec)
            report.patchers.append(result)
            if result.skipped:
                rec.outcome = ModOutcome.SKIPPED
            elif result.ok:
                rec.outcome = ModOutcome.SUCCEEDED
            else:
                rec.outcome = ModOutcome.FAILED
                rec.error = result.error
                failed += 1
            self._ops(report, "patcher.result", rec.outcome.value, {"mod": rec.unique_name, "version": rec.manifest.version, "error": rec.error})
        status = StageStatus.DEGRADED if failed else StageStatus.OK
        return None, status, f"{failed} failed"

    def _start_game(self, host: HostInstallation, args: ArgumentHelper, report: RunReport) -> StageReturn:
        plan = select_launch_plan(self.config, host, args.arguments)
        report.launch_plan = plan
        launcher = GameLauncher(console=self.console, process_helper=self.process_helper)
        report.launched = launcher.start(plan)
        self._ops(report, "launch.result", "ok" if report.launched else "failed", {"kind": plan.kind.value, "target": plan.target})
        status = StageStatus.OK if report.launched else StageStatus.FAILED
        return plan, status, plan.kind.value
