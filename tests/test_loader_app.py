from __future__ import annotations

import os

import pytest

from modloader.core.config.models import IsolationMode
from modloader.core.console import MessageType
from modloader.core.errors import ExtensionExecutionError, HostNotFoundError, LaunchError, ManifestError
from modloader.core.execution.inline_runner import InlinePatcherRunner
from modloader.core.host.locator import HostPathFinder
from modloader.core.launch.models import LaunchKind
from modloader.core.loader_app import LoaderApp
from modloader.core.modules.models import ModOutcome
from modloader.core.ops_log import OpsLogger
from modloader.core.run.models import RunState, StageStatus
from modloader.core.run.reporting import to_human, to_json_dict

from .helpers.fakes import FakeProcessHelper, RecordingConsole, WaitRecorder
from .helpers.log_assertions import events_named, read_jsonl
from .helpers.mod_builders import make_game_dir, write_manifest, write_mod

PATCHER = """
import os
with open(os.path.join(os.getcwd(), {name!r} + ".ran"), "w", encoding="utf-8") as f:
    f.write("ok")
"""


def _app(config_manager, tmp_loader_root, *, helper=None, wait=None, console=None, ops=None, **kw) -> LoaderApp:
    return LoaderApp(
        config_manager=config_manager,
        console=console or RecordingConsole(),
        loader_root=tmp_loader_root.root,
        process_helper=helper or FakeProcessHelper(),
        wait_for_exit=wait or WaitRecorder(),
        patcher_runners={IsolationMode.process: InlinePatcherRunner()},
        ops=ops,
        **kw,
    )


@pytest.fixture
def known_game(config_manager, game_dir):
    config_manager.set_game_path(game_dir)
    return game_dir


def test_full_run_visits_every_state_in_order(config_manager, tmp_loader_root, known_game, mods_root):
    write_mod(mods_root, "a", "Test.A", patcher_source=PATCHER.format(name="Test.A"))
    wait = WaitRecorder()
    helper = FakeProcessHelper()

    report = _app(config_manager, tmp_loader_root, helper=helper, wait=wait).run(["--windowed"])

    assert report.visited == [
        RunState.START,
        RunState.LOCATE_HOST,
        RunState.CHECK_VERSION,
        RunState.STAGE_FILES,
        RunState.DISCOVER,
        RunState.REPORT_MOD_LIST,
        RunState.APPLY_CORE_PATCHES,
        RunState.RUN_EXTENSIONS,
        RunState.LAUNCH,
        RunState.WAIT_FOREGROUND,
    ]
    assert report.terminal_state == RunState.WAIT_FOREGROUND
    assert wait.calls == 1
    assert helper.exits == []
    assert helper.started == [(os.path.join(known_game, "OuterWilds.exe"), ["--windowed"])]
    assert os.path.exists(os.path.join(known_game, "Test.A.ran"))
    assert [m.outcome for m in report.mods] == [ModOutcome.SUCCEEDED.value]
    assert report.stage(RunState.CHECK_VERSION).status == StageStatus.OK


def test_console_port_detaches_after_launch(config_manager, tmp_loader_root, known_game):
    wait = WaitRecorder()
    helper = FakeProcessHelper()

    report = _app(config_manager, tmp_loader_root, helper=helper, wait=wait).run(["--foo", "consolePort=5000", "--bar"])

    assert report.terminal_state == RunState.DETACH_EXIT
    assert helper.exits == [0]
    assert wait.calls == 0
    assert helper.started[0][1] == ["--foo", "--bar"]


def test_missing_game_is_the_only_hard_stop(config_manager, tmp_loader_root, tmp_path):
    config_manager.set_game_path(str(tmp_path / "nowhere"))
    console = RecordingConsole()
    helper = FakeProcessHelper()
    wait = WaitRecorder()
    finder = HostPathFinder(config_manager.get(), env={})

    with pytest.raises(HostNotFoundError):
        _app(config_manager, tmp_loader_root, helper=helper, wait=wait, console=console, path_finder=finder).run([])

    assert len(console.reported_of(HostNotFoundError)) == 1
    assert helper.started == [] and helper.opened == []
    assert wait.calls == 0 and helper.exits == []


def test_found_game_path_is_written_back(config_manager, tmp_loader_root, game_dir):
    assert config_manager.get().game_path == ""
    finder = HostPathFinder(config_manager.get(), env={"MODLOADER_GAME_PATH": game_dir})

    report = _app(config_manager, tmp_loader_root, path_finder=finder).run([])

    assert report.game_path == os.path.normpath(game_dir)
    assert config_manager.load().game_path == os.path.normpath(game_dir)


def test_stage_failure_is_reported_and_run_continues(config_manager, tmp_loader_root, known_game, monkeypatch):
    def boom(self):
        raise RuntimeError("listing exploded")

    monkeypatch.setattr("modloader.core.loader_app.ModDiscovery.scan", boom)
    console = RecordingConsole()
    helper = FakeProcessHelper()

    report = _app(config_manager, tmp_loader_root, helper=helper, console=console).run([])

    assert report.stage(RunState.DISCOVER).status == StageStatus.FAILED
    assert any("listing exploded" in m for m in console.messages(MessageType.Error))
    assert "Warning - No mods found." in console.messages(MessageType.Warning)
    assert report.launched is True
    assert report.terminal_state == RunState.WAIT_FOREGROUND


def test_launch_failure_still_reaches_terminal_state(config_manager, tmp_loader_root, known_game):
    console = RecordingConsole()
    wait = WaitRecorder()

    report = _app(config_manager, tmp_loader_root, helper=FakeProcessHelper(fail_start=True), wait=wait, console=console).run([])

    assert report.launched is False
    assert report.stage(RunState.LAUNCH).status == StageStatus.FAILED
    assert len(console.reported_of(LaunchError)) == 1
    assert wait.calls == 1


def test_faulting_mod_does_not_stop_the_run(config_manager, tmp_loader_root, known_game, mods_root):
    write_mod(mods_root, "one", "Test.One", patcher_source=PATCHER.format(name="Test.One"))
    write_mod(mods_root, "two", "Test.Two", patcher_source="raise RuntimeError('nope')\n")
    write_mod(mods_root, "three", "Test.Three", patcher_source=PATCHER.format(name="Test.Three"))
    write_manifest(mods_root, "broken", "{")
    console = RecordingConsole()

    report = _app(config_manager, tmp_loader_root, console=console).run([])

    outcomes = {m.unique_name: m.outcome for m in report.mods}
    assert outcomes == {
        "Test.One": ModOutcome.SUCCEEDED.value,
        "Test.Two": ModOutcome.FAILED.value,
        "Test.Three": ModOutcome.SUCCEEDED.value,
    }
    (err,) = console.reported_of(ExtensionExecutionError)
    assert err.unique_name == "Test.Two"
    assert len(console.reported_of(ManifestError)) == 1
    assert len(report.manifest_errors) == 1
    assert report.stage(RunState.RUN_EXTENSIONS).status == StageStatus.DEGRADED
    assert report.launched is True


def test_mod_list_marks_disabled_mods(config_manager, tmp_loader_root, known_game, mods_root):
    write_mod(mods_root, "a", "Test.A")
    write_mod(mods_root, "b", "Test.B")
    config_manager.set_mod_enabled("Test.B", False)
    console = RecordingConsole()

    _app(config_manager, tmp_loader_root, console=console).run([])

    assert "* Test.A v1.0.0" in console.messages(MessageType.Message)
    assert "* Test.B v1.0.0 (disabled)" in console.messages(MessageType.Warning)


def test_banner_and_storefront_launch(config_manager, tmp_loader_root, tmp_path):
    steam_game = make_game_dir(str(tmp_path / "SteamLibrary" / "OuterWilds"), version="1.1.15.1018")
    config_manager.set_game_path(steam_game)
    console = RecordingConsole()
    helper = FakeProcessHelper()

    report = _app(config_manager, tmp_loader_root, console=console, helper=helper, loader_version="9.9.9").run(["consolePort=1"])

    assert console.lines[0] == (MessageType.Info, "Started modloader v9.9.9")
    assert report.launch_plan.kind == LaunchKind.steam
    assert helper.opened == ["steam://rungameid/753640"]
    assert helper.started == []
    assert report.terminal_state == RunState.DETACH_EXIT


def test_companion_files_are_staged_into_loader_root(config_manager, tmp_loader_root, known_game):
    managed = os.path.join(known_game, "OuterWilds_Data", "Managed")
    for name in config_manager.get().companion_files:
        with open(os.path.join(managed, name), "w", encoding="utf-8") as f:
            f.write(name)

    report = _app(config_manager, tmp_loader_root).run([])

    assert report.stage(RunState.STAGE_FILES).status == StageStatus.OK
    for name in config_manager.get().companion_files:
        assert os.path.isfile(os.path.join(tmp_loader_root.root, name))


def test_ops_log_records_the_run(config_manager, tmp_loader_root, known_game, mods_root):
    write_mod(mods_root, "a", "Test.A", patcher_source=PATCHER.format(name="Test.A"))
    ops = OpsLogger(path=tmp_loader_root.ops_log)

    report = _app(config_manager, tmp_loader_root, ops=ops).run([])

    events = read_jsonl(tmp_loader_root.ops_log)
    assert {e["trace_id"] for e in events} == {report.trace_id}
    assert events[0]["event"] == "run.begin"
    assert events[-1]["event"] == "run.complete"
    (patcher,) = events_named(tmp_loader_root.ops_log, "patcher.result")
    assert patcher["details"]["mod"] == "Test.A"
    assert events_named(tmp_loader_root.ops_log, "launch.result")[0]["outcome"] == "ok"


def test_report_renders(config_manager, tmp_loader_root, known_game, mods_root):
    write_mod(mods_root, "a", "Test.A")

    report = _app(config_manager, tmp_loader_root).run([])

    text = to_human(report)
    assert "WAIT_FOREGROUND" in text
    assert "Test.A v1.0.0 (enabled): SKIPPED" in text
    assert to_json_dict(report)["launch_plan"]["kind"] == "exe"
