from __future__ import annotations

from modloader.core.console import MessageType, ModConsole
from modloader.core.errors import LaunchError
from modloader.core.launch.models import LaunchKind, LaunchPlan
from modloader.core.launch.process import ProcessHelper

_LABELS = {
    LaunchKind.exe: "exe",
    LaunchKind.epic: "Epic Launcher",
    LaunchKind.steam: "Steam",
}


class GameLauncher:
    def __init__(self, *, console: ModConsole, process_helper: ProcessHelper):
        self.console = console
        self.process_helper = process_helper

    def start(self, plan: LaunchPlan) -> bool:
        """One attempt, no retry and no fallback to another strategy."""
        self.console.write_line(f"Starting game via {_LABELS[plan.kind]}...", MessageType.Info)
        try:
            if plan.via_storefront:
                self.process_helper.open_uri(plan.target)
            else:
                self.process_helper.start(plan.target, plan.arguments)
        except Exception as e:  # noqa: BLE001
            self.console.report(LaunchError(f"Error while starting game: {e}", kind=plan.kind.value, target=plan.target))
            return False
        return True
