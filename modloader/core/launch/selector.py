from __future__ import annotations

from typing import Iterable, List

from modloader.core.arguments import strip_argument
from modloader.core.config.models import LoaderConfig
from modloader.core.constants import CONSOLE_PORT_ARGUMENT
from modloader.core.host.models import HostInstallation
from modloader.core.launch.models import LaunchKind, LaunchPlan


def strip_console_port(arguments: Iterable[str]) -> List[str]:
    return strip_argument(arguments, CONSOLE_PORT_ARGUMENT)


def _path_has_marker(path: str, marker: str) -> bool:
    marker = str(marker or "").strip().lower()
    return bool(marker) and marker in str(path or "").lower()


def select_launch_plan(config: LoaderConfig, host: HostInstallation, arguments: Iterable[str]) -> LaunchPlan:
    """
    Precedence: forced exe, Epic install, Steam install, exe fallback.
    Storefront launches cannot carry arguments; they get an empty list.
    """
    forwarded = strip_console_port(arguments)

    if config.force_exe:
        return LaunchPlan(kind=LaunchKind.exe, target=host.exe_path, arguments=forwarded, reason="force_exe")
    if _path_has_marker(host.game_path, config.epic_marker):
        return LaunchPlan(kind=LaunchKind.epic, target=config.epic_launch_uri, reason="epic_path")
    if _path_has_marker(host.game_path, config.steam_marker):
        return LaunchPlan(kind=LaunchKind.steam, target=config.steam_launch_uri, reason="steam_path")
    return LaunchPlan(kind=LaunchKind.exe, target=host.exe_path, arguments=forwarded, reason="default_exe")
