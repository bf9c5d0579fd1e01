from modloader.core.launch.launcher import GameLauncher
from modloader.core.launch.models import LaunchKind, LaunchPlan
from modloader.core.launch.process import ProcessHelper
from modloader.core.launch.selector import select_launch_plan, strip_console_port

__all__ = ["GameLauncher", "LaunchKind", "LaunchPlan", "ProcessHelper", "select_launch_plan", "strip_console_port"]
