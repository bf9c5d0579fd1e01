from modloader.core.host.files import HostFilePreparer, HostPatcher
from modloader.core.host.locator import HostPathFinder, read_game_version
from modloader.core.host.models import HostInstallation
from modloader.core.host.version import GameVersionHandler, VersionCheckResult, VersionStatus, compare_versions

__all__ = [
    "GameVersionHandler",
    "HostFilePreparer",
    "HostInstallation",
    "HostPatcher",
    "HostPathFinder",
    "VersionCheckResult",
    "VersionStatus",
    "compare_versions",
    "read_game_version",
]
