"""
Mod manifests and discovery.

Discovery reads manifests only; no mod code is imported or executed here.
"""

from modloader.core.modules.discovery import ModDiscovery, missing_dependencies
from modloader.core.modules.models import DiscoveryResult, ModManifest, ModOutcome, ModRecord

__all__ = ["DiscoveryResult", "ModDiscovery", "ModManifest", "ModOutcome", "ModRecord", "missing_dependencies"]
