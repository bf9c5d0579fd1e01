from modloader.core.config.manager import ConfigManager
from modloader.core.config.models import ExecutionConfig, IsolationMode, LoaderConfig
from modloader.core.config.paths import ConfigFsPaths

__all__ = ["ConfigManager", "ConfigFsPaths", "ExecutionConfig", "IsolationMode", "LoaderConfig"]
