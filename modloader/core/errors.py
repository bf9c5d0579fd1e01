from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class Severity(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class LoaderError(Exception):
    code: str
    user_message: str
    severity: Severity = Severity.ERROR
    recoverable: bool = True
    context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.code)

    def __str__(self) -> str:
        return self.user_message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "user_message": self.user_message,
            "severity": self.severity.value,
            "recoverable": bool(self.recoverable),
            "context": dict(self.context or {}),
        }


# ---- Environment ----
class ConfigError(LoaderError):
    def __init__(self, user_message: str = "Configuration error.", **ctx: Any):
        super().__init__("config_error", user_message, severity=Severity.CRITICAL, recoverable=False, context=ctx)


class HostNotFoundError(LoaderError):
    def __init__(self, user_message: str = "Game installation not found.", **ctx: Any):
        super().__init__("host_not_found", user_message, severity=Severity.CRITICAL, recoverable=False, context=ctx)


# ---- Per-unit failures (reported, never fatal) ----
class ManifestError(LoaderError):
    def __init__(self, user_message: str = "Invalid mod manifest.", **ctx: Any):
        super().__init__("manifest_error", user_message, severity=Severity.ERROR, recoverable=True, context=ctx)

    @property
    def mod_dir(self) -> str:
        return str(self.context.get("mod_dir") or "")


class VersionMismatchWarning(LoaderError):
    def __init__(self, user_message: str = "Game version mismatch.", **ctx: Any):
        super().__init__("version_mismatch", user_message, severity=Severity.WARN, recoverable=True, context=ctx)


class FileStageError(LoaderError):
    def __init__(self, user_message: str = "Unable to copy file.", **ctx: Any):
        super().__init__("file_stage_error", user_message, severity=Severity.ERROR, recoverable=True, context=ctx)


class ExtensionExecutionError(LoaderError):
    def __init__(self, user_message: str = "Patcher failed.", **ctx: Any):
        super().__init__("extension_execution_error", user_message, severity=Severity.ERROR, recoverable=True, context=ctx)

    @property
    def unique_name(self) -> str:
        return str(self.context.get("unique_name") or "")


class LaunchError(LoaderError):
    def __init__(self, user_message: str = "Unable to start the game.", **ctx: Any):
        super().__init__("launch_error", user_message, severity=Severity.ERROR, recoverable=True, context=ctx)
