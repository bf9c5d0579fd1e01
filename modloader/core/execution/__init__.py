from modloader.core.execution.executor import PatcherExecutor, should_execute
from modloader.core.execution.inline_runner import InlinePatcherRunner, isolated_interpreter_state
from modloader.core.execution.models import PatcherRequest, PatcherResult
from modloader.core.execution.process_runner import ProcessPatcherRunner

__all__ = [
    "InlinePatcherRunner",
    "PatcherExecutor",
    "PatcherRequest",
    "PatcherResult",
    "ProcessPatcherRunner",
    "isolated_interpreter_state",
    "should_execute",
]
