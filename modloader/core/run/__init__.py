from modloader.core.run.models import RunReport, RunState, StageResult, StageStatus

__all__ = ["RunReport", "RunState", "StageResult", "StageStatus"]
