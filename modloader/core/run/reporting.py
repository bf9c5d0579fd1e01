from __future__ import annotations

from typing import Any, Dict

from modloader.core.run.models import RunReport


def to_human(report: RunReport) -> str:
    lines = []
    lines.append(f"Loader run {report.trace_id}: terminal={report.terminal_state.value if report.terminal_state else '-'}")
    if report.game_path:
        lines.append(f"Game: {report.game_path} (version {report.game_version or 'unknown'})")
    for st in report.stages:
        line = f"- {st.state.value}: {st.status.value}"
        if st.message:
            line += f" - {st.message}"
        lines.append(line)
    if report.mods:
        lines.append("Mods:")
        for m in report.mods:
            state = "enabled" if m.enabled else "disabled"
            line = f"- {m.unique_name} v{m.version} ({state}): {m.outcome}"
            if m.error:
                line += f" - {m.error}"
            lines.append(line)
    if report.manifest_errors:
        lines.append("Manifest errors:")
        for e in report.manifest_errors:
            lines.append(f"- {e}")
    if report.launch_plan is not None:
        lines.append(f"Launch: {report.launch_plan.kind.value} -> {report.launch_plan.target} (started={report.launched})")
    return "\n".join(lines)


def to_json_dict(report: RunReport) -> Dict[str, Any]:
    return report.model_dump(mode="json")
