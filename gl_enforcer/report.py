"""Change log and compliance reports."""

from __future__ import annotations

import html
import json
from typing import Any

from gl_enforcer.models import APPROVAL_SETTINGS, PROJECT_SETTINGS, SnapshotStore
from gl_enforcer.settings import lookup_setting

SUBSECTIONS = (APPROVAL_SETTINGS, PROJECT_SETTINGS)

# project -> subsection -> setting -> (from, to)
ChangeLog = dict[str, dict[str, dict[str, tuple[Any, Any]]]]


def render_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def build_changelog(snapshots: SnapshotStore) -> ChangeLog:
    """Per-field differences between the original and updated snapshots of every project."""
    changelog: ChangeLog = {}
    for subsection in SUBSECTIONS:
        original, updated = snapshots.pairs(subsection)
        for path, before in original.items():
            after = updated.get(path)
            if before is None or after is None:
                continue
            for change in before.diff(after):
                section = changelog.setdefault(path, {}).setdefault(subsection, {})
                section[change.field] = (change.before, change.after)
    return changelog


def format_changelog(changelog: ChangeLog) -> str:
    if not changelog:
        return "\nNo changes discovered.\n"

    width = max(len(s) for sections in changelog.values() for data in sections.values() for s in data) + 2
    lines = ["", "CHANGE LOG"]
    for name in sorted(changelog):
        lines.append(f"  {name}")
        for subsection in sorted(changelog[name]):
            lines.append(f"    {subsection}:")
            for setting in sorted(changelog[name][subsection]):
                before, after = changelog[name][subsection][setting]
                lines.append(f'      {setting + ":":<{width}}"{render_value(before)}" => "{render_value(after)}"')
        lines.append("")
    return "\n".join(lines) + "\n"


def compliance_rows(snapshots: SnapshotStore, mandatory: dict[str, dict[str, Any]]):
    """
    Yield ``(project, subsection, setting, actual, expected, compliant)`` for every mandatory setting.

    Projects, subsections and settings come out sorted. Settings that are not
    fields of their subsection yield ``NOT VALID SETTING`` as the actual value.
    """
    projects = sorted(set(snapshots.project_original) | set(snapshots.approval_original))
    for project in projects:
        for subsection in sorted(mandatory):
            original = snapshots.pairs(subsection)[0] if subsection in SUBSECTIONS else {}
            snapshot = original.get(project)
            for setting in sorted(mandatory[subsection]):
                expected = mandatory[subsection][setting]
                actual = lookup_setting(subsection, setting, snapshot)
                yield project, subsection, setting, actual, expected, actual == expected


def _setting_width(mandatory: dict[str, dict[str, Any]]) -> int:
    return max((len(s) for settings in mandatory.values() for s in settings), default=0) + 2


def _annotated(actual: Any, expected: Any, compliant: bool) -> str:
    text = render_value(actual)
    if not compliant:
        text += f" ({render_value(expected)})"
    return text


def format_compliance_report(snapshots: SnapshotStore, mandatory: dict[str, dict[str, Any]]) -> str:
    width = _setting_width(mandatory)
    lines = ["", "COMPLIANCE REPORT"]
    current_project = current_subsection = None
    for project, subsection, setting, actual, expected, compliant in compliance_rows(snapshots, mandatory):
        if project != current_project:
            if current_project is not None:
                lines.append("")
            lines.append(f"  {project}")
            current_project, current_subsection = project, None
        if subsection != current_subsection:
            lines.append(f"    {subsection}:")
            current_subsection = subsection
        lines.append(f"      {setting + ':':<{width}}{_annotated(actual, expected, compliant)}")
    lines.append("")
    return "\n".join(lines) + "\n"


def format_compliance_html(snapshots: SnapshotStore, mandatory: dict[str, dict[str, Any]]) -> str:
    rows = ["<h2>Compliance Report</h2>", "<table>"]
    current_project = current_subsection = None
    for project, subsection, setting, actual, expected, compliant in compliance_rows(snapshots, mandatory):
        if project != current_project:
            rows.append(f' <tr><td colspan="2" style="text-indent:20px"><b>{html.escape(project)}</b></td></tr>')
            current_project, current_subsection = project, None
        if subsection != current_subsection:
            rows.append(f' <tr><td colspan="2" style="text-indent:40px"><b>{html.escape(subsection)}</b></td></tr>')
            current_subsection = subsection
        style = "" if compliant else ' style="color:#c00"'
        rows.append(
            f' <tr><td style="text-indent:60px">{html.escape(setting)}:</td>'
            f"<td{style}>{html.escape(_annotated(actual, expected, compliant))}</td></tr>"
        )
    rows.append("</table>")
    return "\r\n".join(rows) + "\r\n"
