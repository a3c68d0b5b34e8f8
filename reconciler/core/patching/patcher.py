from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from reconciler.core.graph.models import ProjectNode
from reconciler.core.observability.metrics import inc_patch_outcome, inc_tasks_disabled

from .capabilities import lookup_namespace_capability
from .models import PatchFinding, PatchReport, PatchState, PatchTarget, TaskDisableRule

log = logging.getLogger("reconciler.patch")


def find_project(projects: Sequence[ProjectNode], name: str) -> Optional[ProjectNode]:
    for node in projects:
        if node.name == name:
            return node
    return None


def disable_matching_tasks(node: ProjectNode, substrings: Iterable[str]) -> List[str]:
    """
    Disable every task whose name contains one of `substrings`.

    Plain, case-sensitive substring search. Tasks that have not been
    generated yet are simply not matched.
    """
    subs = [s for s in substrings if s]
    if not subs:
        return []

    matched = node.tasks.matching(lambda t: any(s in t.name for s in subs))
    flipped = 0
    for task in matched:
        if task.enabled:
            flipped += 1
        task.enabled = False

    inc_tasks_disabled(flipped)
    return [t.name for t in matched]


def _set_namespace(node: ProjectNode, value: str, report: PatchReport) -> None:
    lookup = lookup_namespace_capability(node.config)
    if not lookup.available:
        log.warning("Failed to set namespace for %s: %s", node.name, lookup.reason)
        report.findings.append(PatchFinding(
            code="patch.capability_missing",
            severity="warn",
            message=f"Failed to set namespace for {node.name}: {lookup.reason}",
            data={"project": node.name, "property": "namespace"},
        ))
        inc_patch_outcome("capability_missing")
        return

    try:
        lookup.capability.set_namespace(value)
    except Exception as e:
        log.warning("Failed to set namespace for %s: %s", node.name, e)
        report.findings.append(PatchFinding(
            code="patch.invocation_failed",
            severity="warn",
            message=f"Failed to set namespace for {node.name}: {e}",
            data={"project": node.name, "property": "namespace", "error": type(e).__name__},
        ))
        inc_patch_outcome("invocation_failed")
        return

    report.namespace_set = True
    inc_patch_outcome("applied")


def patch(projects: Sequence[ProjectNode], rule: PatchTarget) -> PatchReport:
    report = PatchReport(project=rule.match_name)

    node = find_project(projects, rule.match_name)
    if node is None:
        inc_patch_outcome("no_match")
        return report

    report.matched = True

    # namespace and task steps are independent
    _set_namespace(node, rule.namespace_value, report)
    report.disabled_tasks = disable_matching_tasks(node, sorted(rule.task_name_substrings))

    log.debug(
        "patch project=%s namespace_set=%s disabled=%s",
        node.name,
        report.namespace_set,
        report.disabled_tasks,
    )
    return report


def apply_task_disable_rule(projects: Sequence[ProjectNode], rule: TaskDisableRule) -> PatchReport:
    report = PatchReport(project=rule.project_name)

    node = find_project(projects, rule.project_name)
    if node is None:
        return report

    report.matched = True
    report.disabled_tasks = disable_matching_tasks(node, sorted(rule.task_name_substrings))
    return report


class PatchPass:
    """
    Post-configuration patch pass.

    UNAPPLIED -> APPLIED exactly once; later triggers are ignored and
    return the reports of the first run.
    """

    def __init__(
        self,
        targets: Sequence[PatchTarget] = (),
        disable_rules: Sequence[TaskDisableRule] = (),
    ):
        self.targets = list(targets)
        self.disable_rules = list(disable_rules)
        self.state = PatchState.UNAPPLIED
        self.reports: List[PatchReport] = []

    def run(self, projects: Sequence[ProjectNode]) -> List[PatchReport]:
        if self.state == PatchState.APPLIED:
            log.debug("patch pass already applied; ignoring trigger")
            return self.reports

        reports: List[PatchReport] = []
        for target in self.targets:
            reports.append(self._guarded(target.match_name, lambda t=target: patch(projects, t)))
        for rule in self.disable_rules:
            reports.append(
                self._guarded(rule.project_name, lambda r=rule: apply_task_disable_rule(projects, r))
            )

        self.reports = reports
        self.state = PatchState.APPLIED
        return reports

    def _guarded(self, project: str, fn) -> PatchReport:
        try:
            return fn()
        except Exception as e:
            log.warning("Patch pass failed for %s: %s", project, e)
            inc_patch_outcome("failed")
            return PatchReport(
                project=project,
                findings=[PatchFinding(
                    code="patch.failed",
                    severity="warn",
                    message=f"Patch pass failed for {project}: {e}",
                    data={"project": project},
                )],
            )
