from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from reconciler.core.config.rules_loader import PatchRules, load_rules
from reconciler.core.config.settings import ReconcilerSettings
from reconciler.core.graph.models import ProjectNode, Task
from reconciler.core.graph.project_graph import ProjectGraph
from reconciler.core.layout.remapper import remap
from reconciler.core.ordering.enforcer import enforce
from reconciler.core.patching.patcher import PatchPass

log = logging.getLogger("reconciler.reconcile")


@dataclass
class ReconcileResult:
    output_dirs: Dict[str, Path]
    anchor: str
    edges: List[Tuple[str, str]] = field(default_factory=list)
    patch_pass: Optional[PatchPass] = None


def resolve_anchor(graph: ProjectGraph, name: Optional[str]) -> ProjectNode:
    if name:
        node = graph.get(name)
        if node is not None:
            return node
        log.info("Anchor project %s not in graph; using root project %s", name, graph.root.name)
    return graph.root


def reconcile(
    graph: ProjectGraph,
    settings: Optional[ReconcilerSettings] = None,
    rules: Optional[PatchRules] = None,
) -> ReconcileResult:
    """
    Run the reconciliation pass over a freshly built graph.

    Output paths and ordering edges are applied immediately; the patch pass
    is registered on the graph's projects-evaluated hook so it only reads
    fully configured projects.
    """
    if graph.evaluated:
        raise RuntimeError("reconcile() must run before the graph is evaluated")

    settings = settings or ReconcilerSettings.from_env()
    if rules is None:
        rules = load_rules(settings.rules_file)

    output_dirs = remap(
        graph.default_output_dir,
        graph.projects,
        root_project=graph.root,
        relocation=settings.relocation,
    )

    anchor = resolve_anchor(graph, settings.anchor)
    edges = enforce(graph.subprojects, anchor)

    patch_pass = PatchPass(rules.patch_targets, rules.task_disable_rules)
    graph.projects_evaluated(lambda g: patch_pass.run(g.projects))

    log.debug(
        "reconcile root=%s anchor=%s edges=%s targets=%s disable_rules=%s rules_source=%s",
        graph.root.name,
        anchor.name,
        len(edges),
        len(rules.patch_targets),
        len(rules.task_disable_rules),
        rules.source,
    )
    return ReconcileResult(output_dirs=output_dirs, anchor=anchor.name, edges=edges, patch_pass=patch_pass)


def register_clean_task(graph: ProjectGraph) -> Task:
    """Root `clean` task: deletes the root project's output directory."""
    root = graph.root

    def _clean(task: Task) -> None:
        target = root.output_dir
        if target is None or not Path(target).exists():
            return
        shutil.rmtree(target)
        log.info("clean removed %s", target)

    return root.tasks.register("clean", action=_clean)
