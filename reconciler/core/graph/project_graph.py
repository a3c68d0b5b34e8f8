from __future__ import annotations

import logging
import re
from collections import deque
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .models import ProjectNode, Task

log = logging.getLogger("reconciler.graph")

_VALID_NAME = re.compile(r"^[A-Za-z0-9_.\-]+$")


class CircularDependencyError(Exception):
    pass


class UnknownProjectError(Exception):
    pass


class DuplicateProjectError(ValueError):
    pass


class InvalidProjectNameError(ValueError):
    pass


def validate_project_name(name: str) -> str:
    if not isinstance(name, str) or not _VALID_NAME.match(name) or name in (".", ".."):
        raise InvalidProjectNameError(f"Illegal project name for a path segment: {name!r}")
    return name


class ProjectGraph:
    """
    Minimal multi-project host.

    Owns the project nodes, turns evaluation dependencies into a
    configuration order, fires lifecycle hooks and executes tasks.

    Lifecycle:
      add_project() ... -> evaluate() -> execute()
    """

    def __init__(self, root_name: str, project_dir: str | Path):
        self.project_dir = Path(project_dir)
        self.root = ProjectNode(
            name=validate_project_name(root_name),
            output_dir=self.default_output_dir,
        )
        self._nodes: Dict[str, ProjectNode] = {self.root.name: self.root}
        self._projects_evaluated_hooks: List[Callable[["ProjectGraph"], None]] = []
        self.evaluated = False

    # --- construction ---

    @property
    def default_output_dir(self) -> Path:
        return self.project_dir / "build"

    def add_project(self, name: str, config: Any = None) -> ProjectNode:
        validate_project_name(name)
        if name in self._nodes:
            raise DuplicateProjectError(f"Duplicate project name: {name}")
        node = ProjectNode(
            name=name,
            config=config,
            output_dir=self.project_dir / name / "build",
        )
        self._nodes[name] = node
        return node

    def get(self, name: str) -> Optional[ProjectNode]:
        return self._nodes.get(name)

    @property
    def projects(self) -> List[ProjectNode]:
        return list(self._nodes.values())

    @property
    def subprojects(self) -> List[ProjectNode]:
        return [n for n in self._nodes.values() if n is not self.root]

    def projects_evaluated(self, fn: Callable[["ProjectGraph"], None]) -> None:
        self._projects_evaluated_hooks.append(fn)

    # --- configuration phase ---

    def evaluation_order(self) -> List[str]:
        in_degree: Dict[str, int] = {name: 0 for name in self._nodes}
        edges: Dict[str, List[str]] = {name: [] for name in self._nodes}

        for node in self._nodes.values():
            for dep in node.evaluation_dependencies:
                if dep not in self._nodes:
                    raise UnknownProjectError(
                        f"Project '{node.name}' depends on unknown project '{dep}'"
                    )
                edges[dep].append(node.name)
                in_degree[node.name] += 1

        # registration order breaks ties; the root is registered first
        queue = deque(n for n, d in in_degree.items() if d == 0)
        order: List[str] = []

        while queue:
            current = queue.popleft()
            order.append(current)

            for neighbor in edges[current]:
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    queue.append(neighbor)

        if len(order) != len(self._nodes):
            stuck = sorted(n for n, d in in_degree.items() if d > 0)
            raise CircularDependencyError(
                f"Circular evaluation dependency detected: {', '.join(stuck)}"
            )

        return order

    def evaluate(self) -> List[str]:
        if self.evaluated:
            raise RuntimeError("Project graph has already been evaluated")

        order = self.evaluation_order()
        for name in order:
            node = self._nodes[name]
            for fn in node.configurators:
                fn(node)
            node.evaluated = True
            for hook in list(node.after_evaluate_hooks):
                hook(node)

        self.evaluated = True
        log.debug("graph.evaluate projects=%s order=%s", len(order), order)

        for hook in list(self._projects_evaluated_hooks):
            hook(self)
        return order

    # --- execution phase ---

    def resolve_task(self, path: str) -> Tuple[ProjectNode, Task]:
        """
        "clean" -> root task, ":app:assemble" / "app:assemble" -> project task.
        """
        parts = [p for p in path.split(":") if p]
        if len(parts) == 1:
            node, task_name = self.root, parts[0]
        elif len(parts) == 2:
            node = self._nodes.get(parts[0])
            if node is None:
                raise UnknownProjectError(f"Unknown project in task path: {path}")
            task_name = parts[1]
        else:
            raise ValueError(f"Malformed task path: {path!r}")

        task = node.tasks.get(task_name)
        if task is None:
            raise KeyError(f"Task '{task_name}' not found in project '{node.name}'")
        return node, task

    def execute(self, task_paths: Iterable[str]) -> List[str]:
        if not self.evaluated:
            self.evaluate()

        executed: List[str] = []
        for path in task_paths:
            node, task = self.resolve_task(path)
            if not task.enabled:
                log.info("task.skipped project=%s task=%s reason=disabled", node.name, task.name)
                continue
            task.run()
            executed.append(f"{node.name}:{task.name}")
        return executed
