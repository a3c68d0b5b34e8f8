from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional


@dataclass
class Task:
    name: str
    enabled: bool = True
    action: Optional[Callable[["Task"], Any]] = None
    executed: bool = False

    def run(self) -> Any:
        self.executed = True
        if self.action is None:
            return None
        return self.action(self)


class TaskContainer:
    """
    Named task set attached to a project.

    Tasks may be registered at any point of the configuration phase
    (plugins generate them lazily), so lookups never assume a task exists.
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, Task] = {}

    def register(self, name: str, action: Optional[Callable[[Task], Any]] = None) -> Task:
        if name in self._tasks:
            raise ValueError(f"Duplicate task name: {name}")
        task = Task(name=name, action=action)
        self._tasks[name] = task
        return task

    def get(self, name: str) -> Optional[Task]:
        return self._tasks.get(name)

    def matching(self, predicate: Callable[[Task], bool]) -> List[Task]:
        return [t for t in self._tasks.values() if predicate(t)]

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))


@dataclass(eq=False)
class ProjectNode:
    name: str
    config: Any = None
    output_dir: Optional[Path] = None
    tasks: TaskContainer = field(default_factory=TaskContainer)

    # names whose configuration must complete before this one starts
    evaluation_dependencies: List[str] = field(default_factory=list)

    configurators: List[Callable[["ProjectNode"], None]] = field(default_factory=list)
    after_evaluate_hooks: List[Callable[["ProjectNode"], None]] = field(default_factory=list)
    evaluated: bool = False

    def evaluation_depends_on(self, name: str) -> None:
        if name not in self.evaluation_dependencies:
            self.evaluation_dependencies.append(name)

    def configure(self, fn: Callable[["ProjectNode"], None]) -> None:
        self.configurators.append(fn)

    def after_evaluate(self, fn: Callable[["ProjectNode"], None]) -> None:
        if self.evaluated:
            fn(self)
            return
        self.after_evaluate_hooks.append(fn)
