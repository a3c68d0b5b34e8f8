from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List


class PatchState(str, Enum):
    UNAPPLIED = "UNAPPLIED"
    APPLIED = "APPLIED"


def _as_substrings(values: Iterable[str]) -> FrozenSet[str]:
    # a bare string is one substring, not a set of characters
    if isinstance(values, str):
        values = (values,)
    # an empty substring would match every task name
    return frozenset(v for v in values if isinstance(v, str) and v)


@dataclass(frozen=True)
class PatchTarget:
    match_name: str
    namespace_value: str
    task_name_substrings: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "task_name_substrings", _as_substrings(self.task_name_substrings))


@dataclass(frozen=True)
class TaskDisableRule:
    project_name: str
    task_name_substrings: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "task_name_substrings", _as_substrings(self.task_name_substrings))


@dataclass
class PatchFinding:
    code: str
    severity: str  # "info" | "warn"
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "severity": self.severity,
            "message": self.message,
            "data": dict(self.data),
        }


@dataclass
class PatchReport:
    project: str
    matched: bool = False
    namespace_set: bool = False
    disabled_tasks: List[str] = field(default_factory=list)
    findings: List[PatchFinding] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project": self.project,
            "matched": self.matched,
            "namespace_set": self.namespace_set,
            "disabled_tasks": list(self.disabled_tasks),
            "findings": [f.to_dict() for f in self.findings],
        }
