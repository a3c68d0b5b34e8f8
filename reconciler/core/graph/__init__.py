from .models import ProjectNode, Task, TaskContainer
from .project_graph import (
    CircularDependencyError,
    DuplicateProjectError,
    InvalidProjectNameError,
    ProjectGraph,
    UnknownProjectError,
    validate_project_name,
)

__all__ = [
    "CircularDependencyError",
    "DuplicateProjectError",
    "InvalidProjectNameError",
    "ProjectGraph",
    "ProjectNode",
    "Task",
    "TaskContainer",
    "UnknownProjectError",
    "validate_project_name",
]
