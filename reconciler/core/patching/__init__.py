from .capabilities import (
    CapabilityLookup,
    NamespaceConfigurable,
    lookup_namespace_capability,
    register_namespace_adapter,
)
from .models import PatchReport, PatchState, PatchTarget, TaskDisableRule
from .patcher import PatchPass, apply_task_disable_rule, disable_matching_tasks, patch

__all__ = [
    "CapabilityLookup",
    "NamespaceConfigurable",
    "PatchPass",
    "PatchReport",
    "PatchState",
    "PatchTarget",
    "TaskDisableRule",
    "apply_task_disable_rule",
    "disable_matching_tasks",
    "lookup_namespace_capability",
    "patch",
    "register_namespace_adapter",
]
