"""
Patch rules loader.

Reads an optional YAML/JSON rules file describing which third-party
modules to patch, and falls back to the built-in rules when the file is
absent or malformed. This allows new toolchain workarounds without code
changes.

Rules file format (YAML or JSON):
    patch_targets:
      - match_name: isar_flutter_libs
        namespace_value: dev.isar.isar_flutter_libs
        task_name_substrings: [VerifyReleaseResources, VerifyLibraryResources]
    task_disable_rules:
      - project_name: isar_flutter_libs
        task_name_substrings: [VerifyReleaseResources, VerifyLibraryResources, CheckAarMetadata]

Environment variable:
    RECONCILER_RULES_FILE — path to the rules file (optional).
    Default search path: <project_root>/reconciler_rules.yaml
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from reconciler.core.patching.models import PatchTarget, TaskDisableRule

_log = logging.getLogger("reconciler.rules")


class PatchTargetModel(BaseModel):
    match_name: str = Field(min_length=1)
    namespace_value: str = Field(min_length=1)
    task_name_substrings: List[str] = Field(default_factory=list)


class TaskDisableRuleModel(BaseModel):
    project_name: str = Field(min_length=1)
    task_name_substrings: List[str] = Field(default_factory=list)


class RulesFileModel(BaseModel):
    patch_targets: List[PatchTargetModel] = Field(default_factory=list)
    task_disable_rules: List[TaskDisableRuleModel] = Field(default_factory=list)


@dataclass
class PatchRules:
    patch_targets: List[PatchTarget] = field(default_factory=list)
    task_disable_rules: List[TaskDisableRule] = field(default_factory=list)
    source: str = "builtin"


ISAR_MODULE = "isar_flutter_libs"
ISAR_NAMESPACE = "dev.isar.isar_flutter_libs"
RESOURCE_VERIFY_TASKS = ("VerifyReleaseResources", "VerifyLibraryResources")


def default_rules() -> PatchRules:
    return PatchRules(
        patch_targets=[
            PatchTarget(
                match_name=ISAR_MODULE,
                namespace_value=ISAR_NAMESPACE,
                task_name_substrings=frozenset(RESOURCE_VERIFY_TASKS),
            ),
        ],
        task_disable_rules=[
            TaskDisableRule(
                project_name=ISAR_MODULE,
                task_name_substrings=frozenset(RESOURCE_VERIFY_TASKS + ("CheckAarMetadata",)),
            ),
        ],
    )


def _to_rules(model: RulesFileModel, source: str) -> PatchRules:
    return PatchRules(
        patch_targets=[
            PatchTarget(
                match_name=t.match_name,
                namespace_value=t.namespace_value,
                task_name_substrings=frozenset(t.task_name_substrings),
            )
            for t in model.patch_targets
        ],
        task_disable_rules=[
            TaskDisableRule(
                project_name=r.project_name,
                task_name_substrings=frozenset(r.task_name_substrings),
            )
            for r in model.task_disable_rules
        ],
        source=source,
    )


def load_rules(path: Optional[Path] = None) -> PatchRules:
    """
    Load patch rules from a YAML or JSON file.

    Returns the built-in rules if the file is absent, not readable, or
    malformed.
    """
    resolved = _resolve_path(path)
    if resolved is None or not resolved.exists():
        return default_rules()

    try:
        raw_text = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        _log.warning("Cannot read rules file %s: %s", resolved, exc)
        return default_rules()

    # JSON first, YAML for everything else
    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            _log.warning("Failed to parse rules file %s as JSON or YAML: %s", resolved, exc)
            return default_rules()

    if not isinstance(data, dict):
        _log.warning("Rules file %s must be a mapping, got %s", resolved, type(data).__name__)
        return default_rules()

    try:
        model = RulesFileModel.model_validate(data)
    except ValidationError as exc:
        _log.warning("Invalid rules file %s: %s", resolved, exc)
        return default_rules()

    rules = _to_rules(model, source=str(resolved))
    _log.info(
        "Loaded %d patch targets and %d task disable rules from %s",
        len(rules.patch_targets),
        len(rules.task_disable_rules),
        resolved,
    )
    return rules


def _resolve_path(path: Optional[Path]) -> Optional[Path]:
    """Determine the rules file path from argument or env var or default."""
    if path is not None:
        return Path(path)
    env_path = os.getenv("RECONCILER_RULES_FILE", "").strip()
    if env_path:
        return Path(env_path)
    # reconciler/core/config/rules_loader.py -> parents[3] = project root
    project_root = Path(__file__).resolve().parents[3]
    return project_root / "reconciler_rules.yaml"
