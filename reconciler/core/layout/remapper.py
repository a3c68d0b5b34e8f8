from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional, Sequence

from reconciler.core.graph.models import ProjectNode

# shared build area two levels above the root project's default output
DEFAULT_RELOCATION = "../../build"


def relocated_root(root_dir: str | Path, relocation: str = DEFAULT_RELOCATION) -> Path:
    """Lexical join + normalise; never touches the filesystem."""
    return Path(os.path.normpath(Path(root_dir) / relocation))


def project_output_dir(
    root_dir: str | Path,
    project_name: str,
    relocation: str = DEFAULT_RELOCATION,
) -> Path:
    return relocated_root(root_dir, relocation) / project_name


def remap(
    root_dir: str | Path,
    projects: Sequence[ProjectNode],
    *,
    root_project: Optional[ProjectNode] = None,
    relocation: str = DEFAULT_RELOCATION,
) -> Dict[str, Path]:
    """
    Point every project's output directory into the shared build area.

    The root project gets the relocated directory itself, every other
    project gets <relocated>/<project name>. Without `root_project`, the
    root is the node whose output directory is still `root_dir` (or already
    the relocated directory). Derived only from `root_dir`, so applying it
    again yields the same mapping.
    """
    base = relocated_root(root_dir, relocation)
    root_candidates = (Path(root_dir), base)
    out: Dict[str, Path] = {}

    for node in projects:
        if root_project is not None:
            is_root = node is root_project
        else:
            is_root = node.output_dir is not None and Path(node.output_dir) in root_candidates
        if is_root:
            target = base
        else:
            target = base / node.name
        node.output_dir = target
        out[node.name] = target

    return out
