from __future__ import annotations

from typing import List, Sequence, Tuple

from reconciler.core.graph.models import ProjectNode


def enforce(projects: Sequence[ProjectNode], anchor: ProjectNode) -> List[Tuple[str, str]]:
    """
    Make every project's configuration wait for `anchor`'s.

    Only records the edges; turning them into an order (and failing on
    cycles) is the host scheduler's job. Returns the (before, after) edges
    registered.
    """
    edges: List[Tuple[str, str]] = []
    for node in projects:
        if node is anchor or node.name == anchor.name:
            continue
        node.evaluation_depends_on(anchor.name)
        edges.append((anchor.name, node.name))
    return edges
