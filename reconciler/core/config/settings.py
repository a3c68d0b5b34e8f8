from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from reconciler.core.layout.remapper import DEFAULT_RELOCATION

DEFAULT_ANCHOR = "app"


@dataclass(frozen=True)
class ReconcilerSettings:
    relocation: str = DEFAULT_RELOCATION
    anchor: Optional[str] = DEFAULT_ANCHOR
    rules_file: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "ReconcilerSettings":
        """
        RECONCILER_RELOCATION  shared build area relative to the root output dir
        RECONCILER_ANCHOR      project every other project's configuration waits on
                               ("" => use the graph root)
        RECONCILER_RULES_FILE  optional YAML/JSON patch rules
        """
        relocation = (os.getenv("RECONCILER_RELOCATION") or DEFAULT_RELOCATION).strip()

        anchor_raw = os.getenv("RECONCILER_ANCHOR")
        anchor = DEFAULT_ANCHOR if anchor_raw is None else (anchor_raw.strip() or None)

        rules_raw = (os.getenv("RECONCILER_RULES_FILE") or "").strip()
        rules_file = Path(rules_raw) if rules_raw else None

        return cls(relocation=relocation or DEFAULT_RELOCATION, anchor=anchor, rules_file=rules_file)
