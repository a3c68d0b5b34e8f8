from pathlib import Path

import pytest

from reconciler.core.graph.project_graph import ProjectGraph
from reconciler.core.observability.metrics import reset_metrics


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    # Make reconciliation deterministic regardless of the developer's shell
    for key in ("RECONCILER_RELOCATION", "RECONCILER_ANCHOR", "RECONCILER_RULES_FILE"):
        monkeypatch.delenv(key, raising=False)
    reset_metrics()
    yield
    reset_metrics()


class LegacyLibraryConfig:
    """Library config that only exposes a Java-style setter."""

    def __init__(self):
        self._namespace = None

    @property
    def namespace(self):
        return self._namespace

    def setNamespace(self, value: str) -> None:
        self._namespace = value


@pytest.fixture()
def legacy_config():
    return LegacyLibraryConfig()


@pytest.fixture()
def flutter_graph(tmp_path: Path, legacy_config):
    """
    android (root)
      app
      isar_flutter_libs
      path_provider_android
    """
    graph = ProjectGraph("android", tmp_path / "android")
    graph.add_project("app")
    graph.add_project("isar_flutter_libs", config=legacy_config)
    graph.add_project("path_provider_android")
    return graph
