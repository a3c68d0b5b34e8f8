import logging

from reconciler.core.config.rules_loader import PatchRules, default_rules
from reconciler.core.config.settings import ReconcilerSettings
from reconciler.core.patching.models import PatchState, PatchTarget
from reconciler.core.reconcile import reconcile


def _generate_android_tasks(node):
    # the library plugin creates its variant tasks during configuration
    for name in (
        "compileReleaseKotlin",
        "verifyReleaseResources",
        "generateReleaseVerifyReleaseResources",
        "bundleDebugVerifyLibraryResources",
        "checkReleaseCheckAarMetadata",
    ):
        node.tasks.register(name)


def test_full_pass_over_flutter_graph(flutter_graph, legacy_config, tmp_path):
    lib = flutter_graph.get("isar_flutter_libs")
    seen_by_lib = []
    lib.configure(_generate_android_tasks)
    lib.configure(lambda n: seen_by_lib.append(flutter_graph.get("app").evaluated))

    result = reconcile(flutter_graph, ReconcilerSettings(), default_rules())

    assert result.anchor == "app"
    assert result.output_dirs["android"] == tmp_path / "build"
    assert lib.output_dir == tmp_path / "build" / "isar_flutter_libs"
    assert result.patch_pass.state == PatchState.UNAPPLIED
    assert legacy_config.namespace is None

    order = flutter_graph.evaluate()

    assert order.index("app") < order.index("isar_flutter_libs")
    assert seen_by_lib == [True]
    assert result.patch_pass.state == PatchState.APPLIED
    assert legacy_config.namespace == "dev.isar.isar_flutter_libs"

    states = {t.name: t.enabled for t in lib.tasks}
    assert states == {
        "compileReleaseKotlin": True,
        "verifyReleaseResources": True,
        "generateReleaseVerifyReleaseResources": False,
        "bundleDebugVerifyLibraryResources": False,
        "checkReleaseCheckAarMetadata": False,
    }


def test_graph_without_module_is_untouched(tmp_path, caplog):
    from reconciler.core.graph.project_graph import ProjectGraph

    g = ProjectGraph("android", tmp_path / "android")
    app = g.add_project("app")
    app.configure(lambda n: n.tasks.register("processReleaseVerifyReleaseResources"))

    with caplog.at_level(logging.WARNING):
        result = reconcile(g, ReconcilerSettings(), default_rules())
        g.evaluate()

    assert all(not r.matched for r in result.patch_pass.reports)
    assert app.tasks.get("processReleaseVerifyReleaseResources").enabled is True
    assert caplog.records == []


def test_missing_anchor_falls_back_to_root(flutter_graph):
    result = reconcile(flutter_graph, ReconcilerSettings(anchor="runner"), PatchRules())

    assert result.anchor == "android"
    assert flutter_graph.get("app").evaluation_dependencies == ["android"]


def test_setter_fault_does_not_fail_build(flutter_graph, caplog):
    class BrokenConfig:
        def setNamespace(self, value: str) -> None:
            raise TypeError("incompatible argument")

    g = flutter_graph
    lib = g.add_project("legacy_lib", config=BrokenConfig())
    lib.tasks.register("VerifyLibraryResources")
    rules = PatchRules(patch_targets=[
        PatchTarget(
            match_name="legacy_lib",
            namespace_value="com.example.legacy",
            task_name_substrings=frozenset({"VerifyLibraryResources"}),
        )
    ])

    reconcile(g, ReconcilerSettings(), rules)
    with caplog.at_level(logging.WARNING, logger="reconciler.patch"):
        g.evaluate()

    assert lib.tasks.get("VerifyLibraryResources").enabled is False
    assert "Failed to set namespace for legacy_lib: incompatible argument" in caplog.text


def test_reconcile_reads_settings_and_rules_from_env(flutter_graph, monkeypatch, tmp_path):
    rules_file = tmp_path / "rules.yaml"
    rules_file.write_text("patch_targets: []\n", encoding="utf-8")
    monkeypatch.setenv("RECONCILER_RULES_FILE", str(rules_file))
    monkeypatch.setenv("RECONCILER_RELOCATION", "../out")

    result = reconcile(flutter_graph)
    flutter_graph.evaluate()

    assert result.output_dirs["android"] == tmp_path / "android" / "out"
    assert result.patch_pass.reports == []
