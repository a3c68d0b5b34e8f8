"""
Patch rules loader tests.
"""
from __future__ import annotations

import json

from reconciler.core.config.rules_loader import ISAR_MODULE, default_rules, load_rules


def test_defaults_when_file_missing(tmp_path):
    rules = load_rules(tmp_path / "nonexistent.yaml")

    assert rules.source == "builtin"
    assert rules.patch_targets[0].match_name == ISAR_MODULE
    assert rules.patch_targets[0].namespace_value == "dev.isar.isar_flutter_libs"
    assert rules.patch_targets[0].task_name_substrings == frozenset(
        {"VerifyReleaseResources", "VerifyLibraryResources"}
    )
    assert "CheckAarMetadata" in rules.task_disable_rules[0].task_name_substrings


def test_load_valid_yaml_file(tmp_path):
    f = tmp_path / "rules.yaml"
    f.write_text(
        "patch_targets:\n"
        "  - match_name: legacy_plugin\n"
        "    namespace_value: com.example.legacy\n"
        "    task_name_substrings: [Lint]\n",
        encoding="utf-8",
    )

    rules = load_rules(f)

    assert rules.source == str(f)
    assert [t.match_name for t in rules.patch_targets] == ["legacy_plugin"]
    assert rules.patch_targets[0].task_name_substrings == frozenset({"Lint"})
    assert rules.task_disable_rules == []


def test_load_valid_json_file(tmp_path):
    f = tmp_path / "rules.json"
    f.write_text(
        json.dumps({"task_disable_rules": [{"project_name": "app", "task_name_substrings": ["Verify"]}]}),
        encoding="utf-8",
    )

    rules = load_rules(f)

    assert rules.patch_targets == []
    assert rules.task_disable_rules[0].project_name == "app"


def test_malformed_file_falls_back_to_defaults(tmp_path, caplog):
    f = tmp_path / "bad.yaml"
    f.write_text("this: is: not: valid: yaml:\n  {{{{", encoding="utf-8")

    rules = load_rules(f)

    assert rules.source == "builtin"
    assert "Failed to parse rules file" in caplog.text


def test_non_mapping_file_falls_back_to_defaults(tmp_path):
    f = tmp_path / "list.json"
    f.write_text(json.dumps([1, 2, 3]), encoding="utf-8")

    assert load_rules(f).source == "builtin"


def test_schema_violation_falls_back_to_defaults(tmp_path, caplog):
    f = tmp_path / "rules.json"
    f.write_text(json.dumps({"patch_targets": [{"match_name": "x"}]}), encoding="utf-8")

    rules = load_rules(f)

    assert rules.source == "builtin"
    assert "Invalid rules file" in caplog.text


def test_load_uses_env_var(tmp_path, monkeypatch):
    f = tmp_path / "env_rules.json"
    f.write_text(
        json.dumps({"patch_targets": [{"match_name": "m", "namespace_value": "n"}]}),
        encoding="utf-8",
    )
    monkeypatch.setenv("RECONCILER_RULES_FILE", str(f))

    rules = load_rules()

    assert rules.patch_targets[0].match_name == "m"


def test_default_rules_are_fresh_objects():
    assert default_rules() is not default_rules()
