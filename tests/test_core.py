"""
Unit tests for core modules: scanner, mapping store, sync merge, label
resolution, message building, Config.

Run with:
    pytest tests/test_core.py -v
"""

import json
from pathlib import Path

import pytest
import yaml

from pdcommit import SCHEMA_VERSION
from pdcommit.config import Config, ConfigManager
from pdcommit.message import WorkflowStep, build_message, command_preview, resolve_labels
from pdcommit.workflows import (
    DetectedWorkflow, MappingError, MappingStore, ScanError, WorkflowMapping,
    STEP, WORKFLOW, apply_sync, default_label, plan_sync, scan,
)


@pytest.fixture
def mapping():
    return WorkflowMapping(
        workflows={"auth": "Auth"},
        steps={"auth/login": "Login"},
    )


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------

class TestScan:

    def test_finds_workflows_in_sorted_order(self, project):
        detected = scan(project)
        assert [wf.name for wf in detected] == ["auth", "billing"]

    def test_immediate_subdirectories_become_steps(self, project):
        detected = {wf.name: wf for wf in scan(project)}
        assert detected["auth"].steps == ["login", "logout"]
        assert detected["billing"].steps == ["invoice"]

    def test_step_keys_are_slash_joined(self, project):
        auth = scan(project)[0]
        assert auth.step_keys == ["auth/login", "auth/logout"]

    def test_skips_directories_without_marker(self, project):
        assert "docs" not in [wf.name for wf in scan(project)]

    def test_ignores_git_directory(self, project):
        assert "hooks" not in [wf.name for wf in scan(project)]

    def test_custom_marker(self, project):
        (project / "docs" / "flow.yml").write_text("")
        detected = scan(project, marker="flow.yml")
        assert [wf.name for wf in detected] == ["docs"]
        assert detected[0].steps == ["guides"]

    def test_marker_at_root_uses_directory_name(self, tmp_path):
        root = tmp_path / "pipeline"
        (root / "extract").mkdir(parents=True)
        (root / "workflow.yaml").write_text("")
        detected = scan(root)
        assert detected[0].name == "pipeline"
        assert detected[0].steps == ["extract"]

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(ScanError):
            scan(tmp_path / "missing")

    def test_no_markers_returns_empty(self, tmp_path):
        (tmp_path / "src").mkdir()
        assert scan(tmp_path) == []

    def test_symlinked_directories_are_not_steps(self, tmp_path):
        root = tmp_path / "pipeline"
        (root / "extract").mkdir(parents=True)
        (root / "workflow.yaml").write_text("")
        try:
            (root / "shortcut").symlink_to(root / "extract", target_is_directory=True)
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")

        assert scan(root)[0].steps == ["extract"]


# ---------------------------------------------------------------------------
# Mapping store
# ---------------------------------------------------------------------------

class TestMappingStore:

    def test_save_and_load(self, tmp_path, mapping):
        store = MappingStore(tmp_path / "pipedream-config.yaml")
        store.save(mapping)

        loaded = store.load()
        assert loaded.schema == SCHEMA_VERSION
        assert loaded.workflows == {"auth": "Auth"}
        assert loaded.steps == {"auth/login": "Login"}

    def test_file_has_three_top_level_fields(self, tmp_path, mapping):
        path = MappingStore(tmp_path / "pipedream-config.yaml").save(mapping)
        data = yaml.safe_load(path.read_text())
        assert list(data) == ["schema", "workflows", "steps"]

    def test_reads_file_written_by_hand(self, tmp_path):
        path = tmp_path / "pipedream-config.yaml"
        path.write_text(
            "schema: baudevs/2024-09-29\n"
            "workflows:\n  auth: Authentication\n"
            "steps:\n  auth/login: Sign in\n"
        )
        loaded = MappingStore(path).load()
        assert loaded.workflows["auth"] == "Authentication"
        assert loaded.steps["auth/login"] == "Sign in"

    def test_missing_sections_default_to_empty(self, tmp_path):
        path = tmp_path / "pipedream-config.yaml"
        path.write_text("schema: baudevs/2024-09-29\n")
        loaded = MappingStore(path).load()
        assert loaded.is_empty

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "pipedream-config.yaml"
        path.write_text("workflows: [unclosed\n")
        with pytest.raises(MappingError):
            MappingStore(path).load()

    def test_non_utf8_file_raises(self, tmp_path):
        path = tmp_path / "pipedream-config.yaml"
        path.write_bytes(b"schema: \xff\xfe\nworkflows: {}\n")
        with pytest.raises(MappingError, match="not valid UTF-8"):
            MappingStore(path).load()

    def test_blank_labels_load_as_empty_strings(self, tmp_path):
        path = tmp_path / "pipedream-config.yaml"
        path.write_text("workflows:\n  auth:\nsteps:\n  auth/login:\n")
        loaded = MappingStore(path).load()

        assert loaded.workflows == {"auth": ""}
        assert loaded.steps == {"auth/login": ""}
        assert resolve_labels(["auth/login/x.py"], loaded) == [WorkflowStep("", "")]

    def test_non_mapping_section_raises(self, tmp_path):
        path = tmp_path / "pipedream-config.yaml"
        path.write_text("workflows:\n  - auth\n")
        with pytest.raises(MappingError):
            MappingStore(path).load()

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(MappingError):
            MappingStore(tmp_path / "nope.yaml").load()

    def test_unwritable_target_raises_and_writes_nothing(self, tmp_path, mapping):
        store = MappingStore(tmp_path / "missing-dir" / "pipedream-config.yaml")
        with pytest.raises(MappingError):
            store.save(mapping)
        assert not store.exists()

    def test_failed_replace_keeps_previous_file(self, tmp_path, mapping, monkeypatch):
        path = tmp_path / "pipedream-config.yaml"
        path.write_text("schema: old\n")

        def boom(src, dst):
            raise OSError("disk full")
        monkeypatch.setattr("pdcommit.workflows.mapping.os.replace", boom)

        with pytest.raises(MappingError):
            MappingStore(path).save(mapping)
        assert path.read_text() == "schema: old\n"
        assert [p.name for p in tmp_path.iterdir()] == ["pipedream-config.yaml"]


class TestWorkflowMappingValidate:

    def test_current_schema_has_no_warnings(self, mapping):
        assert mapping.validate() == []

    def test_schema_mismatch_is_a_warning(self):
        warnings = WorkflowMapping(schema="baudevs/2023-01-01").validate()
        assert len(warnings) == 1
        assert "baudevs/2023-01-01" in warnings[0]


# ---------------------------------------------------------------------------
# Sync planning and merging
# ---------------------------------------------------------------------------

@pytest.fixture
def detected():
    return [
        DetectedWorkflow("auth", Path("auth"), ["login", "logout"]),
        DetectedWorkflow("billing", Path("billing"), ["invoice"]),
    ]


class TestPlanSync:

    def test_everything_is_new_without_existing_mapping(self, detected):
        plan = plan_sync(None, detected)
        assert plan.new_workflows == ["auth", "billing"]
        assert plan.new_steps == ["auth/login", "auth/logout", "billing/invoice"]
        assert plan.stale_keys == []
        assert plan.has_changes

    def test_groups_new_kept_and_stale(self, detected):
        existing = WorkflowMapping(
            workflows={"auth": "Auth", "legacy": "Legacy"},
            steps={"auth/login": "Login", "auth/signup": "Signup"},
        )
        plan = plan_sync(existing, detected)

        assert plan.kept_workflows == ["auth"]
        assert plan.new_workflows == ["billing"]
        assert plan.stale_workflows == ["legacy"]
        assert plan.kept_steps == ["auth/login"]
        assert plan.new_steps == ["auth/logout", "billing/invoice"]
        assert plan.stale_steps == ["auth/signup"]

    def test_identical_scan_has_no_changes(self, detected):
        existing = apply_sync(None, plan_sync(None, detected))
        assert not plan_sync(existing, detected).has_changes

    def test_duplicate_workflow_names_collapse(self):
        detected = [
            DetectedWorkflow("etl", Path("a/etl"), ["load"]),
            DetectedWorkflow("etl", Path("b/etl"), ["load", "clean"]),
        ]
        plan = plan_sync(None, detected)
        assert plan.new_workflows == ["etl"]
        assert plan.new_steps == ["etl/load", "etl/clean"]

    def test_new_keys_lists_workflows_before_steps(self, detected):
        plan = plan_sync(None, detected)
        assert plan.new_keys[0] == (WORKFLOW, "auth")
        assert plan.new_keys[2] == (STEP, "auth/login")


class TestApplySync:

    def test_labels_for_new_keys(self, detected):
        plan = plan_sync(None, detected)
        result = apply_sync(None, plan, labels={(WORKFLOW, "auth"): "Authentication", (STEP, "auth/login"): "Sign in"})

        assert result.workflows == {"auth": "Authentication", "billing": "billing"}
        assert result.steps == {"auth/login": "Sign in", "auth/logout": "logout", "billing/invoice": "invoice"}
        assert result.schema == SCHEMA_VERSION

    def test_blank_label_falls_back_to_default(self, detected):
        plan = plan_sync(None, detected)
        result = apply_sync(None, plan, labels={(WORKFLOW, "auth"): ""})
        assert result.workflows["auth"] == "auth"

    def test_existing_labels_are_preserved(self, detected):
        existing = WorkflowMapping(workflows={"auth": "Auth"}, steps={"auth/login": "Login"})
        plan = plan_sync(existing, detected)
        result = apply_sync(existing, plan, labels={(WORKFLOW, "auth"): "Ignored"})

        assert result.workflows["auth"] == "Auth"
        assert result.steps["auth/login"] == "Login"

    def test_stale_keys_kept_unless_dropped(self, detected):
        existing = WorkflowMapping(
            workflows={"auth": "Auth", "legacy": "Legacy"},
            steps={"auth/signup": "Signup"},
        )
        plan = plan_sync(existing, detected)
        result = apply_sync(existing, plan, drop={(WORKFLOW, "legacy")})

        assert "legacy" not in result.workflows
        assert result.steps["auth/signup"] == "Signup"

    def test_existing_mapping_is_not_mutated(self, detected):
        existing = WorkflowMapping(workflows={"legacy": "Legacy"})
        plan = plan_sync(existing, detected)
        apply_sync(existing, plan, drop={(WORKFLOW, "legacy")})
        assert existing.workflows == {"legacy": "Legacy"}

    def test_upgrades_schema(self, detected):
        existing = WorkflowMapping(schema="baudevs/2023-01-01")
        result = apply_sync(existing, plan_sync(existing, detected))
        assert result.schema == SCHEMA_VERSION


class TestDefaultLabel:

    @pytest.mark.parametrize("kind, key, expected", [
        (WORKFLOW, "auth", "auth"),
        (STEP, "auth/login", "login"),
        (STEP, "login", "login"),
    ])
    def test_default_label(self, kind, key, expected):
        assert default_label(kind, key) == expected


# ---------------------------------------------------------------------------
# Label resolution
# ---------------------------------------------------------------------------

class TestResolveLabels:

    def test_matches_workflow_and_step(self, mapping):
        labels = resolve_labels(["auth/login/handler.py"], mapping)
        assert labels == [WorkflowStep("Auth", "Login")]

    def test_no_containment_yields_nothing(self, mapping):
        assert resolve_labels(["docs/readme.md", "src/app.py"], mapping) == []

    def test_empty_changed_paths(self, mapping):
        assert resolve_labels([], mapping) == []

    def test_workflow_without_step_match_yields_nothing(self, mapping):
        assert resolve_labels(["auth/README.md"], mapping) == []

    def test_root_level_file_yields_nothing(self, mapping):
        assert resolve_labels(["README.md"], mapping) == []

    def test_nested_path_matches(self, mapping):
        labels = resolve_labels(["services/auth/login/views/form.py"], mapping)
        assert labels == [WorkflowStep("Auth", "Login")]

    def test_duplicate_step_matches_kept_in_encounter_order(self):
        mapping = WorkflowMapping(
            workflows={"auth": "Auth"},
            steps={"auth/login": "Login", "auth/log": "Log"},
        )
        labels = resolve_labels(["auth/login/handler.py"], mapping)
        assert labels == [WorkflowStep("Auth", "Login"), WorkflowStep("Auth", "Log")]

    def test_repeated_files_repeat_labels(self, mapping):
        labels = resolve_labels(["auth/login/a.py", "auth/login/b.py"], mapping)
        assert labels == [WorkflowStep("Auth", "Login")] * 2

    def test_every_matching_workflow_pairs_with_every_matching_step(self):
        mapping = WorkflowMapping(
            workflows={"auth": "Auth", "au": "AU"},
            steps={"auth/login": "Login"},
        )
        labels = resolve_labels(["auth/login/x.py"], mapping)
        assert labels == [WorkflowStep("Auth", "Login"), WorkflowStep("AU", "Login")]

    def test_substring_containment_is_literal(self, mapping):
        # 'oauth/login' contains both 'auth' and 'auth/login'
        labels = resolve_labels(["oauth/login/provider.py"], mapping)
        assert labels == [WorkflowStep("Auth", "Login")]

    def test_trace_reports_checks_and_matches(self, mapping):
        lines = []
        resolve_labels(["auth/login/handler.py"], mapping, trace=lines.append)
        assert lines == [
            "Checking file: auth/login/handler.py",
            "Directory: auth/login",
            "Matched workflow: auth -> Auth",
            "Matched step: auth/login -> Login",
        ]

    def test_label_string_form(self):
        assert str(WorkflowStep("Auth", "Login")) == "Auth:Login"


# ---------------------------------------------------------------------------
# Message building
# ---------------------------------------------------------------------------

class TestBuildMessage:

    def test_single_label(self):
        assert build_message("fix", [("Auth", "Login")], "hello") == "fix[[Auth][Login]] hello"

    def test_no_labels(self):
        assert build_message("add", [], "x") == "add x"

    def test_workflow_step_labels(self):
        labels = [WorkflowStep("Auth", "Login"), WorkflowStep("Billing", "Invoice")]
        assert build_message("change", labels, "rework") == "change[[Auth][Login]][[Billing][Invoice]] rework"

    def test_repeated_labels_repeat_annotations(self):
        labels = [WorkflowStep("Auth", "Login")] * 2
        assert build_message("fix", labels, "x") == "fix[[Auth][Login]][[Auth][Login]] x"

    def test_text_is_verbatim(self):
        text = 'handle "quoted" input\nsecond line'
        assert build_message("fix", [], text) == f"fix {text}"

    def test_command_preview_does_not_escape(self):
        preview = command_preview('fix[[A][B]] say "hi"')
        assert preview == 'git commit -m "fix[[A][B]] say "hi""'


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

class TestConfig:

    def test_defaults(self):
        config = Config()
        assert config.mapping_file == "pipedream-config.yaml"
        assert config.marker_file == "workflow.yaml"
        assert config.default_type == "fix"
        assert config.provider == "auto"

    def test_to_dict_excludes_none(self):
        d = Config().to_dict()
        assert "model" not in d
        assert "provider" in d

    def test_from_dict_ignores_unknown_keys(self):
        config = Config.from_dict({"default_type": "add", "unknown_key": "value"})
        assert config.default_type == "add"
        assert not hasattr(config, "unknown_key")

    def test_validate_invalid_default_type(self):
        config = Config(default_type="feat")
        warnings = config.validate()
        assert len(warnings) == 1
        assert config.default_type == "fix"

    def test_validate_invalid_provider(self):
        config = Config(provider="gpt4")
        assert len(config.validate()) == 1
        assert config.provider == "auto"

    def test_validate_empty_mapping_file(self):
        config = Config(mapping_file="  ")
        assert any("mapping_file" in w for w in config.validate())
        assert config.mapping_file == "pipedream-config.yaml"

    def test_validate_invalid_max_diff_chars(self):
        config = Config(max_diff_chars=0)
        assert any("max_diff_chars" in w for w in config.validate())
        assert config.max_diff_chars == 12000

    def test_validate_valid_config_no_warnings(self):
        assert Config().validate() == []

    @pytest.mark.parametrize("field, value", [
        ("provider", ["claude"]),
        ("default_type", {"fix": True}),
    ])
    def test_validate_unhashable_values(self, field, value):
        config = Config(**{field: value})
        assert any(field in w for w in config.validate())
        assert getattr(config, field) == getattr(Config(), field)

    def test_from_dict_triggers_validation(self, capsys):
        Config.from_dict({"provider": "invalid"})
        assert "Config warning" in capsys.readouterr().err


class TestConfigManager:

    def test_load_returns_defaults_when_no_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        config = ConfigManager().load()
        assert config == Config()

    def test_load_reads_local_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".pdcommitrc").write_text(json.dumps({"marker_file": "flow.yml", "default_type": "add"}))

        manager = ConfigManager()
        config = manager.load()
        assert config.marker_file == "flow.yml"
        assert config.default_type == "add"
        assert manager.get_config_path() == tmp_path / ".pdcommitrc"

    def test_local_file_wins_over_home(self, tmp_path, monkeypatch):
        home = tmp_path / "home"
        home.mkdir()
        (home / ".pdcommitrc").write_text(json.dumps({"default_type": "remove"}))
        (tmp_path / ".pdcommitrc").write_text(json.dumps({"default_type": "change"}))
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: home)

        assert ConfigManager().load().default_type == "change"

    def test_malformed_json_returns_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".pdcommitrc").write_text("not valid json {{{")
        assert ConfigManager().load() == Config()

    def test_wrong_value_types_fall_back_to_defaults(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".pdcommitrc").write_text(json.dumps({"provider": ["claude"]}))

        assert ConfigManager().load().provider == "auto"
        assert "Invalid provider" in capsys.readouterr().err
