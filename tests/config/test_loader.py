"""Tests for configuration loader."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from toolgate.config.env import EnvSettings
from toolgate.config.loader import (
    create_default_config,
    deep_merge,
    find_project_config,
    load_config,
    load_env_config,
    load_yaml_config,
    merge_configs,
)
from toolgate.config.models import Provider


def no_env() -> EnvSettings:
    return EnvSettings(_env_file=None)


def write_yaml(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestDeepMerge:
    """Tests for deep_merge function."""

    def test_merge_nested_dicts(self):
        """Test merging nested dictionaries."""
        base = {"outer": {"inner1": 1, "inner2": 2}}
        override = {"outer": {"inner2": 3, "inner3": 4}}
        assert deep_merge(base, override) == {"outer": {"inner1": 1, "inner2": 3, "inner3": 4}}

    def test_merge_replaces_lists(self):
        """Test that lists are replaced, not merged."""
        assert deep_merge({"plugins": ["a", "b"]}, {"plugins": ["c"]}) == {"plugins": ["c"]}

    def test_merge_does_not_mutate(self):
        """Test the base dictionary is left untouched."""
        base = {"a": 1}
        deep_merge(base, {"a": 2})
        assert base == {"a": 1}

    def test_merge_configs_order(self):
        """Test later configs win and empty ones are skipped."""
        assert merge_configs({"a": 1}, {}, {"a": 2, "b": 3}) == {"a": 2, "b": 3}


class TestYamlFiles:
    """Tests for reading config files."""

    def test_missing_file(self, tmp_path):
        """Test a missing file yields an empty dict."""
        assert load_yaml_config(tmp_path / "nope.yaml") == {}
        assert load_yaml_config(None) == {}

    def test_empty_file(self, tmp_path):
        """Test an empty file yields an empty dict."""
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_yaml_config(path) == {}

    def test_invalid_yaml(self, tmp_path):
        """Test syntax errors name the file."""
        path = tmp_path / "config.yaml"
        path.write_text("model: [unclosed", encoding="utf-8")

        with pytest.raises(yaml.YAMLError, match="config.yaml"):
            load_yaml_config(path)

    def test_non_mapping(self, tmp_path):
        """Test a top-level list is rejected."""
        path = write_yaml(tmp_path / "config.yaml", ["a", "b"])

        with pytest.raises(ValueError, match="YAML mapping"):
            load_yaml_config(path)

    def test_find_project_config_walks_up(self, tmp_path):
        """Test the project file is found from a subdirectory."""
        config_path = write_yaml(tmp_path / ".toolgate" / "config.yaml", {"model": "x"})
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_project_config(nested) == config_path.resolve()

    def test_find_project_config_stops_at_git_root(self, tmp_path):
        """Test the search does not leave the repository."""
        write_yaml(tmp_path / ".toolgate" / "config.yaml", {"model": "x"})
        repo = tmp_path / "repo"
        (repo / ".git").mkdir(parents=True)

        assert find_project_config(repo) is None


class TestEnvConfig:
    """Tests for TOOLGATE_* overrides."""

    def test_no_overrides(self):
        """Test an empty environment produces no overrides."""
        assert load_env_config(no_env()) == {}

    def test_overrides(self, monkeypatch):
        """Test environment variables map onto nested config keys."""
        monkeypatch.setenv("TOOLGATE_MODEL", "gpt-4o")
        monkeypatch.setenv("TOOLGATE_TEMPERATURE", "0.2")
        monkeypatch.setenv("TOOLGATE_APPROVAL_MODE", "deny")
        monkeypatch.setenv("TOOLGATE_APPROVAL_TIMEOUT", "15")
        monkeypatch.setenv("TOOLGATE_AUDIT_LOG_FILE", "/tmp/audit.jsonl")

        assert load_env_config(no_env()) == {
            "model": "gpt-4o",
            "temperature": 0.2,
            "approval": {"mode": "deny", "timeout": 15.0},
            "audit": {"log_file": "/tmp/audit.jsonl"},
        }


class TestLoadConfig:
    """Tests for the full precedence chain."""

    def test_defaults(self, tmp_path):
        """Test built-in defaults when no file exists."""
        config = load_config(
            global_config_path=tmp_path / "global.yaml",
            project_config_path=tmp_path / "project.yaml",
            env_settings=no_env(),
        )

        assert config.provider == Provider.AZURE_OPENAI
        assert config.model == "gpt-4"
        assert config.agent_name == "Main-Assistant"
        assert config.instructions == "Respond to user questions as an assistant"
        assert config.clear_command == "clear-context"
        assert config.plugins == ["Lights", "SoftwareBuilder", "GoogleFitness", "GoogleKeep"]
        assert config.approval.mode == "interactive"

    def test_default_config_round_trips(self):
        """Test the serialized defaults validate again."""
        assert create_default_config()["approval"]["mode"] == "interactive"

    def test_precedence(self, tmp_path, monkeypatch):
        """Test global < project < environment < CLI."""
        global_path = write_yaml(
            tmp_path / "global.yaml",
            {"model": "global-model", "agent_name": "Global", "approval": {"mode": "deny"}},
        )
        project_path = write_yaml(
            tmp_path / "project.yaml",
            {"model": "project-model", "approval": {"allow": ["Lights-*"]}},
        )
        monkeypatch.setenv("TOOLGATE_MODEL", "env-model")

        config = load_config(
            global_config_path=global_path,
            project_config_path=project_path,
            cli_overrides={"plugins": ["Lights"]},
            env_settings=no_env(),
        )

        assert config.model == "env-model"
        assert config.agent_name == "Global"
        assert config.approval.mode == "deny"
        assert config.approval.allow == ["Lights-*"]
        assert config.plugins == ["Lights"]

    def test_cli_beats_environment(self, tmp_path, monkeypatch):
        """Test CLI overrides win over TOOLGATE_* variables."""
        monkeypatch.setenv("TOOLGATE_MODEL", "env-model")

        config = load_config(
            global_config_path=tmp_path / "none.yaml",
            project_config_path=tmp_path / "none.yaml",
            cli_overrides={"model": "cli-model"},
            env_settings=no_env(),
        )

        assert config.model == "cli-model"

    def test_policy_rules_from_yaml(self, tmp_path):
        """Test argument rules are parsed from configuration."""
        path = write_yaml(
            tmp_path / "project.yaml",
            {
                "approval": {
                    "mode": "policy",
                    "rules": [
                        {
                            "capability": "Lights-change_state",
                            "argument": "id",
                            "operator": "in",
                            "value": [1, 2],
                            "effect": "allow",
                        }
                    ],
                }
            },
        )

        config = load_config(
            global_config_path=tmp_path / "none.yaml",
            project_config_path=path,
            env_settings=no_env(),
        )

        (rule,) = config.approval.rules
        assert rule.operator == "in"
        assert rule.value == [1, 2]

    def test_invalid_values(self, tmp_path):
        """Test schema violations raise ValidationError."""
        path = write_yaml(tmp_path / "project.yaml", {"plugins": ["Lights", "Weather"]})

        with pytest.raises(ValidationError, match="Unknown plugin"):
            load_config(
                global_config_path=tmp_path / "none.yaml",
                project_config_path=path,
                env_settings=no_env(),
            )
