from pathlib import Path

import pytest

from inkwell.app_shell.config import missing_env, validate_ops_rules
from inkwell.rules.loader import load_rules
from inkwell.rules.models import Rules

REPO_RULES = Path(__file__).resolve().parents[2] / "rules.yaml"


def test_repo_rules_file_is_valid():
    rules = load_rules(REPO_RULES)
    assert rules.analytics.comparison_window_days == 180
    assert rules.auth.provider == "local"


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("")
    assert load_rules(path) == Rules()


def test_partial_file_keeps_other_defaults(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("analytics:\n  comparison_window_days: 30\n")
    rules = load_rules(path)
    assert rules.analytics.comparison_window_days == 30
    assert rules.analytics.view_dedupe_window_seconds == 1800
    assert rules.auth.cookie_name == "access_token"


def test_top_level_must_be_a_mapping(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("- analytics\n- auth\n")
    with pytest.raises(ValueError, match="mapping"):
        load_rules(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("analytics: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_rules(path)


@pytest.mark.parametrize(
    "content",
    [
        "analytics:\n  comparison_window_days: 0\n",
        "auth:\n  provider: ldap\n",
    ],
)
def test_schema_violations(tmp_path, content):
    path = tmp_path / "rules.yaml"
    path.write_text(content)
    with pytest.raises(ValueError, match="Rules validation failed"):
        load_rules(path)


def test_missing_required_env_exits(monkeypatch):
    monkeypatch.delenv("INKWELL_TEST_REQUIRED", raising=False)
    rules = Rules.model_validate({"ops": {"required_env": ["INKWELL_TEST_REQUIRED"]}})

    assert missing_env(rules) == ["INKWELL_TEST_REQUIRED"]
    with pytest.raises(SystemExit):
        validate_ops_rules(rules)

    monkeypatch.setenv("INKWELL_TEST_REQUIRED", "1")
    validate_ops_rules(rules)


def test_remote_provider_requires_url(monkeypatch):
    monkeypatch.delenv("INKWELL_IDP_URL", raising=False)
    rules = Rules.model_validate({"auth": {"provider": "remote"}})
    with pytest.raises(SystemExit):
        validate_ops_rules(rules)
