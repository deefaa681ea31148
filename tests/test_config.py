import pytest

from formqa_agent.config import (AgentConfig, apply_env_overrides,
                                 find_config_file, load_config)
from formqa_agent.exceptions import ConfigurationError

CONFIG = """
target:
  base_url: http://forms.test
  form_path: ./forms/animals.json
test_config:
  condition_branch:
    conditions: [cond-dog]
  test_timeout: 60
timeout_ms: 5000
log:
  level: debug
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("FORMQA_BASE_URL", "FORMQA_TIMEOUT", "FORMQA_TEST_ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG, encoding="utf-8")
    return str(path)


def test_defaults():
    cfg = AgentConfig()
    assert cfg.target.base_url == "http://localhost:3009"
    assert cfg.browser_config.headless is True
    assert cfg.test_config.form_walk.enabled
    assert cfg.test_config.condition_branch.conditions == []
    assert cfg.test_environment == "local"


def test_load_config_from_yaml(config_file):
    cfg = load_config(config_file, load_env_file=False)
    assert cfg.target.base_url == "http://forms.test"
    assert cfg.target.form_path == "./forms/animals.json"
    assert cfg.test_config.condition_branch.conditions == ["cond-dog"]
    assert cfg.test_config.test_timeout == 60
    assert cfg.timeout_ms == 5000
    assert cfg.log.level == "debug"
    assert cfg.browser_config.viewport == {"width": 1280, "height": 720}


def test_environment_wins_over_file(config_file, monkeypatch):
    monkeypatch.setenv("FORMQA_BASE_URL", "http://staging.forms.test")
    monkeypatch.setenv("FORMQA_TIMEOUT", "12000")
    monkeypatch.setenv("FORMQA_TEST_ENVIRONMENT", "test")
    cfg = load_config(config_file, load_env_file=False)
    assert cfg.target.base_url == "http://staging.forms.test"
    assert cfg.target.form_path == "./forms/animals.json"
    assert cfg.timeout_ms == 12000
    assert cfg.test_environment == "test"


def test_apply_env_overrides_leaves_input_alone(monkeypatch):
    monkeypatch.setenv("FORMQA_BASE_URL", "http://other")
    raw = {"target": {"base_url": "http://file"}}
    assert apply_env_overrides(raw)["target"]["base_url"] == "http://other"
    assert raw["target"]["base_url"] == "http://file"


@pytest.mark.parametrize(
    "env, value",
    [("FORMQA_TIMEOUT", "soon"), ("FORMQA_TIMEOUT", "0"), ("FORMQA_TEST_ENVIRONMENT", "staging")],
)
def test_invalid_values(config_file, monkeypatch, env, value):
    monkeypatch.setenv(env, value)
    with pytest.raises(ConfigurationError):
        load_config(config_file, load_env_file=False)


def test_unreadable_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("target: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(str(path), load_env_file=False)


def test_explicit_config_must_exist(tmp_path):
    with pytest.raises(FileNotFoundError):
        find_config_file(str(tmp_path / "missing.yaml"))
