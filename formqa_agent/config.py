import logging
import os
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from formqa_agent.browser.config import DEFAULT_CONFIG
from formqa_agent.exceptions import ConfigurationError

ENVIRONMENTS = ("local", "test", "prod")


class TargetConfig(BaseModel):
    base_url: str = "http://localhost:3009"
    form_path: Optional[str] = None


class BrowserConfig(BaseModel):
    headless: bool = DEFAULT_CONFIG["headless"]
    viewport: Dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_CONFIG["viewport"]))
    language: str = DEFAULT_CONFIG["language"]


class FormWalkConfig(BaseModel):
    enabled: bool = True
    field_data: Dict[str, Any] = Field(default_factory=dict)


class ConditionBranchConfig(BaseModel):
    enabled: bool = True
    # empty means every condition in the form
    conditions: list = Field(default_factory=list)


class SuiteConfig(BaseModel):
    form_walk: FormWalkConfig = Field(default_factory=FormWalkConfig)
    condition_branch: ConditionBranchConfig = Field(default_factory=ConditionBranchConfig)
    # per test, seconds
    test_timeout: int = 300


class LogConfig(BaseModel):
    level: str = "info"


class ReportConfig(BaseModel):
    output_dir: Optional[str] = None


class AgentConfig(BaseModel):
    target: TargetConfig = Field(default_factory=TargetConfig)
    browser_config: BrowserConfig = Field(default_factory=BrowserConfig)
    test_config: SuiteConfig = Field(default_factory=SuiteConfig)
    timeout_ms: int = 30000
    test_environment: str = "local"
    log: LogConfig = Field(default_factory=LogConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)

    @field_validator("test_environment")
    @classmethod
    def _known_environment(cls, value):
        if value not in ENVIRONMENTS:
            raise ValueError(f"test_environment must be one of {', '.join(ENVIRONMENTS)}")
        return value

    @field_validator("timeout_ms")
    @classmethod
    def _positive_timeout(cls, value):
        if value <= 0:
            raise ValueError("timeout_ms must be positive")
        return value


def find_config_file(args_config=None):
    """Locate the YAML config: explicit path first, then the usual places."""
    if args_config:
        if os.path.isfile(args_config):
            return args_config
        raise FileNotFoundError(f"Specified config file not found: {args_config}")

    current_dir = os.getcwd()
    package_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    default_paths = [
        os.path.join(current_dir, "config", "config.yaml"),
        os.path.join(package_root, "config", "config.yaml"),
        os.path.join(current_dir, "config.yaml"),
    ]
    for path in default_paths:
        if os.path.isfile(path):
            logging.debug(f"Auto-discovered config file: {path}")
            return path
    return None


def load_yaml(path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to read YAML config {path}: {e}")


def apply_env_overrides(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Environment variables win over the file."""
    data = dict(raw)
    if os.getenv("FORMQA_BASE_URL"):
        data["target"] = {**(data.get("target") or {}), "base_url": os.environ["FORMQA_BASE_URL"]}
    if os.getenv("FORMQA_TIMEOUT"):
        try:
            data["timeout_ms"] = int(os.environ["FORMQA_TIMEOUT"])
        except ValueError:
            raise ConfigurationError(f"FORMQA_TIMEOUT must be an integer, got {os.environ['FORMQA_TIMEOUT']!r}")
    if os.getenv("FORMQA_TEST_ENVIRONMENT"):
        data["test_environment"] = os.environ["FORMQA_TEST_ENVIRONMENT"]
    return data


def load_config(path=None, load_env_file: bool = True) -> AgentConfig:
    """Build the agent configuration from YAML, `.env` and the environment.

    Args:
        path: Explicit config file; when None the default locations are searched
            and built-in defaults are used if none exists.
        load_env_file: Read a `.env` file into the environment first.

    Raises:
        ConfigurationError: The file is unreadable or a value is invalid.
    """
    if load_env_file:
        load_dotenv()
    config_path = find_config_file(path)
    raw = load_yaml(config_path) if config_path else {}
    try:
        return AgentConfig.model_validate(apply_env_overrides(raw))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")
