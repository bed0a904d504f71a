"""
Configuration loading and validation for unified-automation.

Two sources feed the same Pydantic models:

1. Environment variables - the only channel a journey runner process reads.
   The orchestrator computes them fresh for every spawned journey.

2. unified-automation.yaml - optional file read by the CLI and the server
   for defaults (target app URL, default tool/mode, server bind address).

Models:

- AutomationSettings - what a runner needs to launch a browser and run a
  journey (app URL, headless, keep-open, profile dir, extension, executable).
- ServerConfig - bind address of the HTTP/WebSocket API.
- UnifiedAutomationConfig - root model aggregating the above plus defaults
  for run requests.
"""
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from unified_automation.types import Backend, DisplayMode

CONFIG_FILENAME = "unified-automation.yaml"

DEFAULT_APP_URL = "http://localhost:3002"
DEFAULT_JOURNEYS_PACKAGE = "unified_automation.journeys"
DEFAULT_PROFILE_DIR = str(Path(tempfile.gettempdir()) / "unified-automation-profile")

# Environment variable -> AutomationSettings field
ENV_FIELDS: Dict[str, str] = {
    "APP_URL": "app_url",
    "HEADLESS": "headless",
    "CLOSE_BROWSER": "close_browser",
    "LOAD_EXTENSIONS": "load_extensions",
    "EXTENSION_PATH": "extension_path",
    "CHROME_EXECUTABLE_PATH": "executable_path",
    "CHROME_USER_DATA_DIR": "user_data_dir",
    "JOURNEYS_PACKAGE": "journeys_package",
}


def parse_bool(value: Any) -> bool:
    """Environment-style boolean: only 'true' (any case) is true."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


class AutomationSettings(BaseModel):
    """Settings consumed by journeys and browser sessions."""
    app_url: str = Field(default=DEFAULT_APP_URL, description="Base URL of the application under test")
    headless: bool = Field(default=False, description="Run the browser without a window")
    close_browser: bool = Field(default=True, description="Close the browser when the journey ends")
    load_extensions: bool = Field(default=False, description="Load the unpacked extension at extension_path")
    extension_path: Optional[str] = Field(default=None, description="Unpacked browser extension directory")
    executable_path: Optional[str] = Field(default=None, description="Browser executable (default: engine bundled)")
    user_data_dir: str = Field(default=DEFAULT_PROFILE_DIR, description="Browser profile directory")
    journeys_package: str = Field(default=DEFAULT_JOURNEYS_PACKAGE, description="Package holding *_journey modules")

    @field_validator("headless", "close_browser", "load_extensions", mode="before")
    @classmethod
    def validate_flags(cls, v: Any) -> bool:
        """Accept the 'true'/'false' strings used in the environment."""
        return parse_bool(v)

    @field_validator("app_url")
    @classmethod
    def validate_app_url(cls, v: str) -> str:
        """Require an absolute http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"app_url must be an absolute http(s) URL, got: {v}")
        return v.rstrip("/")

    @property
    def extension_enabled(self) -> bool:
        return bool(
            self.load_extensions
            and self.extension_path
            and Path(self.extension_path).is_dir()
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AutomationSettings":
        """
        Build settings from environment variables.

        Only existence is checked: unset or empty variables fall back to the
        model defaults.
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for var, field_name in ENV_FIELDS.items():
            raw = env.get(var)
            if raw:
                values[field_name] = raw
        return cls(**values)

    def to_env(self) -> Dict[str, str]:
        """
        Environment variables a runner needs to rebuild these settings.

        HEADLESS and CLOSE_BROWSER are left out: they are decided per run.
        """
        env: Dict[str, str] = {}
        for var, field_name in ENV_FIELDS.items():
            if field_name in ("headless", "close_browser"):
                continue
            value = getattr(self, field_name)
            if value is None:
                continue
            env[var] = str(value).lower() if isinstance(value, bool) else str(value)
        return env


class ServerConfig(BaseModel):
    """HTTP/WebSocket API configuration."""
    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=3001, description="Bind port")


class UnifiedAutomationConfig(BaseModel):
    """Main configuration model."""
    project_root: Path = Field(default=Path("."), description="Directory containing the config file")
    settings: AutomationSettings = Field(default_factory=AutomationSettings)
    server: ServerConfig = Field(default_factory=ServerConfig)
    default_tool: Backend = Field(default=Backend.PLAYWRIGHT, description="Backend used when none is requested")
    default_mode: DisplayMode = Field(default=DisplayMode.HEADLESS, description="Display mode used when none is requested")
    env: Dict[str, str] = Field(default_factory=dict, description="Extra environment passed to every journey")

    @field_validator("project_root", mode="before")
    @classmethod
    def validate_paths(cls, v: Any) -> Path:
        """Ensure paths are Path objects."""
        return Path(v) if not isinstance(v, Path) else v

    @field_validator("env", mode="before")
    @classmethod
    def validate_env(cls, v: Any) -> Dict[str, str]:
        """Environment values must be strings."""
        if not isinstance(v, dict):
            return v
        return {str(key): str(value) for key, value in v.items()}

    def runner_env(self) -> Dict[str, str]:
        """Base environment overrides for every spawned runner."""
        return {**self.settings.to_env(), **self.env}


def find_config_file(start_path: Optional[Path] = None) -> Optional[Path]:
    """
    Find unified-automation.yaml in current or parent directories.

    Args:
        start_path: Starting directory (defaults to current working directory)

    Returns:
        Path to config file, or None if not found
    """
    current = start_path or Path.cwd()

    # Search up to 5 levels
    for _ in range(5):
        config_path = current / CONFIG_FILENAME
        if config_path.exists():
            return config_path

        parent = current.parent
        if parent == current:
            # Reached filesystem root
            break
        current = parent

    return None


def load_config(config_path: Path) -> UnifiedAutomationConfig:
    """
    Load and validate configuration from YAML file.

    Args:
        config_path: Path to unified-automation.yaml

    Returns:
        Validated UnifiedAutomationConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If configuration is invalid
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw_config = yaml.safe_load(f)

    if not raw_config or not isinstance(raw_config, dict):
        raise ValueError(f"Empty or invalid config file: {config_path}")

    normalized: Dict[str, Any] = {
        "project_root": config_path.parent,
    }

    if isinstance(raw_config.get("app"), dict):
        normalized["settings"] = AutomationSettings(**raw_config["app"])
    else:
        normalized["settings"] = AutomationSettings.from_env()

    if isinstance(raw_config.get("server"), dict):
        normalized["server"] = ServerConfig(**raw_config["server"])

    for key in ("default_tool", "default_mode", "env"):
        if key in raw_config:
            normalized[key] = raw_config[key]

    return UnifiedAutomationConfig(**normalized)


def resolve_config(config_path: Optional[Path] = None) -> UnifiedAutomationConfig:
    """Load the given or discovered config file, or fall back to the environment."""
    path = config_path or find_config_file()
    if path is None:
        return UnifiedAutomationConfig(settings=AutomationSettings.from_env())
    return load_config(path)
