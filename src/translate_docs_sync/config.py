"""
Configuration management for translate-docs-sync.

Handles loading configuration from YAML files and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from translate_docs_sync.errors import ConfigurationError
from translate_docs_sync.invoker.command import DEFAULT_COMMAND, parse_command_spec
from translate_docs_sync.invoker.factory import InvokerType

# Load .env file if present (before Settings initialization)
load_dotenv()

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Legacy environment variables and the settings they override
ENV_OVERRIDES = {
    "TRANSLATION_CSV": ("paths", "manifest"),
    "TRANSLATION_METADATA": ("paths", "metadata"),
    "TRANSLATION_ALLOWED_LANGUAGES": ("languages", "allowed"),
    "GEMINI_TRANSLATION_CLI": ("invoker", "command"),
    "TRANSLATION_COMMAND": ("invoker", "command"),
}

DEFAULT_CONFIG_FILES = [
    Path("config.yaml"),
    Path("config.yml"),
    Path(".translate-docs.yaml"),
]


class ProjectConfig(BaseModel):
    """Project metadata configuration."""

    name: str = Field(default="translate-docs")
    description: str = Field(default="")


class PathsConfig(BaseModel):
    """Configuration for file paths."""

    model_config = ConfigDict(validate_default=True)

    root: Path = Field(default=Path("."))
    manifest: Path = Field(default=Path("translations/targets.csv"))
    metadata: Path = Field(default=Path(".translations.json"))

    @field_validator("root", "manifest", "metadata")
    @classmethod
    def expand_path(cls, v: Path) -> Path:
        """Expand user home directory and make path absolute."""
        return Path(v).expanduser().resolve()


class LanguagesConfig(BaseModel):
    """Configuration for permitted language tags."""

    allowed: list[str] = Field(default_factory=lambda: ["en", "ja"])

    @field_validator("allowed", mode="before")
    @classmethod
    def split_languages(cls, v: Any) -> Any:
        """Accept a comma separated string as well as a list."""
        if isinstance(v, str):
            v = v.split(",")
        if isinstance(v, list):
            return [str(item).strip() for item in v if str(item).strip()]
        return v


class InvokerConfig(BaseModel):
    """Configuration for the translation invoker."""

    type: InvokerType = Field(default=InvokerType.COMMAND)
    command: list[str] = Field(default_factory=lambda: list(DEFAULT_COMMAND))
    timeout_seconds: float | None = Field(default=None, gt=0)

    @field_validator("command", mode="before")
    @classmethod
    def validate_command(cls, v: Any) -> list[str]:
        """Parse JSON array strings and check the required placeholders."""
        try:
            return parse_command_spec(v)
        except ConfigurationError as e:
            raise ValueError(str(e)) from None


class LoggingConfig(BaseModel):
    """Configuration for status output."""

    level: str = Field(default="INFO")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(LOG_LEVELS)}")
        return level


class Settings(BaseSettings):
    """Main settings class that combines all configurations."""

    model_config = SettingsConfigDict(
        env_prefix="",  # No prefix for simpler env vars
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Configuration sections
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    languages: LanguagesConfig = Field(default_factory=LanguagesConfig)
    invoker: InvokerConfig = Field(default_factory=InvokerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    dry_run: bool = Field(default=False)

    def __init__(self, **data: Any) -> None:
        """Initialize with the legacy environment variable overrides applied."""
        super().__init__(**_apply_env_overrides(data))

    @classmethod
    def from_yaml(cls, path: Path | str) -> Settings:
        """Load settings from a YAML file, with environment variable overrides."""
        path = Path(path)
        if not path.exists():
            # Return defaults if file doesn't exist
            return cls()

        with open(path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}

        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"Invalid configuration file {path}: expected a mapping.")

        # Process environment variable substitutions in YAML values
        yaml_config = _substitute_env_vars(yaml_config)

        return cls(**yaml_config)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay the legacy environment variables onto raw settings data."""
    result = dict(data)
    for env_var, (section, key) in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if not value:
            continue
        current = result.get(section) or {}
        if isinstance(current, BaseModel):
            current = current.model_dump()
        result[section] = {**current, key: value}
    return result


def _substitute_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively substitute ${ENV_VAR} patterns in config values."""
    result = {}
    for key, value in config.items():
        if isinstance(value, dict):
            result[key] = _substitute_env_vars(value)
        elif isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            env_var = value[2:-1]
            result[key] = os.getenv(env_var, "")
        elif isinstance(value, list):
            result[key] = [
                _substitute_env_vars(item) if isinstance(item, dict) else item for item in value
            ]
        else:
            result[key] = value
    return result


def _format_validation_error(exc: ValidationError) -> str:
    details = []
    for entry in exc.errors():
        location = ".".join(str(part) for part in entry.get("loc", ()))
        prefix = f"{location}: " if location else ""
        details.append(f"- {prefix}{entry.get('msg', 'Invalid value')}")
    return "Configuration validation errors detected:\n" + "\n".join(details)


def load_config(path: Path | str | None = None) -> Settings:
    """
    Load configuration from YAML file or return defaults.

    Args:
        path: Path to YAML config file. If None, looks for config.yaml in current directory.

    Returns:
        Settings instance with merged YAML and environment configurations.

    Raises:
        ConfigurationError: If the file cannot be parsed or fails validation.
    """
    if path is None:
        for p in DEFAULT_CONFIG_FILES:
            if p.exists():
                path = p
                break

    try:
        if path is not None:
            return Settings.from_yaml(path)
        return Settings()
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Configuration file {path} is not valid YAML: {e}") from e
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e)) from e


def apply_overrides(
    settings: Settings,
    *,
    root: Path | None = None,
    manifest: Path | None = None,
    metadata: Path | None = None,
    allowed: str | list[str] | None = None,
    invoker_type: str | None = None,
    command: str | list[str] | None = None,
    dry_run: bool | None = None,
) -> Settings:
    """
    Return a copy of the settings with command-line values applied.

    Values left as None keep their configured value.

    Raises:
        ConfigurationError: If an override fails validation.
    """
    paths = settings.paths.model_dump()
    for key, value in (("root", root), ("manifest", manifest), ("metadata", metadata)):
        if value is not None:
            paths[key] = value

    languages = settings.languages.model_dump()
    if allowed is not None:
        languages["allowed"] = allowed

    invoker = settings.invoker.model_dump()
    if invoker_type is not None:
        invoker["type"] = invoker_type
    if command is not None:
        invoker["command"] = command

    try:
        update: dict[str, Any] = {
            "paths": PathsConfig(**paths),
            "languages": LanguagesConfig(**languages),
            "invoker": InvokerConfig(**invoker),
        }
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e)) from e

    if dry_run is not None:
        update["dry_run"] = dry_run or settings.dry_run
    return settings.model_copy(update=update)


DEFAULT_CONFIG = """# translate-docs-sync configuration
project:
  name: "my-docs"

paths:
  # Directory that manifest paths are relative to
  root: "."
  # CSV with columns relative_path,src_lang,target_langs
  manifest: "translations/targets.csv"
  # Translation cache (segment hashes and translations)
  metadata: ".translations.json"

languages:
  # Pairs using any other language are skipped
  allowed: [en, ja]

invoker:
  # "command" runs the template below; "echo" copies the source text
  type: command
  # {PROMPT_FILE} and {OUTPUT_FILE} are required. Also available:
  # {SOURCE_LANG}, {TARGET_LANG}, {SOURCE_PATH}, {TARGET_PATH}
  command:
    - bash
    - -lc
    - gemini text --model ${GEMINI_TRANSLATION_MODEL:-gemini-1.5-pro} --input-file "{PROMPT_FILE}" --output-file "{OUTPUT_FILE}"
  # Seconds to wait for each call (omit to wait forever)
  # timeout_seconds: 300

logging:
  level: INFO
"""


def create_default_config(path: Path | str = "config.yaml") -> None:
    """Create a default configuration file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(DEFAULT_CONFIG)
