"""Loading and validation of the ``oak.yaml`` configuration file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

CONFIG_FILE_NAME = "oak.yaml"
DEFAULT_REDACT_MESSAGE = "[REDACTED]"


class ConfigError(Exception):
    """Raised when the configuration cannot be found, read or accepted."""


@dataclass
class Config:
    """Settings that control which packages are scanned and what is redacted."""

    packages: list[str] = field(default_factory=list)
    redact_keys: list[str] = field(default_factory=list)
    redact_message: str = ""

    def validate(self) -> None:
        """Normalise the settings in place and reject unusable package paths."""
        self.redact_keys[:] = [key.lower() for key in self.redact_keys]

        if not self.redact_message:
            self.redact_message = DEFAULT_REDACT_MESSAGE

        for package in self.packages:
            if package == "":
                raise ConfigError("empty package path in packages list")
            if not os.path.isabs(package) and not os.path.exists(os.path.abspath(package)):
                raise ConfigError(f"package path does not exist: {package}")

    def should_redact_field(self, field_name: str) -> bool:
        """Return True if the field name matches a redact key, ignoring case."""
        return field_name.lower() in self.redact_keys

    def get_packages(self) -> list[str]:
        """Return the packages to process, defaulting to the current directory."""
        return self.packages if self.packages else ["."]


def default_config() -> Config:
    """Return a configuration holding the default values."""
    return Config(packages=["."], redact_keys=[], redact_message=DEFAULT_REDACT_MESSAGE)


def load_config() -> Config:
    """Find ``oak.yaml`` in the current directory or a parent and load it."""
    config_path = _find_config_file()
    if config_path is None:
        raise ConfigError(
            "oak.yaml configuration file not found in current directory or parent directories"
        )
    return load_config_from_path(config_path)


def load_config_from_path(config_path: str | os.PathLike[str]) -> Config:
    """Load and validate the configuration file at the given path."""
    path = os.fspath(config_path)
    try:
        data = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"failed to read config file {path}: {exc}") from exc

    try:
        config = _decode(data)
    except (yaml.YAMLError, ValueError) as exc:
        raise ConfigError(f"failed to parse config file {path}: {exc}") from exc

    try:
        config.validate()
    except ConfigError as exc:
        raise ConfigError(f"invalid configuration in {path}: {exc}") from exc

    return config


def _find_config_file() -> Path | None:
    cwd = Path.cwd()
    for directory in (cwd, *cwd.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.exists():
            return candidate
    return None


def _decode(data: str) -> Config:
    config = default_config()
    document = yaml.safe_load(data)
    if document is None:
        return config
    if not isinstance(document, dict):
        raise ValueError("configuration must be a mapping")

    if "packages" in document:
        config.packages = _string_list(document["packages"], "packages")
    if "redactKeys" in document:
        config.redact_keys = _string_list(document["redactKeys"], "redactKeys")
    if "redactMessage" in document:
        value = document["redactMessage"]
        config.redact_message = "" if value is None else _scalar_to_str(value, "redactMessage")
    return config


def _string_list(value: object, key: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{key} must be a list of strings")
    return [_scalar_to_str(item, key) for item in value]


def _scalar_to_str(value: object, key: str) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(f"{key} must hold scalar values")