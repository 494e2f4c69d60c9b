"""Configuration management for ttrss-tool."""

import json
import os
from pathlib import Path
from typing import Any, TextIO

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from ttrss_tool.exceptions import ConfigurationError

DOTFILE_SUBPATH = "ttrss-tool/config"
DEFAULT_USER = "admin"
PASSWORD_PROMPT = "password (will be echoed): "

# Dotfile keys (matched case-insensitively) -> Settings fields.
_DOTFILE_KEYS = {
    "addr": "addr",
    "user": "user",
    "pass": "password",
    "password": "password",
    "request_timeout": "request_timeout",
}


class Settings(BaseSettings):
    """Connection settings.

    Sources, highest first: command-line flags (applied by the caller),
    TTRSS_* environment variables and .env, the dotfile, defaults.
    """

    addr: str = ""
    user: str = DEFAULT_USER
    password: str = Field(default="", repr=False)
    request_timeout: float = 30

    model_config = SettingsConfigDict(
        env_prefix="TTRSS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Dotfile values arrive as init kwargs and rank below the environment.
        return env_settings, dotenv_settings, init_settings


def xdg_config_search(subpath: str, only_if_exists: bool = False) -> Path | None:
    """Find a config file on the XDG config search path.

    Searches $XDG_CONFIG_HOME (default ~/.config), then each entry of
    $XDG_CONFIG_DIRS. Relative or missing directories are skipped.

    Args:
        subpath: Path of the file below a config directory
        only_if_exists: Return None rather than a candidate path when no
            file exists yet

    Returns:
        The first existing file, else the first candidate path (or None).
    """
    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    dirs = [config_home]
    config_dirs = os.environ.get("XDG_CONFIG_DIRS")
    if config_dirs:
        dirs.extend(config_dirs.split(":"))

    fallback: Path | None = None
    for entry in dirs:
        directory = Path(entry)
        if not directory.is_absolute() or not directory.is_dir():
            continue
        candidate = directory / subpath
        if fallback is None:
            fallback = candidate
        if candidate.is_file():
            return candidate

    if only_if_exists:
        return None
    return fallback


def read_dotfile(path: Path) -> dict[str, Any]:
    """Read settings from a JSON dotfile.

    A missing file yields no settings.

    Raises:
        ConfigurationError: If the file exists but cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as e:
        raise ConfigurationError(f"unable to read dotfile [{path}]: {e}") from e

    try:
        data = json.loads(text)
    except ValueError as e:
        raise ConfigurationError(f"unable to parse contents of dotfile [{path}]: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"unable to parse contents of dotfile [{path}]: not an object")

    values: dict[str, Any] = {}
    for key, value in data.items():
        field = _DOTFILE_KEYS.get(str(key).lower())
        if field is not None:
            values[field] = value
    return values


def load_settings(dotfile: Path | None = None) -> Settings:
    """Build Settings from the environment and an optional dotfile.

    Raises:
        ConfigurationError: If the dotfile is unreadable or holds invalid values.
    """
    values = read_dotfile(dotfile) if dotfile else {}
    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"invalid settings: {e}") from e


def read_password(stdin: TextIO, stdout: TextIO) -> str:
    """Prompt on ``stdout`` until a non-empty password is read from ``stdin``.

    Raises:
        ConfigurationError: If input ends before a password is entered.
    """
    while True:
        stdout.write(PASSWORD_PROMPT)
        stdout.flush()
        line = stdin.readline()
        if not line:
            raise ConfigurationError("failed reading password")
        password = line.rstrip("\r\n")
        if password:
            return password
