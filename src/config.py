"""User defaults for the ``arr`` command line.

Defaults come from ``.arrrc.json`` in the working directory, falling
back to the one in the home directory, then from ``ARR_*`` environment
variables which override file values.  The codec itself never reads
configuration; only the CLI does.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from constants import CONFIG_FILENAME, INTENT_POLICIES, MODES
from errors import ArrError, ErrorCodes

logger = logging.getLogger(__name__)

# On-disk key -> ArrConfig attribute
_FILE_KEYS = {
    "creator": "creator",
    "privateKeyPath": "private_key_path",
    "publicKeyPath": "public_key_path",
    "tool": "tool",
    "intent": "intent",
    "intentPolicy": "intent_policy",
    "defaultMode": "default_mode",
    "outputDir": "output_dir",
}

# Environment variable -> ArrConfig attribute
ENV_OVERRIDES = {
    "ARR_CREATOR": "creator",
    "ARR_PRIVATE_KEY": "private_key_path",
    "ARR_PUBLIC_KEY": "public_key_path",
    "ARR_MODE": "default_mode",
}


@dataclass
class ArrConfig:
    """Resolved user defaults."""

    creator: str | None = None
    private_key_path: str | None = None
    public_key_path: str | None = None
    tool: str | None = None
    intent: str | None = None
    intent_policy: str = "none"
    default_mode: str = "auto"
    output_dir: str | None = None
    path: Path | None = None

    def to_file_dict(self) -> dict[str, Any]:
        """Serialize to the on-disk key names, skipping unset values."""
        data: dict[str, Any] = {}
        for file_key, attr in _FILE_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                data[file_key] = value
        return data


def config_paths(cwd: Path | None = None, home: Path | None = None) -> tuple[Path, Path]:
    """Local and global config file locations."""
    cwd = Path(cwd) if cwd is not None else Path.cwd()
    home = Path(home) if home is not None else Path.home()
    return cwd / CONFIG_FILENAME, home / CONFIG_FILENAME


def _from_mapping(data: Any, path: Path) -> ArrConfig:
    if not isinstance(data, dict):
        raise ArrError(ErrorCodes.INVALID_CONFIG, f"Invalid ARR config at {path}.")

    values: dict[str, Any] = {}
    for file_key, attr in _FILE_KEYS.items():
        value = data.get(file_key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise ArrError(
                ErrorCodes.INVALID_CONFIG,
                f"Config value '{file_key}' must be a string in {path}.",
            )
        values[attr] = value

    config = ArrConfig(path=path, **values)
    _check_choices(config, str(path))
    return config


def _check_choices(config: ArrConfig, origin: str) -> None:
    if config.default_mode not in MODES:
        raise ArrError(
            ErrorCodes.INVALID_CONFIG,
            f"defaultMode must be one of: {', '.join(MODES)} ({origin}).",
        )
    if config.intent_policy not in INTENT_POLICIES:
        raise ArrError(
            ErrorCodes.INVALID_CONFIG,
            f"intentPolicy must be one of: {', '.join(INTENT_POLICIES)} ({origin}).",
        )


def read_config_file(path: Path) -> ArrConfig | None:
    """
    Read one config file.

    Returns:
        The config, or None if the file does not exist.

    Raises:
        ArrError: ``invalid_config`` for invalid JSON or values.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None

    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise ArrError(ErrorCodes.INVALID_CONFIG, f"Invalid JSON in ARR config: {path}") from exc

    return _from_mapping(data, path)


def load_config(
    cwd: Path | None = None,
    home: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ArrConfig:
    """
    Load defaults from the local or global config file and the environment.

    Args:
        cwd: Directory holding the local config (default: current directory).
        home: Directory holding the global config (default: home directory).
        environ: Environment mapping (default: ``os.environ``).

    Returns:
        Resolved configuration; all defaults when no file exists.
    """
    local_path, global_path = config_paths(cwd, home)
    config = read_config_file(local_path) or read_config_file(global_path) or ArrConfig()
    if config.path is not None:
        logger.debug("Loaded ARR config from %s", config.path)

    environ = os.environ if environ is None else environ
    for env_name, attr in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            setattr(config, attr, value)

    _check_choices(config, "environment")
    return config


def save_config(path: Path, config: ArrConfig) -> Path:
    """Write a config file in the on-disk format."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.to_file_dict(), indent=2) + "\n", encoding="utf-8")
    return path


def resolve_intent(config: ArrConfig, file_path: Path, explicit: str | None = None) -> str | None:
    """Pick the intent for a file: explicit value, then the configured policy."""
    if explicit:
        return explicit
    if config.intent_policy == "fixed":
        return config.intent
    if config.intent_policy == "filename":
        return Path(file_path).stem
    return None
