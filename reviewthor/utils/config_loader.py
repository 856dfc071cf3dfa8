"""Process settings loader."""

import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import yaml

from reviewthor.models.config import AppSettings
from reviewthor.utils.logging import get_logger

logger = get_logger("utils.config_loader")


class ConfigLoaderError(Exception):
    """Error raised when settings cannot be loaded."""

    pass


# Environment variable -> (settings field, converter)
ENV_OVERRIDES: dict[str, tuple[str, Callable[[str], Any]]] = {
    "GITHUB_APP_ID": ("github_app_id", int),
    "GITHUB_WEBHOOK_SECRET": ("github_webhook_secret", str),
    "BEDROCK_MODEL_ID": ("model_id", str),
    "MAX_TOKENS": ("max_tokens", int),
    "AI_TEMPERATURE": ("temperature", float),
    "MAX_FILES_PER_PR": ("max_files_per_review", int),
    "MAX_FILE_SIZE_BYTES": ("max_file_size", int),
    "TOKEN_BUDGET": ("token_budget", int),
}

SETTINGS_FILE_ENV = "REVIEWTHOR_CONFIG"


def load_settings(
    config_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppSettings:
    """Load process settings.

    Values are layered: built-in defaults, then the YAML settings file
    (``config_file`` or the path in ``REVIEWTHOR_CONFIG``), then environment
    variables.

    Args:
        config_file: Optional path to a YAML settings file.
        environ: Environment mapping, defaults to ``os.environ``.

    Returns:
        AppSettings instance.

    Raises:
        ConfigLoaderError: If the file or any value is invalid.
    """
    env = os.environ if environ is None else environ

    if config_file is None and env.get(SETTINGS_FILE_ENV):
        config_file = Path(env[SETTINGS_FILE_ENV])

    raw: dict[str, Any] = {}
    if config_file is not None:
        try:
            raw.update(_load_yaml_file(config_file) or {})
        except yaml.YAMLError as e:
            raise ConfigLoaderError(f"Failed to parse settings file {config_file}: {e}") from e
        except OSError as e:
            raise ConfigLoaderError(f"Failed to read settings file {config_file}: {e}") from e

    for env_name, (field_name, convert) in ENV_OVERRIDES.items():
        value = env.get(env_name)
        if not value:
            continue
        try:
            raw[field_name] = convert(value)
        except ValueError as e:
            raise ConfigLoaderError(f"Invalid value for {env_name}: {value!r}") from e

    raw["github_private_key"] = _get_private_key(env) or raw.get("github_private_key", "")

    try:
        settings = AppSettings.from_dict(raw)
    except (TypeError, ValueError) as e:
        raise ConfigLoaderError(f"Invalid settings: {e}") from e

    logger.debug(
        "Loaded settings",
        extra={
            "settings_file": str(config_file) if config_file else None,
            "model_id": settings.model_id,
            "token_budget": settings.token_budget,
        },
    )
    return settings


def _get_private_key(env: Mapping[str, str]) -> str | None:
    """Get the GitHub App private key from the environment.

    Args:
        env: Environment mapping.

    Returns:
        The private key content, or None if not configured.

    Raises:
        ConfigLoaderError: If the key file cannot be read.
    """
    key = env.get("GITHUB_PRIVATE_KEY")
    if key:
        return key

    key_path = env.get("GITHUB_PRIVATE_KEY_PATH")
    if key_path:
        try:
            return Path(key_path).read_text()
        except OSError as e:
            raise ConfigLoaderError(f"Failed to read private key from {key_path}: {e}") from e

    return None


def _load_yaml_file(filepath: Path) -> dict[str, Any] | None:
    """Load a YAML mapping.

    Args:
        filepath: Path to the YAML file.

    Returns:
        Parsed YAML content, or None if empty.

    Raises:
        yaml.YAMLError: If YAML is invalid or not a mapping.
        OSError: If file cannot be read.
    """
    content = filepath.read_text(encoding="utf-8")

    if not content.strip():
        return None

    result = yaml.safe_load(content)
    if result is not None and not isinstance(result, dict):
        raise yaml.YAMLError(f"expected a mapping, got {type(result).__name__}")
    return result
