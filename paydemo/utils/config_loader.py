"""Settings loader: YAML file for options, environment for secrets."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from paydemo.models.config import Settings
from paydemo.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = get_logger("utils.config_loader")


class ConfigLoaderError(Exception):
    """Error raised when settings cannot be loaded. Fatal at startup."""

    pass


CONFIG_FILE_NAMES = [
    ".paydemo.yml",
    ".paydemo.yaml",
]

# Environment variable -> settings key. Environment wins over the file.
ENV_OVERRIDES = {
    "STRIPE_SECRET_KEY": "stripe_api_key",
    "WEBHOOK_TOLERANCE_SECONDS": "tolerance_seconds",
    "WEBHOOK_SIGNATURE_HEADER": "signature_header",
    "ALLOWED_ORIGINS": "allowed_origins",
    "CHECKOUT_SUCCESS_URL": "success_url",
    "CHECKOUT_CANCEL_URL": "cancel_url",
    "CHECKOUT_CURRENCY": "currency",
    "PAYDEMO_HOST": "host",
    "PAYDEMO_PORT": "port",
}

# Secrets are only ever read from the environment
SECRET_KEYS = {"webhook_secret", "stripe_api_key"}


def load_settings(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load process settings.

    Options are read from ``config_path``, else from ``$PAYDEMO_CONFIG``, else
    from the first of ``.paydemo.yml`` / ``.paydemo.yaml`` in the working
    directory; a missing file means defaults. Environment variables then
    override individual options. The webhook secret comes only from
    ``STRIPE_WEBHOOK_SECRET``.

    Args:
        config_path: Explicit YAML file to read.
        environ: Environment mapping, ``os.environ`` when omitted.

    Returns:
        Settings instance.

    Raises:
        ConfigLoaderError: If the secret is missing or any option is invalid.
    """
    env = os.environ if environ is None else environ

    webhook_secret = env.get("STRIPE_WEBHOOK_SECRET", "").strip()
    if not webhook_secret:
        raise ConfigLoaderError("STRIPE_WEBHOOK_SECRET environment variable not set")

    if config_path is None and env.get("PAYDEMO_CONFIG"):
        config_path = Path(env["PAYDEMO_CONFIG"])

    config_file = config_path if config_path is not None else _find_config_file(Path.cwd())
    raw_config: dict[str, Any] = {}

    if config_file is not None:
        try:
            raw_config = _load_yaml_file(config_file) or {}
        except yaml.YAMLError as e:
            raise ConfigLoaderError(f"Failed to parse config file {config_file}: {e}") from e
        except OSError as e:
            raise ConfigLoaderError(f"Failed to read config file {config_file}: {e}") from e

        if not isinstance(raw_config, dict):
            raise ConfigLoaderError(f"Config file {config_file} must contain a mapping")

        leaked = SECRET_KEYS & raw_config.keys()
        if leaked:
            raise ConfigLoaderError(
                f"Secrets must be supplied via environment, not {config_file}: "
                f"{', '.join(sorted(leaked))}"
            )

    for env_name, key in ENV_OVERRIDES.items():
        value = env.get(env_name)
        if value:
            raw_config[key] = value

    try:
        settings = Settings.from_mapping(raw_config, webhook_secret=webhook_secret)
    except (TypeError, ValueError) as e:
        raise ConfigLoaderError(f"Invalid configuration: {e}") from e

    logger.info(
        "Loaded settings",
        extra={
            "config_file": str(config_file) if config_file else None,
            "secret_hint": settings.secret_hint,
            "tolerance_seconds": settings.tolerance_seconds,
            "payments_enabled": settings.payments_enabled,
        },
    )
    return settings


def _find_config_file(directory: Path) -> Path | None:
    """Find the first config file present in a directory."""
    for filename in CONFIG_FILE_NAMES:
        config_path = directory / filename
        if config_path.is_file():
            return config_path

    return None


def _load_yaml_file(filepath: Path) -> Any:
    """Load a YAML file.

    Args:
        filepath: Path to the YAML file.

    Returns:
        Parsed YAML content, or None if empty.

    Raises:
        yaml.YAMLError: If YAML is invalid.
        OSError: If file cannot be read.
    """
    content = filepath.read_text(encoding="utf-8")

    if not content.strip():
        return None

    return yaml.safe_load(content)
