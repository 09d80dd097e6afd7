"""Run configuration loading, merging and persistence.

A RunConfiguration is assembled from four layers, later layers winning:

1. Built-in defaults (RunConfiguration field defaults)
2. Environment variables (``CARTSYNC_*``, a ``.env`` file is honoured)
3. The JSON config file (``config.json`` by default)
4. Command-line flags

The JSON file uses the camelCase keys below; ``save_config`` writes the
same format, so ``--save-config`` turns a command line into a reusable file.

    {
      "csv": "devices.csv",
      "customerId": "my_customer",
      "adminUser": "admin@example.com",
      "serviceAccount": "service-account.json",
      "promptOnError": true,
      "dryRun": false,
      "cartNumber": "3",
      "deviceIdTemplate": "{CartNumber}-{DeviceNumber}",
      "assetIdTemplate": "{DeviceId} {PurchaseId} {StudentName}",
      "ouTemplate": "/Chromebooks/Cart {CartNumber} {YearRange}",
      "tabNameTemplate": "Cart {CartNumber} {YearRange}",
      "googleSheetId": "1_3lk4j23KJsl3dd",
      "failedCsv": "failed-devices.csv"
    }
"""
import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from .api.exceptions import ConfigurationError
from .assigner.domain.entities import RunConfiguration

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.json"
ENV_PREFIX = "CARTSYNC_"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ConfigKey:
    """Ties a RunConfiguration field to its JSON key and environment variable."""
    field: str
    json_key: str
    env_var: str
    is_flag: bool = False


CONFIG_KEYS = (
    ConfigKey("roster_path", "csv", "CARTSYNC_CSV"),
    ConfigKey("customer_id", "customerId", "CARTSYNC_CUSTOMER_ID"),
    ConfigKey("admin_user", "adminUser", "CARTSYNC_ADMIN_USER"),
    ConfigKey("service_account_path", "serviceAccount", "CARTSYNC_SERVICE_ACCOUNT"),
    ConfigKey("prompt_on_error", "promptOnError", "CARTSYNC_PROMPT_ON_ERROR", is_flag=True),
    ConfigKey("dry_run", "dryRun", "CARTSYNC_DRY_RUN", is_flag=True),
    ConfigKey("cart_number", "cartNumber", "CARTSYNC_CART_NUMBER"),
    ConfigKey("device_id_template", "deviceIdTemplate", "CARTSYNC_DEVICE_ID_TEMPLATE"),
    ConfigKey("asset_id_template", "assetIdTemplate", "CARTSYNC_ASSET_ID_TEMPLATE"),
    ConfigKey("ou_template", "ouTemplate", "CARTSYNC_OU_TEMPLATE"),
    ConfigKey("tab_name_template", "tabNameTemplate", "CARTSYNC_TAB_NAME_TEMPLATE"),
    ConfigKey("sheet_id", "googleSheetId", "CARTSYNC_SHEET_ID"),
    ConfigKey("failed_csv_path", "failedCsv", "CARTSYNC_FAILED_CSV"),
)

REQUIRED_KEYS = (
    "customerId",
    "adminUser",
    "serviceAccount",
    "csv",
    "deviceIdTemplate",
    "assetIdTemplate",
)


def _coerce(key: ConfigKey, value: Any) -> Any:
    if key.is_flag:
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_VALUES
        return bool(value)
    if value is None:
        return None
    # Numbers are accepted for text settings such as cartNumber
    return str(value)


def apply_overrides(
    config: RunConfiguration, values: Mapping[str, Any]
) -> RunConfiguration:
    """Return ``config`` with every non-None value from ``values`` applied.

    Args:
        config: Base configuration
        values: Mapping keyed by JSON key (e.g. "customerId")
    """
    changes = {}
    for key in CONFIG_KEYS:
        if key.json_key in values and values[key.json_key] is not None:
            changes[key.field] = _coerce(key, values[key.json_key])
    return replace(config, **changes) if changes else config


def config_from_env(
    base: Optional[RunConfiguration] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RunConfiguration:
    """Apply ``CARTSYNC_*`` environment variables on top of ``base``."""
    environ = os.environ if environ is None else environ
    values = {
        key.json_key: environ[key.env_var]
        for key in CONFIG_KEYS
        if environ.get(key.env_var)
    }
    return apply_overrides(base or RunConfiguration(), values)


def load_config(
    path: str = DEFAULT_CONFIG_FILE,
    base: Optional[RunConfiguration] = None,
) -> Optional[RunConfiguration]:
    """Load a JSON config file on top of ``base``.

    Returns:
        The merged configuration, or None if the file does not exist

    Raises:
        ConfigurationError: If the file is not a JSON object
    """
    config_path = Path(path)
    if not config_path.is_file():
        return None

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to load {path}: {e}", cause=e)

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")

    unknown = set(data) - {key.json_key for key in CONFIG_KEYS}
    if unknown:
        logger.warning(f"Ignoring unknown keys in {path}: {', '.join(sorted(unknown))}")

    logger.info(f"Loaded configuration from {path}")
    return apply_overrides(base or RunConfiguration(), data)


def to_json_dict(config: RunConfiguration) -> dict[str, Any]:
    """Serialize a configuration with the JSON file keys."""
    return {key.json_key: getattr(config, key.field) for key in CONFIG_KEYS}


def save_config(config: RunConfiguration, path: str = DEFAULT_CONFIG_FILE) -> None:
    """Write ``config`` as indented JSON, replacing any existing file."""
    Path(path).write_text(json.dumps(to_json_dict(config), indent=2) + "\n", encoding="utf-8")
    logger.info(f"Saved configuration to {path}")


def validate_config(config: RunConfiguration) -> RunConfiguration:
    """Check that every required setting is non-empty.

    Raises:
        ConfigurationError: Listing the missing JSON keys
    """
    values = to_json_dict(config)
    missing = [key for key in REQUIRED_KEYS if not str(values.get(key) or "").strip()]
    if missing:
        raise ConfigurationError(
            f"Missing required settings: {', '.join(missing)}",
            missing_keys=missing,
        )
    return config
