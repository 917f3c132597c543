"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables and a dedicated
configuration file (~/.dircontacts/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from dircontacts.domain.errors import ConfigurationError
from dircontacts.infrastructure.resilience.quota_retry import (
    DEFAULT_BACKOFF_FACTOR, DEFAULT_MAX_DELAY_S, DEFAULT_QUOTA_MARKER,
    DEFAULT_RETRY_DELAY_S, QuotaRetryPolicy,
)

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".dircontacts"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_TOKEN_FILE = DEFAULT_CONFIG_DIR / "token.json"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "DIRCONTACTS_"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


def _flatten(mapping: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flattens nested mappings into dotted keys ({'a': {'b': 1}} -> {'a.b': 1})."""
    flat: Dict[str, Any] = {}
    for key, value in mapping.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def env_var_name(key: str) -> str:
    """Environment variable consulted for a config key ('quota.max_retries' -> DIRCONTACTS_QUOTA_MAX_RETRIES)."""
    return ENV_PREFIX + key.upper().replace(".", "_")


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None, force: bool = False) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                yaml_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load or parse YAML config {config_file}: {e}") from e
        if isinstance(yaml_config, dict):
            _config.update(_flatten(yaml_config))
            logger.info(f"Loaded configuration from YAML: {config_file}")
        elif yaml_config is not None:
            logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file (Medium priority)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        # override=False: ENV VARS take precedence
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("No .env file found at or above current directory.")

    # 3. Environment Variables (Highest priority) are handled in get_config

    _loaded = True
    logger.debug("Configuration loading process completed.")


def _coerce(value: str) -> Any:
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except ValueError:
        return value


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable
    3. YAML config
    4. Default value

    Args:
        key: The configuration key (dotted, e.g. 'contacts.batch_size')
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = env_var_name(key)
    if env_key in os.environ:
        return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None

# --- Typed Getters ---

def _get_number(key: str, default: Any, kind: type, minimum: Optional[float] = None) -> Any:
    value = get_config(key, default)
    if value is None:
        return None
    try:
        number = kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Config '{key}' must be {kind.__name__}, got {value!r}") from e
    if minimum is not None and number < minimum:
        raise ConfigurationError(f"Config '{key}' must be >= {minimum}, got {number}")
    return number


def get_group_id() -> str:
    return str(get_config('contacts.group_id', 'contactGroups/all'))


def get_max_members() -> int:
    return _get_number('contacts.max_members', 10000, int, minimum=1)


def get_batch_size() -> int:
    return _get_number('contacts.batch_size', 50, int, minimum=1)


def get_max_concurrent_batches() -> int:
    return _get_number('contacts.max_concurrent_batches', 16, int, minimum=1)


def get_request_pacing() -> Dict[str, Any]:
    """Sliding window pacing for batch calls; max_requests None means off."""
    return {
        'max_requests': _get_number('contacts.max_requests_per_window', None, int, minimum=1),
        'time_window': _get_number('contacts.request_window_seconds', 60.0, float, minimum=0),
    }


def get_sentinel() -> str:
    return str(get_config('contacts.sentinel', 'me'))


def get_fetch_timeout() -> Optional[float]:
    """Deadline for one contact load in seconds, or None for no deadline."""
    return _get_number('fetch.timeout_seconds', None, float, minimum=0)


def get_quota_policy() -> QuotaRetryPolicy:
    """Builds the quota retry policy from configuration."""
    return QuotaRetryPolicy(
        marker=str(get_config('quota.marker', DEFAULT_QUOTA_MARKER)),
        initial_delay_s=_get_number('quota.retry_delay_seconds', DEFAULT_RETRY_DELAY_S, float, minimum=0),
        backoff_factor=_get_number('quota.backoff_factor', DEFAULT_BACKOFF_FACTOR, float, minimum=1),
        max_delay_s=_get_number('quota.max_delay_seconds', DEFAULT_MAX_DELAY_S, float, minimum=0),
        max_retries=_get_number('quota.max_retries', None, int, minimum=0),
    )


def get_token_file() -> Path:
    return Path(get_config('google.token_file', str(DEFAULT_TOKEN_FILE))).expanduser()


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
