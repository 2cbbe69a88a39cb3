"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
configuration file (~/.stripetools/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from stripetools.domain.models.common import RateLimitPolicy

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".stripetools"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"

DEFAULT_API_BASE_URL = "https://api.stripe.com/v1"
DEFAULT_MAX_REQUESTS = 25        # Requests admitted...
DEFAULT_TIME_WINDOW_SECONDS = 1.0  # ...per sliding window
DEFAULT_SAFETY_MARGIN_SECONDS = 0.05
DEFAULT_RETRY_AFTER_SECONDS = 2.0
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False

def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. YAML file (lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. .env file; override=False so real environment variables win
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("No .env file found at or above the current directory.")

    # 3. Environment variables are read lazily in get_config

    _loaded = True
    logger.debug("Configuration loading process completed.")

def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Turns nested YAML mappings into dotted keys (stripe: {timeout_seconds: 5} -> stripe.timeout_seconds)."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{dotted}."))
        else:
            flat[dotted] = value
    return flat

def reset_configuration() -> None:
    """Forgets loaded configuration so the next load_configuration call reloads."""
    global _config, _loaded
    _config = {}
    _loaded = False

def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration
    2. Environment variable (key upper-cased, dots replaced by underscores)
    3. YAML config
    4. Default value

    Args:
        key: The configuration key, e.g. 'stripe.timeout_seconds'
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = key.upper().replace('.', '_')
    if env_key in os.environ:
        value = os.environ[env_key]
        # Try to convert common types
        if value.lower() == 'true':
            return True
        elif value.lower() == 'false':
            return False
        try:
            if '.' in value:
                return float(value)
            else:
                return int(value)
        except (ValueError, TypeError):
            return value

    if key in _config:
        return _config[key]

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default

def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None

# --- Convenience Functions ---

def get_stripe_secret_key() -> Optional[str]:
    """Gets the Stripe secret key (ENV STRIPE_SECRET_KEY first, then yaml stripe.secret_key).

    The key is opaque, so the environment value bypasses get_config's type conversion.
    """
    if 'STRIPE_SECRET_KEY' in _test_config:
        key = _test_config['STRIPE_SECRET_KEY']
    else:
        key = os.environ.get('STRIPE_SECRET_KEY')
    if not key:
        key = _test_config.get('stripe.secret_key') if 'stripe.secret_key' in _test_config else _config.get('stripe.secret_key')
    return str(key) if key is not None else None

def get_api_base_url() -> str:
    return str(get_config('stripe.api_base', DEFAULT_API_BASE_URL)).rstrip('/')

def get_rate_limit_policy() -> RateLimitPolicy:
    """Reads the client-side sliding window settings."""
    return RateLimitPolicy(
        max_requests=int(get_config('stripe.rate_limit.max_requests', DEFAULT_MAX_REQUESTS)),
        time_window=float(get_config('stripe.rate_limit.time_window', DEFAULT_TIME_WINDOW_SECONDS)),
        safety_margin=float(get_config('stripe.rate_limit.safety_margin', DEFAULT_SAFETY_MARGIN_SECONDS)),
    )

def get_default_retry_after() -> float:
    """Delay used after a 429 that carries no Retry-After header."""
    return float(get_config('stripe.default_retry_after', DEFAULT_RETRY_AFTER_SECONDS))

def get_request_timeout() -> float:
    return float(get_config('stripe.timeout_seconds', DEFAULT_REQUEST_TIMEOUT_SECONDS))

def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration keys: {sorted(config_dict)}")

def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")

# Load configuration when the module is imported
load_configuration()
