# Configuration loading: per-environment JSON files with environment placeholders

import json
import os
import logging
from typing import Dict, Any
import re

CONFIG_FILES = {
    'production': 'config/config-prod.json',
    'development': 'config/config-dev.json',
}

REQUIRED_SECTIONS = ['app', 'server', 'auth', 'logging', 'genai']

_PLACEHOLDER = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}')


def _replace_env_vars(value: str) -> str:
    """
    Replace ${ENV_VAR} and ${ENV_VAR:-default} placeholders.

    A placeholder without a default whose variable is unset is left as is.
    """
    def replace_match(match):
        env_var, default = match.group(1), match.group(2)
        if env_var in os.environ:
            return os.environ[env_var]
        if default is not None:
            return default
        return match.group(0)

    return _PLACEHOLDER.sub(replace_match, value)


def _process_config_values(config: Any) -> Any:
    """Walk the config tree and substitute placeholders in every string"""
    if isinstance(config, dict):
        return {k: _process_config_values(v) for k, v in config.items()}
    elif isinstance(config, list):
        return [_process_config_values(item) for item in config]
    elif isinstance(config, str):
        return _replace_env_vars(config)
    else:
        return config


def _server_dir() -> str:
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def load_config(config_env: str = None) -> Dict[str, Any]:
    """
    Load the configuration file for an environment.

    Args:
        config_env: environment name; defaults to the CONFIG_ENV variable, then 'development'

    Returns:
        config dict with placeholders resolved
    """
    config_env = config_env or os.getenv('CONFIG_ENV', 'development')
    config_file = CONFIG_FILES.get(config_env, 'config/config.json')

    if not os.path.isabs(config_file):
        config_file = os.path.join(_server_dir(), config_file)

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = json.load(f)
    except FileNotFoundError:
        logging.error(f"Config file not found: {config_file}")
        raise
    except json.JSONDecodeError as e:
        logging.error(f"Config file is not valid JSON: {e}")
        raise

    config = _process_config_values(config)
    config.pop('_reference_doc', None)

    logging.debug(f"Loaded config file: {config_file}")
    return config


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Check that the required sections and the JWT secret are present.

    Returns:
        True when the config is usable
    """
    for section in REQUIRED_SECTIONS:
        if section not in config:
            logging.error(f"Config is missing required section: {section}")
            return False

    auth_config = config.get('auth', {})
    secret = auth_config.get('jwt_secret_key')
    if not secret or _PLACEHOLDER.fullmatch(secret):
        logging.error("JWT secret key is not configured")
        return False

    return True


class Config:
    """
    Application configuration
    """
    def __init__(self, config_env: str = None):
        self.env = config_env or os.getenv('CONFIG_ENV', 'development')
        self.config = load_config(self.env)

        if not validate_config(self.config):
            raise ValueError("Config validation failed")

    def get(self, key: str, default=None):
        """
        Read a config value by dotted key, e.g. 'auth.jwt_secret_key'.

        Args:
            key: dotted key
            default: value returned when any part of the key is missing

        Returns:
            config value
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def section(self, name: str) -> Dict[str, Any]:
        """Return a copy of a top-level section (empty dict if absent)"""
        return dict(self.config.get(name, {}))
