# Logging setup driven by the 'logging' config section

import logging
import logging.handlers
import os
from typing import Dict, Any, List

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'

# third-party loggers that are too chatty at DEBUG
QUIET_LOGGERS = ['httpx', 'httpcore', 'multipart']


def _parse_size(size_str: str) -> int:
    """Parse a size such as '10MB' into bytes"""
    size_str = str(size_str).strip().upper()
    units = {'KB': 1024, 'MB': 1024 ** 2, 'GB': 1024 ** 3}

    for suffix, factor in units.items():
        if size_str.endswith(suffix):
            return int(size_str[:-2]) * factor
    return int(size_str)


def _build_handlers(log_config: Dict[str, Any], formatter: logging.Formatter) -> List[logging.Handler]:
    handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_config.get('file_enabled', True):
        file_path = log_config.get('file_path', 'logs/reserve.log')
        log_dir = os.path.dirname(file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            file_path,
            maxBytes=_parse_size(log_config.get('max_file_size', '10MB')),
            backupCount=log_config.get('backup_count', 5),
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    return handlers


def setup_logging(config: Dict[str, Any]):
    """
    Configure the root logger from the application config.

    Replaces any handlers already installed so repeated calls do not duplicate output.
    """
    log_config = config.get('logging', {})
    level_name = log_config.get('level', 'INFO').upper()

    logger = logging.getLogger()
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    logger.setLevel(getattr(logging, level_name, logging.INFO))

    formatter = logging.Formatter(log_config.get('format', DEFAULT_FORMAT))
    for handler in _build_handlers(log_config, formatter):
        logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(f"Logging configured, level: {level_name}")