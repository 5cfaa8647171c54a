"""
Diagnostic log channel for the bridge.

All modules log through children of the ``loginradius_bridge`` logger, which
writes JSON records to stderr (and optionally to ``LOGFILE``). Raw provider
traffic is only logged when ``LOGINRADIUS_DEBUG`` is on, and then with secrets
masked.
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from pythonjsonlogger import jsonlogger

from .context import get_application_config

CHANNEL = 'loginradius_bridge'
LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'
SENSITIVE_KEYS = ('secret', 'apisecret', 'access_token', 'refresh_token',
                  'accessToken', 'refreshToken', 'access_token_header',
                  'Sott', 'password', 'sott')
"""Keys whose values never reach the log."""


def getLogger(name: str) -> logging.Logger:
    """Get a logger on the bridge's channel."""
    return logging.getLogger(name)


def setup_logger(config: Optional[Mapping[str, Any]] = None) -> logging.Logger:
    """Attach the JSON handler(s) to the channel logger."""
    if config is None:
        config = get_application_config()
    logger = logging.getLogger(CHANNEL)
    level = int(config.get('LOGLEVEL', logging.INFO))

    formatter = jsonlogger.JsonFormatter(
        LOG_FORMAT,
        rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
    )
    if not any(getattr(h, '_lr_channel', False) for h in logger.handlers):
        handlers = [logging.StreamHandler()]
        logfile = config.get('LOGFILE')
        if logfile:
            handlers.append(logging.FileHandler(logfile))
        for handler in handlers:
            handler.setFormatter(formatter)
            handler._lr_channel = True  # type: ignore
            logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def debug_enabled() -> bool:
    """Whether raw provider traffic should be logged."""
    value = get_application_config().get('LOGINRADIUS_DEBUG', False)
    if isinstance(value, str):
        return value.lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


def mask(data: Any, keys: Iterable[str] = SENSITIVE_KEYS) -> Any:
    """Copy ``data`` with the values of sensitive keys blanked out."""
    if not isinstance(data, Mapping):
        return data
    return {key: '****' if key in keys and value else mask(value, keys)
            for key, value in data.items()}


def format_response(response: Any) -> str:
    """Render a response payload one ``key: value`` pair per line."""
    if isinstance(response, str):
        return response
    if not isinstance(response, Mapping):
        return repr(response)
    return ''.join(f'\n{key}: {value}'
                   for key, value in mask(response).items())
