"""Logging for azvm.

Every azvm module logs through a child of the 'azvm' logger, which writes to
stdout through one handler. With AZVM_DEBUG=1 the handler also lets DEBUG
records through and each line gets a 'L mm-dd HH:MM:SS file:line]' prefix;
AZVM_MINIMIZE_LOGGING=0 adds the prefix without the debug records.
"""
import logging
import sys
from typing import Optional

from azvm.utils import env_options

DEBUG = logging.DEBUG

_PREFIXED_FORMAT = ('%(levelname).1s %(asctime)s %(filename)s:%(lineno)d] '
                    '%(message)s')
_DATE_FORMAT = '%m-%d %H:%M:%S'

# The Azure SDK logs every HTTP request at INFO.
_SDK_LOGGER_LEVELS = {
    'azure': logging.WARNING,
    'azure.core.pipeline.policies.http_logging_policy': logging.WARNING,
    'azure.identity': logging.ERROR,
}


class NewLineFormatter(logging.Formatter):
    """Repeats the line prefix on every line of a multi-line message."""

    def format(self, record):
        formatted = super().format(record)
        if not record.message:
            return formatted
        prefix = formatted[:formatted.find(record.message)]
        return formatted.replace('\n', '\r\n' + prefix)


class EnvAwareHandler(logging.StreamHandler):
    """A stream handler that drops to DEBUG while AZVM_DEBUG is set.

    The variable is read for every record, so it can change after import.
    """

    def __init__(self, stream=None, level=logging.NOTSET):
        self._configured_level = logging.NOTSET
        super().__init__(stream)
        self.setLevel(level)

    @property
    def level(self):
        if env_options.Options.SHOW_DEBUG_INFO.get():
            return logging.DEBUG
        return self._configured_level

    @level.setter
    def level(self, value):
        self._configured_level = value


PREFIXED_FORMATTER = NewLineFormatter(_PREFIXED_FORMAT, datefmt=_DATE_FORMAT)
PLAIN_FORMATTER = NewLineFormatter(None, datefmt=_DATE_FORMAT)

_package_logger = logging.getLogger('azvm')
_handler: Optional[EnvAwareHandler] = None


def _wants_prefix() -> bool:
    return (env_options.Options.SHOW_DEBUG_INFO.get() or
            not env_options.Options.MINIMIZE_LOGGING.get())


def reload_logger() -> None:
    """(Re)installs the handler, picking up the current environment."""
    global _handler
    if _handler is not None:
        _package_logger.removeHandler(_handler)
    _handler = EnvAwareHandler(sys.stdout, level=logging.INFO)
    _handler.setFormatter(
        PREFIXED_FORMATTER if _wants_prefix() else PLAIN_FORMATTER)
    _package_logger.addHandler(_handler)
    _package_logger.setLevel(logging.DEBUG)
    # Records stop here instead of reaching the root logger's handlers too.
    _package_logger.propagate = False
    for name, level in _SDK_LOGGER_LEVELS.items():
        logging.getLogger(name).setLevel(level)


reload_logger()


def init_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def logging_enabled(logger: logging.Logger, level: int) -> bool:
    return logger.getEffectiveLevel() <= level
