"""User configuration for azvm.

On module import, we attempt to parse the config located at
_DEFAULT_CONFIG_PATH (default: ~/.azvm/config.yaml), or at the path named by
the AZVM_CONFIG environment variable. Caller can then use

  >> azvm_config.loaded_config_path()

to find which file, if any, was loaded.

To read a nested-key config:

  >> azvm_config.get_nested(('vms', 'linux', 'vm_size'), 'Standard_F2')

Example usage:

Consider the following config contents:

    azure:
      region: westus2
    resource_group:
      tags:
        owner: alice

then:

    azvm_config.get_nested(('azure', 'region'), 'eastus')     # ==> 'westus2'
    azvm_config.get_nested(('admin', 'username'), 'tirekicker')
    # ==> 'tirekicker'
    azvm_config.get_nested(('resource_group', 'tags'), {})
    # ==> {'owner': 'alice'}

A missing config file is not an error: every key falls back to its default.
A config file that does not match the schema raises InvalidAzvmConfigError.
"""
import contextlib
import copy
import os
from typing import Any, Dict, Iterator, Optional, Tuple

from azvm import azvm_logging
from azvm import exceptions
from azvm.adaptors import common as adaptors_common
from azvm.utils import common_utils
from azvm.utils import config_utils
from azvm.utils import schemas
from azvm.utils import ux_utils
from azvm.utils import yaml_utils

yaml = adaptors_common.LazyImport('yaml')

logger = azvm_logging.init_logger(__name__)

# The config path is discovered in this order:
#
# (1) (Used internally) If env var {ENV_VAR_AZVM_CONFIG} exists, use its
#     path;
# (2) If file {_DEFAULT_CONFIG_PATH} exists, use this file.
#
# If the path discovered by (1) fails to load, we do not attempt to go to step
# 2 in the list.
ENV_VAR_AZVM_CONFIG = 'AZVM_CONFIG'

_DEFAULT_CONFIG_PATH = '~/.azvm/config.yaml'

_loaded_config: config_utils.Config = config_utils.Config()
_loaded_config_path: Optional[str] = None


def get_nested(keys: Tuple[str, ...], default_value: Any) -> Any:
    """Reads one value of the loaded config; see Config.get_nested().

    The value is a copy, so callers may mutate it freely.
    """
    return copy.deepcopy(_loaded_config.get_nested(keys, default_value))


def to_dict() -> config_utils.Config:
    """Returns a deep-copied version of the current config."""
    return copy.deepcopy(_loaded_config)


def _validate_config(config: Dict[str, Any], config_source: str) -> None:
    common_utils.validate_schema(
        config,
        schemas.get_config_schema(),
        f'Invalid config YAML ({config_source}). Error: ',
        skip_none=False)


def parse_and_validate_config_file(config_path: str) -> config_utils.Config:
    try:
        config_dict = yaml_utils.read_yaml(config_path)
    except yaml.YAMLError as e:
        with ux_utils.print_exception_no_traceback():
            raise exceptions.InvalidAzvmConfigError(
                f'Error in loading config file ({config_path}): {e}') from e
    if not isinstance(config_dict, dict):
        with ux_utils.print_exception_no_traceback():
            raise exceptions.InvalidAzvmConfigError(
                f'Config file ({config_path}) must contain a mapping, got '
                f'{type(config_dict).__name__}.')
    config = config_utils.Config.from_dict(config_dict)
    if config:
        _validate_config(config, config_path)
    if azvm_logging.logging_enabled(logger, azvm_logging.DEBUG):
        logger.debug(f'Config loaded from {config_path}:\n'
                     f'{yaml_utils.dump_yaml_str(dict(config))}')
    return config


def _resolve_config_path() -> str:
    config_path = os.environ.get(ENV_VAR_AZVM_CONFIG)
    if config_path is None:
        config_path = _DEFAULT_CONFIG_PATH
    return os.path.expanduser(config_path)


def reload_config() -> None:
    """Re-reads the config file, replacing the loaded config."""
    global _loaded_config, _loaded_config_path
    # Reset the global variables, to avoid using stale values.
    _loaded_config = config_utils.Config()
    _loaded_config_path = None

    config_path = _resolve_config_path()
    if not os.path.exists(config_path):
        logger.debug(f'No config file found at {config_path}; '
                     'using defaults.')
        return
    _loaded_config = parse_and_validate_config_file(config_path)
    _loaded_config_path = config_path


def loaded_config_path() -> Optional[str]:
    """Returns the path to the loaded config file, or None."""
    return _loaded_config_path


@contextlib.contextmanager
def replace_config(new_configs: Dict[str, Any]) -> Iterator[None]:
    """Temporarily replaces the loaded config with 'new_configs'.

    The replacement is validated against the config schema first.
    """
    global _loaded_config, _loaded_config_path
    _validate_config(new_configs, '<replaced>')
    original_config = _loaded_config
    original_config_path = _loaded_config_path
    _loaded_config = config_utils.Config.from_dict(copy.deepcopy(new_configs))
    _loaded_config_path = '<replaced>'
    try:
        yield
    finally:
        _loaded_config = original_config
        _loaded_config_path = original_config_path


# Load on import, synchronization is guaranteed by python interpreter.
reload_config()
