"""YAML reading and writing for azvm config files."""
import os
from typing import Any, Dict, TYPE_CHECKING

from azvm.adaptors import common

if TYPE_CHECKING:
    import yaml
else:
    yaml = common.LazyImport('yaml')


def safe_load(stream) -> Any:
    # CSafeLoader only exists when PyYAML was built against libyaml.
    loader = yaml.CSafeLoader if yaml.__with_libyaml__ else yaml.SafeLoader
    return yaml.load(stream, Loader=loader)


def read_yaml(path: str) -> Dict[str, Any]:
    """Reads a YAML file, returning {} for an empty document."""
    with open(os.path.expanduser(path), 'r', encoding='utf-8') as f:
        return read_yaml_str(f.read())


def read_yaml_str(yaml_str: str) -> Dict[str, Any]:
    return safe_load(yaml_str) or {}


def dump_yaml_str(config: Dict[str, Any]) -> str:
    """Dumps a YAML string, keeping the key order of 'config'."""
    return yaml.safe_dump(config, sort_keys=False, default_flow_style=False)
