"""A dict view over the parsed azvm config file."""
from typing import Any, Dict, Optional, Tuple


class Config(Dict[str, Any]):
    """The parsed config, read with tuples of nested keys.

    Keys are looked up one level at a time. A missing key, or a level whose
    value is not a mapping, yields the caller's default instead of raising,
    so every lookup site carries its own default.
    """

    def get_nested(self, keys: Tuple[str, ...], default_value: Any) -> Any:
        node: Any = self
        for key in keys:
            if not isinstance(node, dict) or key not in node:
                return default_value
            node = node[key]
        return node

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]]) -> 'Config':
        return cls(config or {})
