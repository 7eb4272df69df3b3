"""Environment variables that toggle azvm behavior."""
import enum
import os


class Options(enum.Enum):
    """Boolean options read from the environment on every access."""

    # (env var name, default value)
    SHOW_DEBUG_INFO = ('AZVM_DEBUG', False)
    MINIMIZE_LOGGING = ('AZVM_MINIMIZE_LOGGING', True)

    def __init__(self, env_var: str, default: bool) -> None:
        self.env_var = env_var
        self.default = default

    def get(self) -> bool:
        """Returns True if the env var is set to 'true' or '1'."""
        return os.getenv(self.env_var,
                         str(self.default)).lower() in ('true', '1')
