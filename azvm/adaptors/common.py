"""Deferred imports of optional third-party packages."""
import functools
import importlib
import types
from typing import Any, Callable, Iterable, Optional


class LazyImport:
    """A module proxy that performs the real import on first use.

    The Azure SDK packages take a while to import, and `azvm --help` or the
    config layer never need them. An attribute the loaded module does not
    define is treated as a submodule and proxied in turn, so
    `azure.mgmt.compute` works on a LazyImport('azure').
    """

    def __init__(self,
                 module_name: str,
                 import_error_message: Optional[str] = None,
                 set_loggers: Optional[Callable[[], None]] = None):
        self._module_name = module_name
        self._import_error_message = import_error_message
        self._set_loggers = set_loggers
        self._module: Optional[types.ModuleType] = None

    def load_module(self) -> types.ModuleType:
        if self._module is None:
            try:
                module = importlib.import_module(self._module_name)
            except ImportError as e:
                if self._import_error_message is None:
                    raise
                raise ImportError(self._import_error_message) from e
            if self._set_loggers is not None:
                self._set_loggers()
            self._module = module
        return self._module

    def __getattr__(self, name: str) -> Any:
        module = self.load_module()
        if hasattr(module, name):
            return getattr(module, name)
        submodule = LazyImport(f'{self._module_name}.{name}',
                               self._import_error_message)
        setattr(self, name, submodule)
        return submodule


def load_lazy_modules(modules: Iterable[LazyImport]):
    """Imports 'modules' before every call of the decorated function.

    A missing SDK then fails with the adaptor's ImportError message at the
    call site rather than with an AttributeError inside the function.
    """

    def decorator(func):

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for module in modules:
                module.load_module()
            return func(*args, **kwargs)

        return wrapper

    return decorator
