"""Blocking wrappers around Azure SDK operations.

Azure management clients expose long-running operations as `begin_<name>`
methods returning a poller, while short operations are plain methods. Every
call made by azvm goes through `invoke`, which waits for the operation to
reach a terminal state before returning.
"""
from typing import Any, Callable


def get_azure_sdk_function(client: Any, function_name: str) -> Callable:
    """Retrieve a callable function from Azure SDK client object.

    Newer versions of the various client SDKs renamed function names to
    have a begin_ prefix. This function supports both the old and new
    versions of the SDK by first trying the old name and falling back to
    the prefixed new name.
    """
    func = getattr(client, function_name,
                   getattr(client, f'begin_{function_name}', None))
    if func is None:
        raise AttributeError(
            f'{type(client).__name__!r} object has no {function_name} or '
            f'begin_{function_name} attribute')
    return func


def invoke(operations: Any, function_name: str, **kwargs) -> Any:
    """Calls 'function_name' on an operations group and waits for it.

    Returns the operation's result: the return value of a plain method, or
    the final result of a `begin_*` poller.
    """
    if hasattr(operations, function_name):
        return getattr(operations, function_name)(**kwargs)
    poller = get_azure_sdk_function(operations, function_name)(**kwargs)
    return poller.result()
