"""Utility functions for UX."""
import contextlib
import sys

import colorama

INDENT_SYMBOL = f'{colorama.Style.DIM}├── {colorama.Style.RESET_ALL}'
INDENT_LAST_SYMBOL = f'{colorama.Style.DIM}└── {colorama.Style.RESET_ALL}'


@contextlib.contextmanager
def print_exception_no_traceback():
    """A context manager that prints out an exception without traceback.

    Mainly for UX: user-facing errors, e.g., ValueError, should suppress long
    tracebacks.

    Example usage:

        with print_exception_no_traceback():
            if error():
                raise ValueError('...')
    """
    original_tracelimit = getattr(sys, 'tracebacklimit', 1000)
    sys.tracebacklimit = 0
    yield
    sys.tracebacklimit = original_tracelimit


def indented_lines(lines):
    """Prefixes each line with a tree branch, the last one with a corner."""
    lines = list(lines)
    return [
        (INDENT_LAST_SYMBOL if i == len(lines) - 1 else INDENT_SYMBOL) + line
        for i, line in enumerate(lines)
    ]


def finishing_message(message: str) -> str:
    """Gets the finishing message for the given message."""
    return (f'{colorama.Style.RESET_ALL}{colorama.Fore.GREEN}\u2713 '
            f'{message}{colorama.Style.RESET_ALL}')


def error_message(message: str) -> str:
    """Gets the error message for the given message."""
    return (f'{colorama.Style.RESET_ALL}{colorama.Fore.RED}\u2a2f'
            f'{colorama.Style.RESET_ALL} {message}')
