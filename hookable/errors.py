"""Exception types raised by hooks and their compilers."""

from __future__ import annotations


class HookError(Exception):
    """Base class for hookable errors."""


class TapRegistrationError(HookError, ValueError):
    """Raised synchronously when tap options are malformed."""


class CompilerNotImplementedError(HookError, NotImplementedError):
    """Raised when a hook kind has no compiler for its invocation entry points."""


class UnsupportedOperationError(HookError, TypeError):
    """Raised when a hook kind does not accept a registration or invocation kind."""


class TapCallbackError(HookError):
    """Wraps a non-exception error value reported through a tap callback."""

    def __init__(self, value: object) -> None:
        super().__init__(str(value))
        self.value = value
