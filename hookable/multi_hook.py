"""Fan-out of registration calls across several hooks."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from hookable.hook import Tappable, TapOptions
from hookable.models import Interceptor


class MultiHook:
    """Registers taps and interceptors on every wrapped hook.

    There is no ``call``, ``call_async`` or ``promise`` here: wrapped hooks may
    declare different arguments and kinds, so each must be invoked on its own.
    """

    def __init__(self, hooks: Sequence[Tappable], name: str | None = None) -> None:
        self.hooks = list(hooks)
        self.name = name

    def tap(self, options: TapOptions, fn: Callable[..., Any]) -> None:
        for hook in self.hooks:
            hook.tap(options, fn)

    def tap_async(self, options: TapOptions, fn: Callable[..., Any]) -> None:
        for hook in self.hooks:
            hook.tap_async(options, fn)

    def tap_promise(self, options: TapOptions, fn: Callable[..., Any]) -> None:
        for hook in self.hooks:
            hook.tap_promise(options, fn)

    def is_used(self) -> bool:
        return any(hook.is_used() for hook in self.hooks)

    def intercept(self, interceptor: Interceptor | Mapping[str, Any] | object) -> None:
        for hook in self.hooks:
            hook.intercept(interceptor)

    def with_options(self, options: TapOptions) -> MultiHook:
        return MultiHook([hook.with_options(options) for hook in self.hooks], self.name)
