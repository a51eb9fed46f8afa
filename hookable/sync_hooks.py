"""Synchronous hook kinds."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from hookable.compiler import InterceptorChain, bind_arguments, drive_sync, series_steps
from hookable.config import get_config
from hookable.hook import Hook
from hookable.models import CompileOptions, HookMode, TapType


class SyncCompiler:
    """Runs sync taps in order; the async entry points wrap the same run."""

    def __init__(self, mode: HookMode = HookMode.BASIC) -> None:
        self.mode = mode

    def compile(self, options: CompileOptions) -> Callable[..., Any]:
        mode = self.mode
        taps = options.taps
        names = options.args
        chain = InterceptorChain.from_interceptors(options.interceptors)
        strict = get_config().invocation.strict_arity

        def call(*args: Any) -> Any:
            values = bind_arguments(args, names, strict)
            chain.on_call(values)
            try:
                return drive_sync(series_steps(mode, taps, chain, values))
            except Exception as exc:
                chain.on_error(exc)
                raise
            finally:
                chain.on_done()

        if options.type is TapType.SYNC:
            return call

        if options.type is TapType.ASYNC:

            def call_async(*args: Any) -> None:
                if not args or not callable(args[-1]):
                    raise TypeError("call_async expects a callback as its last argument")
                *values, callback = args
                try:
                    result = call(*values)
                except Exception as exc:
                    callback(exc)
                    return
                callback(None, result)

            return call_async

        async def promise(*args: Any) -> Any:
            return call(*args)

        return promise


class SyncHook(Hook):
    default_compiler = SyncCompiler(HookMode.BASIC)
    supported_taps = frozenset({TapType.SYNC})


class SyncBailHook(Hook):
    default_compiler = SyncCompiler(HookMode.BAIL)
    supported_taps = frozenset({TapType.SYNC})


class SyncWaterfallHook(Hook):
    default_compiler = SyncCompiler(HookMode.WATERFALL)
    supported_taps = frozenset({TapType.SYNC})
    min_args = 1


class SyncLoopHook(Hook):
    default_compiler = SyncCompiler(HookMode.LOOP)
    supported_taps = frozenset({TapType.SYNC})
