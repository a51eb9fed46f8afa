"""Asynchronous hook kinds running on asyncio."""

from __future__ import annotations

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from functools import partial
from typing import Any

from hookable.compiler import InterceptorChain, SeriesSteps, bind_arguments, series_steps
from hookable.config import get_config
from hookable.errors import HookError, TapCallbackError, UnsupportedOperationError
from hookable.hook import Hook
from hookable.models import CompileOptions, HookMode, Tap, TapType

logger = logging.getLogger(__name__)

ASYNC_CALLS = frozenset({TapType.ASYNC, TapType.PROMISE})


async def invoke_tap(tap: Tap, args: Sequence[Any]) -> Any:
    """Run one tap of any kind and return its result.

    Callback-style taps receive an error-first ``callback(err=None, result=None)``
    as their last argument.
    """
    if tap.type is TapType.SYNC:
        return tap.fn(*args)

    if tap.type is TapType.PROMISE:
        awaitable = tap.fn(*args)
        if not inspect.isawaitable(awaitable):
            raise HookError(f"Tap {tap.name!r} registered with tap_promise did not return an awaitable")
        return await awaitable

    future = asyncio.get_running_loop().create_future()

    def callback(err: Any = None, result: Any = None) -> None:
        if future.cancelled():
            return
        if future.done():
            logger.warning("Tap %s invoked its callback more than once", tap.name)
            return
        if err is None:
            future.set_result(result)
        elif isinstance(err, BaseException):
            future.set_exception(err)
        else:
            future.set_exception(TapCallbackError(err))

    tap.fn(*args, callback)
    return await future


async def drive_async(steps: SeriesSteps) -> Any:
    sent = None
    while True:
        try:
            tap, call_args = steps.send(sent)
        except StopIteration as stop:
            return stop.value
        sent = await invoke_tap(tap, call_args)


def _deliver(callback: Callable[..., Any], task: asyncio.Task[Any]) -> None:
    if task.cancelled():
        callback(asyncio.CancelledError())
        return
    exc = task.exception()
    if exc is not None:
        callback(exc)
    else:
        callback(None, task.result())


def callback_entry(promise: Callable[..., Awaitable[Any]]) -> Callable[..., asyncio.Task[Any] | None]:
    """Adapt a coroutine entry point to ``call_async(*args, callback)``.

    Outside an event loop the invocation runs to completion before returning.
    Inside a running loop it is scheduled and the task is returned.
    """

    def call_async(*args: Any) -> asyncio.Task[Any] | None:
        if not args or not callable(args[-1]):
            raise TypeError("call_async expects a callback as its last argument")
        *values, callback = args
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is None:
            try:
                result = asyncio.run(promise(*values))
            except Exception as exc:
                callback(exc)
                return None
            callback(None, result)
            return None

        task = loop.create_task(promise(*values))
        task.add_done_callback(partial(_deliver, callback))
        return task

    return call_async


class AsyncCompiler(ABC):
    """Shared entry points for compilers whose taps may suspend."""

    supported_modes = frozenset(HookMode)

    def __init__(self, mode: HookMode = HookMode.BASIC) -> None:
        if mode not in self.supported_modes:
            raise ValueError(f"{type(self).__name__} does not support mode {mode.value!r}")
        self.mode = mode

    @abstractmethod
    async def run(self, taps: Sequence[Tap], chain: InterceptorChain, values: tuple[Any, ...]) -> Any:
        """Run ``taps`` against the bound ``values`` and return the hook result."""

    def compile(self, options: CompileOptions) -> Callable[..., Any]:
        if options.type not in ASYNC_CALLS:
            raise UnsupportedOperationError(f"{type(self).__name__} cannot compile {options.type.value!r} calls")
        taps = options.taps
        names = options.args
        chain = InterceptorChain.from_interceptors(options.interceptors)
        strict = get_config().invocation.strict_arity
        run = self.run

        async def promise(*args: Any) -> Any:
            values = bind_arguments(args, names, strict)
            chain.on_call(values)
            try:
                return await run(taps, chain, values)
            except Exception as exc:
                chain.on_error(exc)
                raise
            finally:
                chain.on_done()

        if options.type is TapType.PROMISE:
            return promise
        return callback_entry(promise)


class AsyncSeriesCompiler(AsyncCompiler):
    async def run(self, taps: Sequence[Tap], chain: InterceptorChain, values: tuple[Any, ...]) -> Any:
        return await drive_async(series_steps(self.mode, taps, chain, values))


class AsyncParallelCompiler(AsyncCompiler):
    """Starts every tap in order and waits for them together.

    In bail mode the earliest-positioned tap that produces a result or an error
    decides the outcome; taps still pending at that point are cancelled.
    """

    supported_modes = frozenset({HookMode.BASIC, HookMode.BAIL})

    async def run(self, taps: Sequence[Tap], chain: InterceptorChain, values: tuple[Any, ...]) -> Any:
        async def start(tap: Tap) -> Any:
            chain.on_tap(tap)
            return await invoke_tap(tap, values)

        tasks = [asyncio.ensure_future(start(tap)) for tap in taps]
        try:
            if self.mode is HookMode.BAIL:
                for task in tasks:
                    result = await task
                    if result is not None:
                        chain.on_result(result)
                        return result
                return None
            await asyncio.gather(*tasks)
            return None
        finally:
            for tap, task in zip(taps, tasks):
                if not task.done():
                    task.cancel()
                elif not task.cancelled() and task.exception() is not None:
                    logger.debug("Parallel tap %s finished with %r", tap.name, task.exception())


class AsyncSeriesHook(Hook):
    default_compiler = AsyncSeriesCompiler(HookMode.BASIC)
    supported_calls = ASYNC_CALLS


class AsyncSeriesBailHook(Hook):
    default_compiler = AsyncSeriesCompiler(HookMode.BAIL)
    supported_calls = ASYNC_CALLS


class AsyncSeriesWaterfallHook(Hook):
    default_compiler = AsyncSeriesCompiler(HookMode.WATERFALL)
    supported_calls = ASYNC_CALLS
    min_args = 1


class AsyncSeriesLoopHook(Hook):
    default_compiler = AsyncSeriesCompiler(HookMode.LOOP)
    supported_calls = ASYNC_CALLS


class AsyncParallelHook(Hook):
    default_compiler = AsyncParallelCompiler(HookMode.BASIC)
    supported_calls = ASYNC_CALLS


class AsyncParallelBailHook(Hook):
    default_compiler = AsyncParallelCompiler(HookMode.BAIL)
    supported_calls = ASYNC_CALLS
