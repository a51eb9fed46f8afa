"""Compiler contract and the pieces shared by the standard hook kinds."""

from __future__ import annotations

from collections.abc import Callable, Generator, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from hookable.models import CompileOptions, HookMode, Interceptor, Tap

# Yields (tap, call_args), receives the tap's result, returns the hook result.
SeriesSteps = Generator[tuple[Tap, tuple[Any, ...]], Any, Any]


class Compiler(Protocol):
    def compile(self, options: CompileOptions) -> Callable[..., Any]: ...


@dataclass(frozen=True)
class InterceptorChain:
    """Runtime interceptor phases captured at compile time."""

    call: tuple[Callable[..., Any], ...] = ()
    loop: tuple[Callable[..., Any], ...] = ()
    tap: tuple[Callable[[Tap], Any], ...] = ()
    error: tuple[Callable[[BaseException], Any], ...] = ()
    result: tuple[Callable[[Any], Any], ...] = ()
    done: tuple[Callable[[], Any], ...] = ()

    @classmethod
    def from_interceptors(cls, interceptors: Iterable[Interceptor]) -> InterceptorChain:
        interceptors = tuple(interceptors)

        def collect(phase: str) -> tuple[Callable[..., Any], ...]:
            handlers = (getattr(item, phase) for item in interceptors)
            return tuple(handler for handler in handlers if handler is not None)

        return cls(
            call=collect("call"),
            loop=collect("loop"),
            tap=collect("tap"),
            error=collect("error"),
            result=collect("result"),
            done=collect("done"),
        )

    def on_call(self, values: Sequence[Any]) -> None:
        for handler in self.call:
            handler(*values)

    def on_loop(self, values: Sequence[Any]) -> None:
        for handler in self.loop:
            handler(*values)

    def on_tap(self, tap: Tap) -> None:
        for handler in self.tap:
            handler(tap)

    def on_error(self, exc: BaseException) -> None:
        for handler in self.error:
            handler(exc)

    def on_result(self, result: Any) -> None:
        for handler in self.result:
            handler(result)

    def on_done(self) -> None:
        for handler in self.done:
            handler()


def bind_arguments(values: tuple[Any, ...], names: tuple[str, ...], strict: bool) -> tuple[Any, ...]:
    if len(values) == len(names):
        return values
    if strict:
        expected = ", ".join(names) or "no arguments"
        raise TypeError(f"Hook expects {len(names)} argument(s) ({expected}), got {len(values)}")
    return (values + (None,) * len(names))[: len(names)]


def series_steps(mode: HookMode, taps: Sequence[Tap], chain: InterceptorChain, values: tuple[Any, ...]) -> SeriesSteps:
    """Series semantics for every mode, independent of how taps are awaited."""
    if mode is HookMode.LOOP:
        while True:
            chain.on_loop(values)
            for tap in taps:
                chain.on_tap(tap)
                if (yield tap, values) is not None:
                    break
            else:
                return None

    current = values[0] if mode is HookMode.WATERFALL else None
    for tap in taps:
        chain.on_tap(tap)
        call_args = (current, *values[1:]) if mode is HookMode.WATERFALL else values
        result = yield tap, call_args
        if result is None:
            continue
        if mode is HookMode.BAIL:
            chain.on_result(result)
            return result
        if mode is HookMode.WATERFALL:
            current = result

    if mode is HookMode.WATERFALL:
        chain.on_result(current)
        return current
    return None


def drive_sync(steps: SeriesSteps) -> Any:
    sent = None
    while True:
        try:
            tap, call_args = steps.send(sent)
        except StopIteration as stop:
            return stop.value
        sent = tap.fn(*call_args)
