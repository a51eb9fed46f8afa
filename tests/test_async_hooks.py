import asyncio
import gc

import pytest

from hookable.async_hooks import (
    AsyncParallelBailHook,
    AsyncParallelHook,
    AsyncSeriesBailHook,
    AsyncSeriesHook,
    AsyncSeriesLoopHook,
    AsyncSeriesWaterfallHook,
)
from hookable.errors import HookError, TapCallbackError, UnsupportedOperationError


def test_async_series_hook_mixes_tap_kinds_in_order() -> None:
    trace: list[str] = []
    hook = AsyncSeriesHook(["name"])

    def sync_tap(name) -> None:
        trace.append(f"sync:{name}")

    def callback_tap(name, callback) -> None:
        trace.append(f"callback:{name}")
        callback()

    async def promise_tap(name) -> None:
        await asyncio.sleep(0)
        trace.append(f"promise:{name}")

    hook.tap_promise("promise", promise_tap)
    hook.tap_async({"name": "callback", "before": "promise"}, callback_tap)
    hook.tap({"name": "sync", "stage": -1}, sync_tap)

    assert asyncio.run(hook.promise("x")) is None
    assert trace == ["sync:x", "callback:x", "promise:x"]


def test_async_series_hook_waits_for_each_tap() -> None:
    trace: list[str] = []
    hook = AsyncSeriesHook()

    async def slow() -> None:
        trace.append("slow:start")
        await asyncio.sleep(0.01)
        trace.append("slow:end")

    async def fast() -> None:
        trace.append("fast")

    hook.tap_promise("slow", slow)
    hook.tap_promise("fast", fast)
    asyncio.run(hook.promise())

    assert trace == ["slow:start", "slow:end", "fast"]


def test_async_series_hook_has_no_sync_call() -> None:
    hook = AsyncSeriesHook()

    with pytest.raises(UnsupportedOperationError, match="call is not supported"):
        hook.call()


def test_call_async_outside_event_loop_completes_before_returning() -> None:
    outcomes: list = []
    hook = AsyncSeriesBailHook(["value"])
    hook.tap_async("answer", lambda value, callback: callback(None, value * 3))

    handle = hook.call_async(2, lambda err, result=None: outcomes.append((err, result)))

    assert handle is None
    assert outcomes == [(None, 6)]


def test_call_async_inside_event_loop_returns_task() -> None:
    outcomes: list = []
    hook = AsyncSeriesHook()

    async def tap() -> None:
        await asyncio.sleep(0)

    hook.tap_promise("tap", tap)

    async def main() -> None:
        task = hook.call_async(lambda err, result=None: outcomes.append((err, result)))
        assert isinstance(task, asyncio.Task)
        await task
        await asyncio.sleep(0)

    asyncio.run(main())
    assert outcomes == [(None, None)]


def test_callback_error_value_is_wrapped() -> None:
    outcomes: list = []
    hook = AsyncSeriesHook()
    hook.tap_async("fails", lambda callback: callback("disk full"))

    hook.call_async(lambda err, result=None: outcomes.append(err))

    assert isinstance(outcomes[0], TapCallbackError)
    assert outcomes[0].value == "disk full"


def test_promise_tap_must_return_awaitable() -> None:
    hook = AsyncSeriesHook()
    hook.tap_promise("plain", lambda: 1)

    with pytest.raises(HookError, match="awaitable"):
        asyncio.run(hook.promise())


def test_async_series_hook_reports_errors_to_interceptors() -> None:
    events: list[str] = []
    hook = AsyncSeriesHook()

    async def broken() -> None:
        raise ValueError("bad")

    hook.tap_promise("broken", broken)
    hook.intercept({"error": lambda exc: events.append(f"error:{exc}"), "done": lambda: events.append("done")})

    with pytest.raises(ValueError, match="bad"):
        asyncio.run(hook.promise())
    assert events == ["error:bad", "done"]


def test_async_series_waterfall_hook() -> None:
    hook = AsyncSeriesWaterfallHook(["total"])

    async def add_ten(total):
        return total + 10

    hook.tap("double", lambda total: total * 2)
    hook.tap_promise("add", add_ten)
    hook.tap_async("keep", lambda total, callback: callback())

    assert asyncio.run(hook.promise(1)) == 12


def test_async_series_loop_hook() -> None:
    counts = {"a": 0}
    hook = AsyncSeriesLoopHook()

    async def again():
        counts["a"] += 1
        return True if counts["a"] < 2 else None

    hook.tap_promise("again", again)
    asyncio.run(hook.promise())

    assert counts["a"] == 2


def test_async_parallel_hook_starts_every_tap_before_waiting() -> None:
    trace: list[str] = []
    hook = AsyncParallelHook()

    async def worker(name: str) -> None:
        trace.append(f"{name}:start")
        await asyncio.sleep(0)
        trace.append(f"{name}:end")

    hook.tap_promise("a", lambda: worker("a"))
    hook.tap_promise("b", lambda: worker("b"))
    asyncio.run(hook.promise())

    assert trace[:2] == ["a:start", "b:start"]
    assert sorted(trace[2:]) == ["a:end", "b:end"]


def test_async_parallel_hook_propagates_first_error() -> None:
    hook = AsyncParallelHook()

    async def broken() -> None:
        raise KeyError("missing")

    hook.tap("ok", lambda: None)
    hook.tap_promise("broken", broken)

    with pytest.raises(KeyError):
        asyncio.run(hook.promise())


def test_async_parallel_bail_hook_prefers_earliest_position() -> None:
    hook = AsyncParallelBailHook()

    async def slow():
        await asyncio.sleep(0.01)
        return "slow"

    async def fast():
        return "fast"

    hook.tap_promise("slow", slow)
    hook.tap_promise("fast", fast)

    assert asyncio.run(hook.promise()) == "slow"


def test_async_parallel_bail_hook_skips_empty_results() -> None:
    results: list = []
    hook = AsyncParallelBailHook()
    hook.tap("none", lambda: None)
    hook.tap_async("value", lambda callback: callback(None, 5))
    hook.intercept({"result": results.append})

    assert asyncio.run(hook.promise()) == 5
    assert results == [5]


def test_cancelling_call_async_task_reports_cancelled_error() -> None:
    outcomes: list = []
    hook = AsyncSeriesHook()

    async def forever() -> None:
        await asyncio.sleep(10)

    hook.tap_promise("forever", forever)

    async def main() -> None:
        task = hook.call_async(lambda err, result=None: outcomes.append(err))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        await asyncio.sleep(0)

    asyncio.run(main())
    assert len(outcomes) == 1
    assert isinstance(outcomes[0], asyncio.CancelledError)


def test_async_parallel_bail_hook_cancels_pending_taps() -> None:
    trace: list[str] = []
    hook = AsyncParallelBailHook()

    async def first():
        return "first"

    async def slow():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            trace.append("slow:cancelled")
            raise

    hook.tap_promise("first", first)
    hook.tap_promise("slow", slow)

    async def main():
        result = await hook.promise()
        await asyncio.sleep(0)
        return result

    assert asyncio.run(main()) == "first"
    assert trace == ["slow:cancelled"]


def test_async_parallel_hook_cancels_pending_taps_after_error() -> None:
    trace: list[str] = []
    hook = AsyncParallelHook()

    async def broken() -> None:
        raise RuntimeError("boom")

    async def slow() -> None:
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            trace.append("slow:cancelled")
            raise

    hook.tap_promise("slow", slow)
    hook.tap_promise("broken", broken)

    async def main() -> None:
        with pytest.raises(RuntimeError):
            await hook.promise()
        await asyncio.sleep(0)

    asyncio.run(main())
    assert trace == ["slow:cancelled"]


def test_async_parallel_bail_hook_retrieves_errors_of_later_taps() -> None:
    handled: list[str] = []
    hook = AsyncParallelBailHook()

    async def slow():
        await asyncio.sleep(0.01)
        return "slow"

    async def broken():
        raise RuntimeError("late failure")

    hook.tap_promise("slow", slow)
    hook.tap_promise("broken", broken)

    async def main():
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(lambda loop, context: handled.append(context["message"]))
        result = await hook.promise()
        gc.collect()
        await asyncio.sleep(0)
        return result

    assert asyncio.run(main()) == "slow"
    assert handled == []
