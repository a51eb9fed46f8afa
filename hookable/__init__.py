"""Typed, ordered, interceptable extension points."""

from .async_hooks import (
    AsyncParallelBailHook,
    AsyncParallelHook,
    AsyncSeriesBailHook,
    AsyncSeriesHook,
    AsyncSeriesLoopHook,
    AsyncSeriesWaterfallHook,
)
from .errors import (
    CompilerNotImplementedError,
    HookError,
    TapCallbackError,
    TapRegistrationError,
    UnsupportedOperationError,
)
from .hook import Hook, HookOptionsView
from .models import Interceptor, Tap, TapType
from .multi_hook import MultiHook
from .sync_hooks import SyncBailHook, SyncHook, SyncLoopHook, SyncWaterfallHook

__all__ = [
    "AsyncParallelBailHook",
    "AsyncParallelHook",
    "AsyncSeriesBailHook",
    "AsyncSeriesHook",
    "AsyncSeriesLoopHook",
    "AsyncSeriesWaterfallHook",
    "CompilerNotImplementedError",
    "Hook",
    "HookError",
    "HookOptionsView",
    "Interceptor",
    "MultiHook",
    "SyncBailHook",
    "SyncHook",
    "SyncLoopHook",
    "SyncWaterfallHook",
    "Tap",
    "TapCallbackError",
    "TapRegistrationError",
    "TapType",
    "UnsupportedOperationError",
]
