"""Hook registry: tap registration, interception and lazy compilation."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, ClassVar, Protocol

from pydantic import ValidationError

from hookable.compiler import Compiler
from hookable.config import get_config
from hookable.errors import CompilerNotImplementedError, TapRegistrationError, UnsupportedOperationError
from hookable.models import CompileOptions, Interceptor, Tap, TapType
from hookable.ordering import insert_tap

logger = logging.getLogger(__name__)

TapOptions = str | Mapping[str, Any]

TAP_METHODS = {TapType.SYNC: "tap", TapType.ASYNC: "tap_async", TapType.PROMISE: "tap_promise"}
CALL_METHODS = {TapType.SYNC: "call", TapType.ASYNC: "call_async", TapType.PROMISE: "promise"}

_context_warning_emitted = False


def _warn_context_deprecated() -> None:
    global _context_warning_emitted
    if _context_warning_emitted or not get_config().deprecations.warn_context:
        return
    _context_warning_emitted = True
    logger.warning("Tap option 'context' is deprecated and will be removed")


class Tappable(Protocol):
    name: str | None

    def tap(self, options: TapOptions, fn: Callable[..., Any]) -> None: ...

    def tap_async(self, options: TapOptions, fn: Callable[..., Any]) -> None: ...

    def tap_promise(self, options: TapOptions, fn: Callable[..., Any]) -> None: ...

    def intercept(self, interceptor: Any) -> None: ...

    def is_used(self) -> bool: ...

    def with_options(self, options: TapOptions) -> Tappable: ...


class Hook:
    """An extension point owning ordered taps and interceptors.

    ``call``, ``call_async`` and ``promise`` start bound to delegates. The first
    invocation compiles the current taps and interceptors into a function,
    rebinds the entry point to it and forwards the invocation. Any registration
    change rebinds all three entry points to their delegates again.

    Subclasses pick a compiler through ``default_compiler`` and may restrict the
    registration and invocation kinds they accept.
    """

    default_compiler: ClassVar[Compiler | None] = None
    supported_taps: ClassVar[frozenset[TapType]] = frozenset(TapType)
    supported_calls: ClassVar[frozenset[TapType]] = frozenset(TapType)
    min_args: ClassVar[int] = 0

    def __init__(self, args: Sequence[str] = (), name: str | None = None, *, compiler: Compiler | None = None) -> None:
        if isinstance(args, str) or not all(isinstance(arg, str) for arg in args):
            raise TypeError("Hook args must be a sequence of parameter names")
        if len(args) < self.min_args:
            raise ValueError(f"{type(self).__name__} requires at least {self.min_args} argument(s)")
        self._args = tuple(args)
        self.name = name
        self.taps: list[Tap] = []
        self.interceptors: list[Interceptor] = []
        self._compiler = compiler if compiler is not None else self.default_compiler
        self.call: Callable[..., Any]
        self.call_async: Callable[..., Any]
        self.promise: Callable[..., Any]
        self._reset_compilation()

    @property
    def args(self) -> tuple[str, ...]:
        return self._args

    def compile(self, options: CompileOptions) -> Callable[..., Any]:
        if self._compiler is None:
            raise CompilerNotImplementedError(f"{type(self).__name__} has no compiler; compile() must be overridden")
        return self._compiler.compile(options)

    def _create_call(self, call_type: TapType) -> Callable[..., Any]:
        if call_type not in self.supported_calls:
            raise UnsupportedOperationError(f"{CALL_METHODS[call_type]} is not supported on a {type(self).__name__}")
        logger.debug("Compiling %s for hook %s (%s taps)", call_type.value, self.name, len(self.taps))
        return self.compile(
            CompileOptions(
                taps=tuple(self.taps),
                interceptors=tuple(self.interceptors),
                args=self._args,
                type=call_type,
            )
        )

    def _call_delegate(self, *args: Any) -> Any:
        self.call = self._create_call(TapType.SYNC)
        return self.call(*args)

    def _call_async_delegate(self, *args: Any) -> Any:
        self.call_async = self._create_call(TapType.ASYNC)
        return self.call_async(*args)

    def _promise_delegate(self, *args: Any) -> Any:
        self.promise = self._create_call(TapType.PROMISE)
        return self.promise(*args)

    def _reset_compilation(self) -> None:
        self.call = self._call_delegate
        self.call_async = self._call_async_delegate
        self.promise = self._promise_delegate

    def _tap(self, tap_type: TapType, options: TapOptions, fn: Callable[..., Any]) -> None:
        if tap_type not in self.supported_taps:
            raise UnsupportedOperationError(f"{TAP_METHODS[tap_type]} is not supported on a {type(self).__name__}")
        if isinstance(options, str):
            options = {"name": options}
        elif isinstance(options, Mapping):
            options = dict(options)
        else:
            raise TapRegistrationError("Invalid tap options")

        name = options.get("name")
        if isinstance(name, str):
            name = name.strip()
            options["name"] = name
        if not isinstance(name, str) or not name:
            raise TapRegistrationError("Missing name for tap")

        if "context" in options:
            _warn_context_deprecated()

        # The registering method decides the kind; option keys cannot override it.
        try:
            item = Tap.model_validate({**options, "type": tap_type, "fn": fn})
        except ValidationError as exc:
            raise TapRegistrationError(f"Invalid options for tap {name!r}: {exc}") from exc

        item = self._run_register_interceptors(item)
        self._insert(item)

    def tap(self, options: TapOptions, fn: Callable[..., Any]) -> None:
        self._tap(TapType.SYNC, options, fn)

    def tap_async(self, options: TapOptions, fn: Callable[..., Any]) -> None:
        self._tap(TapType.ASYNC, options, fn)

    def tap_promise(self, options: TapOptions, fn: Callable[..., Any]) -> None:
        self._tap(TapType.PROMISE, options, fn)

    def _run_register_interceptors(self, item: Tap) -> Tap:
        for interceptor in self.interceptors:
            if interceptor.register is None:
                continue
            replacement = interceptor.register(item)
            if replacement is not None:
                item = Tap.coerce(replacement)
        return item

    def with_options(self, options: TapOptions) -> HookOptionsView:
        return HookOptionsView(self, options)

    def is_used(self) -> bool:
        return len(self.taps) > 0 or len(self.interceptors) > 0

    def intercept(self, interceptor: Interceptor | Mapping[str, Any] | object) -> None:
        stored = Interceptor.coerce(interceptor)
        # All replacements are built before the hook changes.
        replaced: list[Tap] | None = None
        if stored.register is not None:
            replaced = []
            for tap in self.taps:
                replacement = stored.register(tap)
                replaced.append(tap if replacement is None else Tap.coerce(replacement))

        self._reset_compilation()
        if replaced is not None:
            self.taps[:] = replaced
        self.interceptors.append(stored)
        logger.debug("Attached interceptor #%s to hook %s", len(self.interceptors), self.name)

    def _insert(self, item: Tap) -> None:
        self._reset_compilation()
        index = insert_tap(self.taps, item)
        logger.debug("Inserted tap %s into hook %s at position %s", item.name, self.name, index)


def _merge_options(defaults: Mapping[str, Any], options: TapOptions) -> TapOptions:
    if isinstance(options, str):
        return {**defaults, "name": options}
    if isinstance(options, Mapping):
        return {**defaults, **options}
    # Left for the hook to reject.
    return options


class HookOptionsView:
    """Registration surface of a hook with default tap options merged in.

    Caller-supplied keys win over the defaults.
    """

    def __init__(self, hook: Hook, defaults: TapOptions) -> None:
        self._hook = hook
        merged = _merge_options({}, defaults)
        if not isinstance(merged, Mapping):
            raise TapRegistrationError("Invalid tap options")
        self._defaults = dict(merged)
        self.name = hook.name

    @property
    def defaults(self) -> dict[str, Any]:
        return dict(self._defaults)

    def tap(self, options: TapOptions, fn: Callable[..., Any]) -> None:
        self._hook.tap(_merge_options(self._defaults, options), fn)

    def tap_async(self, options: TapOptions, fn: Callable[..., Any]) -> None:
        self._hook.tap_async(_merge_options(self._defaults, options), fn)

    def tap_promise(self, options: TapOptions, fn: Callable[..., Any]) -> None:
        self._hook.tap_promise(_merge_options(self._defaults, options), fn)

    def intercept(self, interceptor: Interceptor | Mapping[str, Any] | object) -> None:
        self._hook.intercept(interceptor)

    def is_used(self) -> bool:
        return self._hook.is_used()

    def with_options(self, options: TapOptions) -> HookOptionsView:
        return self._hook.with_options(_merge_options(self._defaults, options))
