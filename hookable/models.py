"""Core records shared by hooks, interceptors and compilers."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from hookable.errors import HookError, TapRegistrationError

INTERCEPTOR_PHASES = ("register", "call", "loop", "tap", "error", "result", "done")


class TapType(str, Enum):
    SYNC = "sync"
    ASYNC = "async"
    PROMISE = "promise"


class HookMode(str, Enum):
    BASIC = "basic"
    BAIL = "bail"
    WATERFALL = "waterfall"
    LOOP = "loop"


class Tap(BaseModel):
    """One registered callback plus its ordering hints.

    Extra keys supplied at registration (or added by interceptors) are kept
    and readable as attributes.
    """

    model_config = ConfigDict(extra="allow")

    type: TapType
    name: str
    fn: Callable[..., Any]
    stage: int = 0
    before: str | list[str] | None = None
    context: Any = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Missing name for tap")
        return value

    def before_names(self) -> set[str]:
        if self.before is None:
            return set()
        if isinstance(self.before, str):
            return {self.before}
        return set(self.before)

    @classmethod
    def coerce(cls, value: Tap | Mapping[str, Any]) -> Tap:
        if isinstance(value, Tap):
            return value
        if isinstance(value, Mapping):
            try:
                return cls.model_validate(dict(value))
            except ValidationError as exc:
                raise TapRegistrationError(f"Interceptor returned invalid tap options: {exc}") from exc
        raise HookError(f"Interceptor returned {type(value).__name__}, expected a Tap or mapping")


@dataclass
class Interceptor:
    register: Callable[[Tap], Tap | Mapping[str, Any] | None] | None = None
    call: Callable[..., Any] | None = None
    loop: Callable[..., Any] | None = None
    tap: Callable[[Tap], Any] | None = None
    error: Callable[[BaseException], Any] | None = None
    result: Callable[[Any], Any] | None = None
    done: Callable[[], Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(cls, source: Interceptor | Mapping[str, Any] | object) -> Interceptor:
        """Build the stored copy of an interceptor.

        Accepts an ``Interceptor``, a mapping of phase names to callables, or
        any object exposing phase methods. Non-phase mapping keys land in
        ``extra``.
        """
        if isinstance(source, Interceptor):
            return replace(source, extra=dict(source.extra))
        if isinstance(source, Mapping):
            phases = {key: value for key, value in source.items() if key in INTERCEPTOR_PHASES}
            extra = {key: value for key, value in source.items() if key not in INTERCEPTOR_PHASES}
        else:
            phases = {phase: getattr(source, phase, None) for phase in INTERCEPTOR_PHASES}
            extra = {}
        for phase, handler in phases.items():
            if handler is not None and not callable(handler):
                raise HookError(f"Interceptor phase {phase!r} must be callable")
        return cls(**phases, extra=extra)


@dataclass(frozen=True)
class CompileOptions:
    taps: tuple[Tap, ...]
    interceptors: tuple[Interceptor, ...]
    args: tuple[str, ...]
    type: TapType
