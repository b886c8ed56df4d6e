"""Named tap/call hooks a build host exposes to plugins."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, List, TypeVar

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True)
class Tap(Generic[F]):
    name: str
    fn: F


class SyncHook:
    """Calls every tapped function, in registration order."""

    def __init__(self) -> None:
        self.taps: List[Tap[Callable[..., Any]]] = []

    def tap(self, name: str, fn: Callable[..., Any]) -> None:
        self.taps.append(Tap(name, fn))

    def call(self, *args: Any) -> None:
        for tap in list(self.taps):
            tap.fn(*args)


class AsyncSeriesHook:
    """Awaits every tapped coroutine function, one after the other."""

    def __init__(self) -> None:
        self.taps: List[Tap[Callable[..., Awaitable[Any]]]] = []

    def tap_promise(self, name: str, fn: Callable[..., Awaitable[Any]]) -> None:
        self.taps.append(Tap(name, fn))

    async def promise(self, *args: Any) -> None:
        for tap in list(self.taps):
            await tap.fn(*args)
