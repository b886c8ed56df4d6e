"""Execution of external package-manager commands."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, List, Protocol, Sequence, runtime_checkable


@dataclass(frozen=True)
class CommandResult:
    """Exit status and captured output of a finished command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@runtime_checkable
class CommandRunner(Protocol):
    """Runs one command to completion in a working directory.

    Implementations raise :class:`OSError` when the command cannot be spawned
    and otherwise report the exit status through :class:`CommandResult`.
    """

    async def run(self, command: Sequence[str], cwd: Path) -> CommandResult:
        ...


class SubprocessRunner:
    """Runs commands as child processes without blocking the event loop."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    async def run(self, command: Sequence[str], cwd: Path) -> CommandResult:
        process = await asyncio.create_subprocess_exec(
            *command,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()
        return CommandResult(
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode(self.encoding, errors="replace"),
            stderr=stderr.decode(self.encoding, errors="replace"),
        )


async def gather_all(*aws: Awaitable[Any]) -> List[Any]:
    """Await every awaitable and return their results in order.

    Unlike a plain ``asyncio.gather`` the call only returns, or raises, once
    every awaitable has settled, so a failure never leaves siblings running
    behind it when the event loop shuts down. The first failure in argument
    order is re-raised.
    """

    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)
