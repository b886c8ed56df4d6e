import asyncio
import inspect
from pathlib import Path

import pytest

from entrypack.entries import EntryDescriptor
from entrypack.graph import ModuleGraph, ModuleNode, Reason
from entrypack.manifest import InMemoryManifestStore, ManifestResolver
from entrypack.runner import CommandResult


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem):
    """Run async test functions without requiring external plugins."""
    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            sig = inspect.signature(test_function)
            filtered_args = {k: v for k, v in pyfuncitem.funcargs.items() if k in sig.parameters}
            loop.run_until_complete(test_function(**filtered_args))
        finally:
            loop.close()
            asyncio.set_event_loop(None)
        return True
    return None


def pytest_configure(config):
    config.addinivalue_line("markers", "asyncio: mark async tests")


class FakeRunner:
    """Records commands and answers them from a table instead of spawning processes."""

    def __init__(self, responses=None, default=None):
        self.responses = dict(responses or {})
        self.default = default or CommandResult(returncode=0)
        self.calls = []

    async def run(self, command, cwd):
        self.calls.append((tuple(command), Path(cwd)))
        await asyncio.sleep(0)
        response = self.responses.get(tuple(command), self.default)
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            return response(tuple(command), Path(cwd))
        return response

    def commands(self):
        return [command for command, _ in self.calls]


@pytest.fixture
def make_runner():
    return FakeRunner


PROJECT = Path("/project")
MAIN = "./src/main.js"
WORKER = "./src/worker.js"


def module(identifier, *, request=None, raw_request=None, context="/project/src", issuer=None, reasons=()):
    return ModuleNode(
        identifier=identifier,
        request=request,
        raw_request=raw_request,
        context=context,
        issuer=issuer,
        reasons=[Reason(module=r) for r in reasons],
    )


def sample_modules():
    """main imports left-pad and util; worker imports util; util imports lodash/fp/pick and fs."""
    return [
        module("/project/src/main.js", request="/project/src/main.js", raw_request=MAIN, reasons=[None]),
        module("/project/src/worker.js", request="/project/src/worker.js", raw_request=WORKER, reasons=[None]),
        module(
            "/project/src/util.js",
            request="/project/src/util.js",
            raw_request="./util",
            issuer="/project/src/main.js",
            reasons=["/project/src/main.js", "/project/src/worker.js"],
        ),
        module("external left-pad", request="left-pad", issuer="/project/src/main.js", reasons=["/project/src/main.js"]),
        module(
            "external lodash/fp/pick",
            request="lodash/fp/pick",
            issuer="/project/src/util.js",
            reasons=["/project/src/util.js"],
        ),
        module("external fs", request="fs", issuer="/project/src/util.js", reasons=["/project/src/util.js"]),
    ]


@pytest.fixture
def sample_graph():
    return ModuleGraph(sample_modules())


@pytest.fixture
def manifest_store():
    return InMemoryManifestStore(
        {
            PROJECT: {
                "name": "shop",
                "dependencies": {"left-pad": "1.3.0", "lodash": "^4.17.0", "react": "16.4.0"},
            }
        }
    )


@pytest.fixture
def resolver(manifest_store):
    return ManifestResolver(manifest_store)


@pytest.fixture
def entries(tmp_path):
    return [
        EntryDescriptor(name="main", specifiers=(MAIN,), output_directory=tmp_path / "dist" / "main"),
        EntryDescriptor(name="worker", specifiers=(WORKER,), output_directory=tmp_path / "dist" / "worker"),
    ]
