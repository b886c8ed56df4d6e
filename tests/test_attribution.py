"""Tests for the modules-finished attribution pass."""

import logging

import pytest

from conftest import MAIN, WORKER, module, sample_modules
from entrypack.attribution import AttributionResult, DependencyAccumulator, attribute_dependencies
from entrypack.builtins import is_builtin_module
from entrypack.entries import EntryDescriptor
from entrypack.errors import ManifestNotFoundError
from entrypack.graph import ModuleGraph
from entrypack.manifest import InMemoryManifestStore, ManifestResolver


class TestDependencyAccumulator:
    def test_record_overwrites(self):
        accumulator = DependencyAccumulator()
        accumulator.record("main", "lodash", "^4.0.0")
        accumulator.record("main", "lodash", "^4.17.0")
        assert accumulator.freeze() == {"main": {"lodash": "^4.17.0"}}

    def test_frozen_accumulator_rejects_records(self):
        accumulator = DependencyAccumulator()
        accumulator.freeze()
        with pytest.raises(RuntimeError):
            accumulator.record("main", "lodash", "1.0.0")


class TestAttributeDependencies:
    def test_packages_per_entry(self, sample_graph, resolver, entries):
        result = attribute_dependencies(sample_graph, resolver, entries)

        assert result.dependencies == {
            "main": {"left-pad": "1.3.0", "lodash": "^4.17.0"},
            "worker": {"lodash": "^4.17.0"},
        }
        assert result.missing == []

    def test_version_range_taken_verbatim(self, sample_graph, resolver, entries):
        result = attribute_dependencies(sample_graph, resolver, entries)
        assert result.for_entry("worker")["lodash"] == "^4.17.0"

    def test_unreferenced_entry_has_empty_set(self, sample_graph, resolver, entries, tmp_path):
        idle = EntryDescriptor(name="idle", specifiers=("./src/idle.js",), output_directory=tmp_path)
        result = attribute_dependencies(sample_graph, resolver, [*entries, idle])
        assert result.for_entry("idle") == {}

    def test_builtins_never_attributed(self, resolver, entries):
        modules = sample_modules() + [
            module("external path", request="path", issuer="/project/src/main.js", reasons=["/project/src/main.js"]),
            module(
                "external fs/promises",
                request="fs/promises",
                issuer="/project/src/main.js",
                reasons=["/project/src/main.js"],
            ),
            module(
                "external node:crypto",
                request="node:crypto",
                issuer="/project/src/main.js",
                reasons=["/project/src/main.js"],
            ),
        ]
        # Even a manifest that declares a builtin's name must not pull it in.
        store = InMemoryManifestStore(
            {"/project": {"name": "shop", "dependencies": {"lodash": "^4.17.0", "left-pad": "1.3.0", "path": "0.12.7"}}}
        )
        result = attribute_dependencies(ModuleGraph(modules), ManifestResolver(store), entries)

        for packages in result.dependencies.values():
            assert not any(is_builtin_module(name) for name in packages)

    def test_packages_shadowing_builtin_names_are_attributed(self, entries):
        modules = [
            module("/project/src/main.js", request="/project/src/main.js", raw_request=MAIN, reasons=[None]),
            module(
                "external process/browser",
                request="process/browser",
                issuer="/project/src/main.js",
                reasons=["/project/src/main.js"],
            ),
            module("external buffer/", request="buffer/", issuer="/project/src/main.js", reasons=["/project/src/main.js"]),
        ]
        store = InMemoryManifestStore(
            {"/project": {"name": "shop", "dependencies": {"process": "0.11.10", "buffer": "6.0.3"}}}
        )
        result = attribute_dependencies(ModuleGraph(modules), ManifestResolver(store), entries)

        assert result.for_entry("main") == {"process": "0.11.10", "buffer": "6.0.3"}

    def test_builtins_do_not_need_a_manifest(self, entries):
        graph = ModuleGraph(
            [
                module("entry", raw_request=MAIN, context="/elsewhere", reasons=[None]),
                module("external fs", request="fs", issuer="entry", context=None, reasons=["entry"]),
            ]
        )
        result = attribute_dependencies(graph, ManifestResolver(InMemoryManifestStore()), entries)
        assert result.dependencies == {}

    def test_missing_declaration_is_logged_and_skipped(self, resolver, entries, caplog):
        modules = sample_modules() + [
            module("external chalk", request="chalk", issuer="/project/src/main.js", reasons=["/project/src/main.js"]),
        ]
        caplog.set_level(logging.WARNING, logger="entrypack")

        result = attribute_dependencies(ModuleGraph(modules), resolver, entries)

        assert "chalk" not in result.for_entry("main")
        assert [missing.request for missing in result.missing] == ["chalk"]
        records = [r for r in caplog.records if getattr(r, "entrypack_event", None) == "missing_dependency"]
        assert len(records) == 1
        assert records[0].getMessage().startswith("[DependencyPackerPlugin] » chalk was requested")

    def test_missing_ancestor_manifest_is_fatal(self, sample_graph, entries):
        with pytest.raises(ManifestNotFoundError):
            attribute_dependencies(sample_graph, ManifestResolver(InMemoryManifestStore()), entries)

    def test_nearest_manifest_of_issuer_decides_version(self, entries):
        graph = ModuleGraph(
            [
                module("entry", raw_request=MAIN, context="/project/src", reasons=[None]),
                module(
                    "/project/packages/ui/index.js",
                    raw_request="ui",
                    context="/project/packages/ui",
                    issuer="entry",
                    reasons=["entry"],
                ),
                module(
                    "external react",
                    request="react",
                    issuer="/project/packages/ui/index.js",
                    reasons=["/project/packages/ui/index.js"],
                ),
            ]
        )
        store = InMemoryManifestStore(
            {
                "/project": {"name": "shop", "dependencies": {"react": "15.0.0"}},
                "/project/packages/ui": {"name": "ui", "dependencies": {"react": "16.4.0"}},
            }
        )
        result = attribute_dependencies(graph, ManifestResolver(store), entries)
        assert result.for_entry("main") == {"react": "16.4.0"}

    def test_entry_with_several_specifiers(self, sample_graph, resolver, tmp_path):
        combined = EntryDescriptor(name="all", specifiers=(MAIN, WORKER), output_directory=tmp_path)
        result = attribute_dependencies(sample_graph, resolver, [combined])
        assert result.for_entry("all") == {"left-pad": "1.3.0", "lodash": "^4.17.0"}

    def test_rerun_is_identical(self, resolver, entries):
        first = attribute_dependencies(ModuleGraph(sample_modules()), resolver, entries)
        second = attribute_dependencies(ModuleGraph(sample_modules()), resolver, entries)
        assert first.dependencies == second.dependencies

    def test_for_entry_returns_a_copy(self):
        result = AttributionResult(dependencies={"main": {"lodash": "1.0.0"}})
        result.for_entry("main")["react"] = "16.0.0"
        assert result.dependencies == {"main": {"lodash": "1.0.0"}}
