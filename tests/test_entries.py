"""Tests for entry descriptors derived from the build configuration."""

from pathlib import Path

import pytest

from entrypack.entries import build_entry_descriptors, entry_output_directory, normalize_entries
from entrypack.errors import UnsupportedConfigurationError


class TestNormalizeEntries:
    def test_string_entry_is_named_output(self):
        assert normalize_entries("./src/index.js") == {"output": ("./src/index.js",)}

    def test_mapping(self):
        assert normalize_entries({"main": "./a.js", "vendor": ["./b.js", "./c.js"]}) == {
            "main": ("./a.js",),
            "vendor": ("./b.js", "./c.js"),
        }

    @pytest.mark.parametrize(
        "entry, reason",
        [
            (["./a.js", "./b.js"], "entry_array"),
            (lambda: {"main": "./a.js"}, "dynamic_entry"),
            ({}, "entry_missing"),
            (None, "entry_missing"),
            ({"main": 3}, "entry_value"),
            ({"main": []}, "entry_value"),
        ],
    )
    def test_unsupported(self, entry, reason):
        with pytest.raises(UnsupportedConfigurationError) as excinfo:
            normalize_entries(entry)
        assert excinfo.value.reason == reason


class TestEntryOutputDirectory:
    @pytest.mark.parametrize(
        "template, expected",
        [
            ("[name]/[name].js", "/out/main"),
            ("bundles/[name]/index.js", "/out/bundles/main"),
            ("[name]/js/[name].[hash].js", "/out/main/js"),
            ("bundle.js", "/out"),
            ("/[name].js", "/out"),
        ],
    )
    def test_template(self, template, expected):
        assert entry_output_directory(Path("/out"), template, "main") == Path(expected)


class TestBuildEntryDescriptors:
    def test_descriptors(self):
        entries = build_entry_descriptors({"main": "./a.js", "worker": "./b.js"}, Path("/out"), "[name]/[name].js")
        assert [(e.name, e.specifier, e.output_directory) for e in entries] == [
            ("main", "./a.js", Path("/out/main")),
            ("worker", "./b.js", Path("/out/worker")),
        ]

    def test_single_entry_may_share_flat_output(self):
        [entry] = build_entry_descriptors("./a.js", Path("/out"), "bundle.js")
        assert entry.output_directory == Path("/out")

    def test_multiple_entries_need_separate_directories(self):
        with pytest.raises(UnsupportedConfigurationError) as excinfo:
            build_entry_descriptors({"main": "./a.js", "worker": "./b.js"}, Path("/out"), "[name].js")
        assert excinfo.value.reason == "unsafe_output_layout"
