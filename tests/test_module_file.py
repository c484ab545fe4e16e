"""Tests for MODULE.bazel rendering."""

from __future__ import annotations

from swiftprebuilt.formatters.module_file import (
    format_archive_module,
    format_source_module,
    version_marker_patch,
)
from swiftprebuilt.models import ReleaseInfo


class TestArchiveModule:
    def test_contents(self, config):
        content = format_archive_module(ReleaseInfo("600.0.0", "3"), config)
        assert 'name = "swift-syntax",' in content
        assert 'version = "600.0.0",' in content
        assert "compatibility_level = 1," in content
        assert 'version = "2.1.1",' in content
        assert "max_compatibility_level = 3," in content
        assert 'repo_name = "build_bazel_rules_swift",' in content
        # build number is not part of the module version
        assert "+3" not in content


class TestSourceModule:
    def test_pins_rule_versions(self, config):
        content = format_source_module(config)
        lines = content.splitlines()
        assert lines[0] == (
            'module(name = "swift-syntax", version = "600.0.0", compatibility_level = 1)'
        )
        assert 'bazel_dep(name = "apple_support", version = "1.23.1", repo_name = "build_bazel_apple_support")' in lines
        assert 'bazel_dep(name = "rules_apple", version = "4.2.0", repo_name = "build_bazel_rules_apple")' in lines
        assert len(lines) == 4


class TestVersionMarkerPatch:
    def test_patched_version(self):
        patch = version_marker_patch("601.0.1")
        assert patch is not None
        assert 'name = "SwiftSyntax601",' in patch
        assert "Sources/VersionMarkerModules/SwiftSyntax601/**/*.swift" in patch

    def test_other_versions(self):
        assert version_marker_patch("600.0.0") is None
        assert version_marker_patch("601.0.0") is None
