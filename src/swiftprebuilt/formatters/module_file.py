"""Render MODULE.bazel files for the archive and for the source checkout."""

from __future__ import annotations

from swiftprebuilt.config import PrebuiltConfig
from swiftprebuilt.models import ReleaseInfo

PLATFORMS_VERSION = "0.0.8"
RULES_SWIFT_MAX_COMPATIBILITY = 3

# swift-syntax releases that forgot to declare their version marker module.
_VERSION_MARKER_PATCHES = {
    "601.0.1": "SwiftSyntax601",
}


def format_archive_module(release: ReleaseInfo, config: PrebuiltConfig) -> str:
    """MODULE.bazel shipped in the archive, consumed via archive_override."""
    return f"""\
module(
    name = "swift-syntax",
    version = "{release.version}",
    compatibility_level = 1,
)

bazel_dep(
    name = "platforms",
    version = "{PLATFORMS_VERSION}",
)

bazel_dep(
    name = "rules_swift",
    version = "{config.versions.rules_swift}",
    max_compatibility_level = {RULES_SWIFT_MAX_COMPATIBILITY},
    repo_name = "build_bazel_rules_swift",
)
"""


def format_source_module(config: PrebuiltConfig) -> str:
    """MODULE.bazel that replaces the checkout's own to pin rule versions."""
    v = config.versions
    return (
        f'module(name = "swift-syntax", version = "{v.swift_syntax}", compatibility_level = 1)\n'
        f'bazel_dep(name = "apple_support", version = "{v.apple_support}", repo_name = "build_bazel_apple_support")\n'
        f'bazel_dep(name = "rules_swift", version = "{v.rules_swift}", repo_name = "build_bazel_rules_swift")\n'
        f'bazel_dep(name = "rules_apple", version = "{v.rules_apple}", repo_name = "build_bazel_rules_apple")\n'
    )


def version_marker_patch(version: str) -> str | None:
    """BUILD.bazel snippet declaring the missing version marker target, if any."""
    marker = _VERSION_MARKER_PATCHES.get(version)
    if marker is None:
        return None
    return f"""
swift_syntax_library(
    name = "{marker}",
    srcs = glob(["Sources/VersionMarkerModules/{marker}/**/*.swift"]),
    deps = [
    ],
)
"""
