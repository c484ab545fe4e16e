"""Output formatters for the generated Bazel files."""

from swiftprebuilt.formatters.build_file import BuildFile, format_build_file
from swiftprebuilt.formatters.module_file import (
    format_archive_module,
    format_source_module,
    version_marker_patch,
)

__all__ = [
    "BuildFile",
    "format_archive_module",
    "format_build_file",
    "format_source_module",
    "version_marker_patch",
]
