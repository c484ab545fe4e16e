"""Attach compiled artifact paths to declarations and locate their build outputs."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import PurePosixPath
from typing import Iterable

from swiftprebuilt.errors import MissingArtifactError
from swiftprebuilt.models import OutputDeclaration, PlatformArtifacts, SupportDeclaration

log = logging.getLogger("swiftprebuilt.artifacts")

ARTIFACT_SUFFIXES = (".a", ".swiftdoc", ".swiftinterface")

# Modules whose public interface must come from the private .swiftinterface.
# SwiftSyntax exposes SPI that its sibling modules import.
INTERFACE_OVERRIDES: dict[str, str] = {
    "SwiftSyntax": "{name}.private.swiftinterface",
}


def interface_filename(name: str) -> str:
    pattern = INTERFACE_OVERRIDES.get(name, "{name}.swiftinterface")
    return pattern.format(name=name)


def platform_prefix(platform: str, platforms: list[str]) -> str:
    """Single-platform archives keep files at the root, others nest per platform."""
    return f"{platform}/" if len(platforms) > 1 else ""


def artifact_paths_for(name: str, platforms: list[str]) -> dict[str, PlatformArtifacts]:
    """Default archive layout for a module."""
    paths = {}
    for platform in platforms:
        prefix = platform_prefix(platform, platforms)
        paths[platform] = PlatformArtifacts(
            archive=f"{prefix}lib{name}.a",
            swiftdoc=f"{prefix}{name}.swiftdoc",
            swiftinterface=f"{prefix}{interface_filename(name)}",
        )
    return paths


def select_build_outputs(paths: Iterable[str]) -> list[str]:
    """Keep only the outputs that belong in the archive."""
    return [p for p in paths if p.endswith(ARTIFACT_SUFFIXES)]


def attach_artifacts(
    declarations: list[OutputDeclaration], platforms: list[str]
) -> list[OutputDeclaration]:
    """Return copies of `declarations` with artifact paths filled in."""
    attached = [
        replace(decl, artifact_paths=artifact_paths_for(decl.name, platforms))
        for decl in declarations
    ]
    log.debug("Attached artifacts for %d declarations", len(attached))
    return attached


def match_outputs(
    name: str,
    wanted: dict[str, list[str]],
    outputs: dict[str, list[str]],
) -> dict[str, str]:
    """Map archive paths to build outputs of the same platform, by basename.

    `wanted` and `outputs` are both keyed by platform. A file missing from
    its own platform's outputs is an error even if another platform has it.
    """
    sources = {}
    for platform, paths in wanted.items():
        by_name = {PurePosixPath(o).name: o for o in outputs.get(platform, [])}
        for path in paths:
            filename = PurePosixPath(path).name
            if filename not in by_name:
                raise MissingArtifactError(name, filename, platform)
            sources[path] = by_name[filename]
    return sources


def module_sources(
    declarations: list[OutputDeclaration], outputs: dict[str, list[str]]
) -> dict[str, str]:
    """Archive path -> build output for every module artifact."""
    sources: dict[str, str] = {}
    for decl in declarations:
        wanted = {p: list(a.files) for p, a in decl.artifact_paths.items()}
        sources.update(match_outputs(decl.name, wanted, outputs))
    return sources


def support_sources(
    support: list[SupportDeclaration], outputs: dict[str, list[str]]
) -> dict[str, str]:
    """Archive path -> build output for every support static library."""
    sources: dict[str, str] = {}
    for s in support:
        wanted = {p: [path] for p, path in s.static_libraries.items()}
        sources.update(match_outputs(s.name, wanted, outputs))
    return sources
