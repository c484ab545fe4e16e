"""Pipeline orchestrator: wires discovery, synthesis, attachment, and formatting."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from swiftprebuilt.config import PrebuiltConfig
from swiftprebuilt.errors import MissingArtifactError
from swiftprebuilt.models import SupportTarget, SynthesisResult

log = logging.getLogger("swiftprebuilt.pipeline")

BACKUP_SUFFIX = ".original"


def run_pipeline(config: PrebuiltConfig, *, query=None, graph=None) -> SynthesisResult:
    """Discover targets in the checkout and render the archive's Bazel files.

    Nothing is written here; every failure propagates before any output exists.
    """
    from swiftprebuilt.extractors.bazel_query import BazelQuery
    from swiftprebuilt.extractors.buildozer import BuildozerGraph
    from swiftprebuilt.formatters.build_file import format_build_file
    from swiftprebuilt.formatters.module_file import format_archive_module
    from swiftprebuilt.synthesis.artifacts import (
        attach_artifacts,
        module_sources,
        select_build_outputs,
        support_sources,
    )
    from swiftprebuilt.synthesis.support import plan_support
    from swiftprebuilt.synthesis.synthesizer import discover_targets, synthesize

    if query is None:
        query = BazelQuery(config)
    if graph is None:
        graph = BuildozerGraph(str(config.source_path))

    release = config.release
    platforms = config.build.platforms

    # ── Discovery ───────────────────────────────────────────────────────
    exported = query.exported_labels()
    support_labels = query.support_labels()
    log.info(
        "Found %d exported and %d support targets", len(exported), len(support_labels)
    )

    targets = discover_targets(graph, exported)

    # ── Synthesis ───────────────────────────────────────────────────────
    declarations = synthesize(targets, support_labels)
    declarations = attach_artifacts(declarations, platforms)

    support_targets = [
        SupportTarget(
            label=label,
            name=graph.name_of(label),
            headers=tuple(query.target_headers(label)),
        )
        for label in support_labels
    ]
    support = plan_support(support_targets, platforms)

    # ── Build outputs, one query per platform ───────────────────────────
    module_outputs = {
        p: select_build_outputs(query.output_files(exported, cpu=p)) for p in platforms
    }
    support_outputs = {p: query.output_files(support_labels, cpu=p) for p in platforms}
    artifact_sources = {
        **module_sources(declarations, module_outputs),
        **support_sources(support, support_outputs),
    }

    # ── Formatting ──────────────────────────────────────────────────────
    files = {
        "MODULE.bazel": format_archive_module(release, config),
        "BUILD.bazel": format_build_file(declarations, support),
    }

    return SynthesisResult(
        release=release,
        declarations=declarations,
        support=support,
        files=files,
        artifact_sources=artifact_sources,
    )


def _atomic_write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(content)
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise


def _copy_into(root: Path, source: str, dest: Path, owner: str) -> None:
    if not (root / source).is_file():
        raise MissingArtifactError(owner, source)
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(root / source, dest)


def write_outputs(
    result: SynthesisResult, config: PrebuiltConfig, *, include_artifacts: bool = False
) -> list[str]:
    """Write the archive directory and return the paths it contains.

    The archive is assembled in a staging directory next to it and moved into
    place only once every file is there, so a failed copy leaves any previous
    archive untouched. With `include_artifacts`, the build outputs are copied
    in as well; this needs `bazel build` to have run first.
    """
    out = Path(config.output.dir)
    out.mkdir(parents=True, exist_ok=True)
    archive = out / result.release.archive_name
    stage = Path(tempfile.mkdtemp(dir=out, prefix=f".{archive.name}."))

    rel_paths = []
    try:
        for rel_path, content in result.files.items():
            path = stage / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
            rel_paths.append(rel_path)

        for s in result.support:
            for source, dest in s.header_copies.items():
                _copy_into(config.source_path, source, stage / dest, s.name)
                rel_paths.append(dest)

        if include_artifacts:
            for dest, source in result.artifact_sources.items():
                _copy_into(config.source_path, source, stage / dest, result.release.archive_name)
                rel_paths.append(dest)
    except BaseException:
        shutil.rmtree(stage, ignore_errors=True)
        raise

    previous = None
    if archive.exists():
        previous = Path(tempfile.mkdtemp(dir=out, prefix=f".{archive.name}.old.")) / "archive"
        os.replace(archive, previous)
    os.replace(stage, archive)
    if previous is not None:
        shutil.rmtree(previous.parent)

    log.info("Wrote %d files to %s", len(rel_paths), archive)
    return [str(archive / rel) for rel in rel_paths]


def prepare_source(config: PrebuiltConfig) -> list[str]:
    """Swap the checkout's MODULE.bazel and .bazelrc for the release versions.

    The originals are kept next to them with a '.original' suffix; running
    this twice leaves the first backups in place.
    """
    from swiftprebuilt.formatters.module_file import format_source_module, version_marker_patch

    source = config.source_path
    changed = []

    for name in (".bazelrc", "MODULE.bazel"):
        path = source / name
        backup = source / f"{name}{BACKUP_SUFFIX}"
        if path.exists() and not backup.exists():
            path.rename(backup)
            log.info("Moved %s to %s", path, backup)

    module = source / "MODULE.bazel"
    _atomic_write(module, format_source_module(config))
    changed.append(str(module))

    patch = version_marker_patch(config.versions.swift_syntax)
    if patch is not None:
        build = source / "BUILD.bazel"
        current = build.read_text() if build.exists() else ""
        if patch.strip() not in current:
            log.info("Patching %s with version marker module", build)
            _atomic_write(build, current + patch)
            changed.append(str(build))

    return changed
