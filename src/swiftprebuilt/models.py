"""All shared data models for swiftprebuilt."""

from __future__ import annotations

from dataclasses import dataclass, field

# ── Build graph ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Target:
    """A compiled unit discovered through build graph introspection."""

    label: str
    name: str
    raw_dependencies: tuple[str, ...] = ()
    is_exported: bool = True


@dataclass(frozen=True)
class SupportTarget:
    """A C support target re-exported through cc_import."""

    label: str
    name: str
    headers: tuple[str, ...] = ()


# ── Generated declarations ──────────────────────────────────────────────────


@dataclass(frozen=True)
class PlatformArtifacts:
    """Compiled files for one platform, relative to the archive root."""

    archive: str
    swiftdoc: str
    swiftinterface: str

    @property
    def files(self) -> tuple[str, str, str]:
        return (self.archive, self.swiftdoc, self.swiftinterface)


@dataclass(frozen=True)
class OutputDeclaration:
    """One swift_import entry in the generated BUILD file."""

    name: str
    dependencies: tuple[str, ...] = ()
    artifact_paths: dict[str, PlatformArtifacts] = field(default_factory=dict)

    @property
    def alias_name(self) -> str:
        return f"{self.name}_opt"


@dataclass(frozen=True)
class SupportDeclaration:
    """One cc_import entry in the generated BUILD file."""

    name: str
    static_libraries: dict[str, str] = field(default_factory=dict)  # platform -> path
    header_dir: str | None = None
    header_copies: dict[str, str] = field(default_factory=dict)

    @property
    def hdrs_glob(self) -> str | None:
        if self.header_dir is None:
            return None
        return f"{self.header_dir}/*.h"


# ── Release ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ReleaseInfo:
    """Version identity of one prebuilt release."""

    version: str
    build_number: str = ""

    @property
    def tag(self) -> str:
        if self.build_number:
            return f"{self.version}+{self.build_number}"
        return self.version

    @property
    def archive_name(self) -> str:
        return f"swift-syntax-{self.tag}"


# ── Pipeline aggregates ─────────────────────────────────────────────────────


@dataclass
class SynthesisResult:
    """Output from one pipeline run, ready to be written."""

    release: ReleaseInfo
    declarations: list[OutputDeclaration] = field(default_factory=list)
    support: list[SupportDeclaration] = field(default_factory=list)
    files: dict[str, str] = field(default_factory=dict)  # archive path -> content
    # archive path -> build output path, relative to the source checkout
    artifact_sources: dict[str, str] = field(default_factory=dict)

    @property
    def module_names(self) -> list[str]:
        return [d.name for d in self.declarations]
