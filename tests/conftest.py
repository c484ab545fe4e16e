"""Shared fixtures for swiftprebuilt tests."""

from __future__ import annotations

import pytest

from swiftprebuilt.config import BuildConfig, OutputConfig, PrebuiltConfig, VersionConfig
from swiftprebuilt.errors import NameResolutionError
from swiftprebuilt.models import Target
from swiftprebuilt.synthesis.artifacts import interface_filename

SHIMS = "//:_SwiftSyntaxCShims"

# bare label -> (name, deps) as buildozer would report them
SOURCE_RULES: dict[str, tuple[str, list[str]]] = {
    "//:SwiftSyntax": ("SwiftSyntax", [SHIMS]),
    "//:SwiftDiagnostics": ("SwiftDiagnostics", [":SwiftSyntax"]),
    "//:SwiftBasicFormat": ("SwiftBasicFormat", [":SwiftSyntax"]),
    "//:SwiftParser": ("SwiftParser", [":SwiftSyntax", ":SwiftDiagnostics"]),
    "//:SwiftSyntaxBuilder": (
        "SwiftSyntaxBuilder",
        [":SwiftBasicFormat_opt", ":SwiftParser", ":SwiftSyntax", ":SwiftSyntax", SHIMS],
    ),
    SHIMS: ("_SwiftSyntaxCShims", []),
}


class FakeGraph:
    """In-memory build graph keyed by bare label."""

    def __init__(self, rules: dict[str, tuple[str, list[str]]]) -> None:
        self.rules = rules
        self.calls: list[tuple[str, str]] = []

    def name_of(self, label: str) -> str:
        self.calls.append(("name", label))
        if label not in self.rules:
            raise NameResolutionError(label, "rule not found")
        return self.rules[label][0]

    def deps_of(self, label: str) -> list[str]:
        self.calls.append(("deps", label))
        return list(self.rules[label][1])


class FakeQuery:
    """In-memory stand-in for BazelQuery.

    `outputs` replaces the generated build outputs, either for every cpu
    (a list) or per cpu (a dict). `missing` drops basenames for one cpu.
    """

    def __init__(
        self,
        exported: list[str],
        support: list[str],
        headers: dict[str, list[str]] | None = None,
        outputs: list[str] | dict[str, list[str]] | None = None,
        missing: dict[str, set[str]] | None = None,
    ) -> None:
        self.exported = exported
        self.support = support
        self.headers = headers or {}
        self.outputs = outputs
        self.missing = missing or {}
        self.output_cpus: list[str | None] = []

    def exported_labels(self) -> list[str]:
        return list(self.exported)

    def support_labels(self) -> list[str]:
        return list(self.support)

    def output_files(self, labels: list[str], cpu: str | None = None) -> list[str]:
        self.output_cpus.append(cpu)
        if isinstance(self.outputs, dict):
            return list(self.outputs.get(cpu, []))
        if self.outputs is not None:
            return list(self.outputs)
        bin_dir = f"bazel-out/{cpu or 'darwin_arm64'}-opt/bin"
        files = []
        for label in labels:
            name = label.rsplit(":", 1)[1].removesuffix("_opt")
            base = f"{bin_dir}/{name}"
            files += [
                f"{bin_dir}/lib{name}.a",
                f"{base}.swiftdoc",
                f"{base}.swiftinterface",
                f"{bin_dir}/{interface_filename(name)}",
                f"{base}.swiftmodule",
                f"{base}_objs/{name}.o",
            ]
        dropped = self.missing.get(cpu, set())
        return [f for f in dict.fromkeys(files) if f.rsplit("/", 1)[1] not in dropped]

    def target_headers(self, label: str) -> list[str]:
        return list(self.headers.get(label, []))


@pytest.fixture
def graph() -> FakeGraph:
    return FakeGraph(dict(SOURCE_RULES))


@pytest.fixture
def exported_labels() -> list[str]:
    return [f"{label}_opt" for label in SOURCE_RULES if label != SHIMS]


@pytest.fixture
def query(exported_labels) -> FakeQuery:
    return FakeQuery(
        exported=exported_labels,
        support=[SHIMS],
        headers={SHIMS: ["Sources/_SwiftSyntaxCShims/include/AtomicBool.h"]},
    )


@pytest.fixture
def sample_targets() -> list[Target]:
    """Exported targets as discovery would produce them."""
    return [
        Target(label=f"{label}_opt", name=name, raw_dependencies=tuple(deps))
        for label, (name, deps) in SOURCE_RULES.items()
        if label != SHIMS
    ]


@pytest.fixture
def config(tmp_path) -> PrebuiltConfig:
    source = tmp_path / "swift-syntax"
    source.mkdir()
    return PrebuiltConfig(
        versions=VersionConfig(swift_syntax="600.0.0", rules_swift="2.1.1", macos="13.0"),
        build=BuildConfig(source_dir=str(source)),
        output=OutputConfig(dir=str(tmp_path / "out")),
    )
