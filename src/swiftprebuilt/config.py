"""Configuration loading and defaults."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from swiftprebuilt.models import ReleaseInfo

# Environment variables read by the release workflow, keyed by config field.
ENV_VERSIONS = {
    "swift_syntax": "SWIFT_SYNTAX_VERSION",
    "rules_swift": "RULES_SWIFT_VERSION",
    "apple_support": "APPLE_SUPPORT_VERSION",
    "rules_apple": "RULES_APPLE_VERSION",
    "bazel": "USE_BAZEL_VERSION",
    "macos": "MACOS_VERSION",
}


@dataclass
class VersionConfig:
    swift_syntax: str = ""
    rules_swift: str = ""
    apple_support: str = "1.23.1"
    rules_apple: str = "4.2.0"
    # Bazel 8.4.2 carries the fix needed on macOS 26+.
    bazel: str = "8.4.2"
    macos: str = ""

    def apply_env(self, environ: dict[str, str] | None = None) -> None:
        """Override versions from the environment, when set."""
        environ = os.environ if environ is None else environ
        for attr, var in ENV_VERSIONS.items():
            value = environ.get(var, "").strip()
            if value:
                setattr(self, attr, value)


@dataclass
class BuildConfig:
    build_number: str = ""
    cpu: str = "darwin_arm64"
    platforms: list[str] = field(default_factory=lambda: ["darwin_arm64"])
    source_dir: str = "swift-syntax"

    def apply_env(self, environ: dict[str, str] | None = None) -> None:
        environ = os.environ if environ is None else environ
        value = environ.get("BUILD_NUMBER", "").strip()
        if value:
            self.build_number = value


@dataclass
class OutputConfig:
    dir: str = "."


@dataclass
class PrebuiltConfig:
    versions: VersionConfig = field(default_factory=VersionConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @property
    def release(self) -> ReleaseInfo:
        return ReleaseInfo(self.versions.swift_syntax, self.build.build_number)

    @property
    def source_path(self) -> Path:
        return Path(self.build.source_dir)

    @property
    def archive_path(self) -> Path:
        return Path(self.output.dir) / self.release.archive_name

    def validate(self) -> list[str]:
        """Return a message for every required value that is missing."""
        problems = []
        for attr in ("swift_syntax", "rules_swift", "macos"):
            if not getattr(self.versions, attr):
                problems.append(
                    f"versions.{attr} is required (or set {ENV_VERSIONS[attr]})"
                )
        if not self.build.platforms:
            problems.append("build.platforms must list at least one platform")
        elif self.build.cpu not in self.build.platforms:
            problems.append(f"build.cpu {self.build.cpu!r} must be one of build.platforms")
        return problems

    @classmethod
    def load(
        cls, path: Path | None = None, environ: dict[str, str] | None = None
    ) -> PrebuiltConfig:
        """Load config from swiftprebuilt.toml, then apply environment overrides."""
        if path is None:
            path = Path("swiftprebuilt.toml")

        config = cls()

        if path.exists():
            with open(path, "rb") as f:
                raw = tomllib.load(f)

            if "versions" in raw:
                v = raw["versions"]
                defaults = config.versions
                config.versions = VersionConfig(
                    swift_syntax=v.get("swift_syntax", defaults.swift_syntax),
                    rules_swift=v.get("rules_swift", defaults.rules_swift),
                    apple_support=v.get("apple_support", defaults.apple_support),
                    rules_apple=v.get("rules_apple", defaults.rules_apple),
                    bazel=v.get("bazel", defaults.bazel),
                    macos=v.get("macos", defaults.macos),
                )

            if "build" in raw:
                b = raw["build"]
                config.build = BuildConfig(
                    build_number=str(b.get("build_number", config.build.build_number)),
                    cpu=b.get("cpu", config.build.cpu),
                    platforms=b.get("platforms", config.build.platforms),
                    source_dir=b.get("source_dir", config.build.source_dir),
                )

            if "output" in raw:
                o = raw["output"]
                config.output = OutputConfig(dir=o.get("dir", config.output.dir))

        config.versions.apply_env(environ)
        config.build.apply_env(environ)
        return config


DEFAULT_CONFIG_TEMPLATE = """\
[versions]
# each value can be overridden by its environment variable
swift_syntax = ""      # SWIFT_SYNTAX_VERSION
rules_swift = ""       # RULES_SWIFT_VERSION
apple_support = "1.23.1"
rules_apple = "4.2.0"
bazel = "8.4.2"        # USE_BAZEL_VERSION
macos = "13.0"         # MACOS_VERSION

[build]
build_number = ""      # BUILD_NUMBER
cpu = "darwin_arm64"
platforms = ["darwin_arm64"]
source_dir = "swift-syntax"

[output]
dir = "."
"""
