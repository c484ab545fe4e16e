"""Bazel cquery wrapper: exported labels, support labels, outputs and headers."""

from __future__ import annotations

import json
import logging
import os
import subprocess

from swiftprebuilt.config import PrebuiltConfig
from swiftprebuilt.errors import QueryError

log = logging.getLogger("swiftprebuilt.bazel")

EXPORTED_QUERY = "filter(_opt, //...)"
SUPPORT_QUERY = "kind(cc_library, //...)"
RULES_SWIFT = "@build_bazel_rules_swift//swift"


def build_flags(config: PrebuiltConfig) -> list[str]:
    """Flags shared by every query and build of the source checkout."""
    macos = config.versions.macos
    return [
        f"--{RULES_SWIFT}:copt=-whole-module-optimization",
        f"--{RULES_SWIFT}:exec_copt=-whole-module-optimization",
        "--compilation_mode=opt",
        f"--cpu={config.build.cpu}",
        "--features=swift.emit_swiftinterface",
        "--features=swift.enable_library_evolution",
        f"--host_macos_minimum_os={macos}",
        f"--macos_minimum_os={macos}",
    ]


def parse_cquery_labels(output: str) -> list[str]:
    """Parse cquery lines like '//:SwiftBasicFormat_opt (5d78ae7)' into labels.

    Duplicates (one per configuration) are dropped, first occurrence wins.
    """
    labels: list[str] = []
    seen: set[str] = set()
    for line in output.splitlines():
        label = line.split(" (", 1)[0].strip()
        if not label or label in seen:
            continue
        seen.add(label)
        labels.append(label)
    return labels


def parse_headers(jsonproto: str) -> list[str]:
    """Extract the hdrs attribute from `cquery --output=jsonproto` output.

    Labels in the root package ('//:Sources/x.h') become workspace paths.
    """
    data = json.loads(jsonproto)
    results = data.get("results") or []
    if not results:
        return []
    attributes = results[0].get("target", {}).get("rule", {}).get("attribute", [])
    for attr in attributes:
        if attr.get("name") == "hdrs":
            return [
                h[len("//:"):] if h.startswith("//:") else h
                for h in attr.get("stringListValue", [])
            ]
    return []


class BazelQuery:
    """Runs cquery against a source checkout with the release build flags."""

    def __init__(self, config: PrebuiltConfig) -> None:
        self.workspace = str(config.source_path)
        self.flags = build_flags(config)
        self.bazel_version = config.versions.bazel

    def _cquery(self, *args: str, cpu: str | None = None) -> str:
        flags = self.flags
        if cpu is not None:
            flags = [f"--cpu={cpu}" if f.startswith("--cpu=") else f for f in flags]
        cmd = ["bazel", "cquery", *args, *flags]
        log.debug("Running %s", " ".join(cmd))
        env = {**os.environ, "USE_BAZEL_VERSION": self.bazel_version}
        try:
            result = subprocess.run(
                cmd,
                cwd=self.workspace,
                capture_output=True,
                text=True,
                env=env,
            )
        except FileNotFoundError as e:
            raise QueryError(cmd, str(e)) from e
        if result.returncode != 0:
            raise QueryError(cmd, result.stderr)
        return result.stdout

    def exported_labels(self) -> list[str]:
        """Labels of the optimized variants meant for external consumption."""
        return parse_cquery_labels(self._cquery(EXPORTED_QUERY))

    def support_labels(self) -> list[str]:
        """Labels of the C libraries the Swift modules need at compile time."""
        return parse_cquery_labels(self._cquery(SUPPORT_QUERY))

    def output_files(self, labels: list[str], cpu: str | None = None) -> list[str]:
        """Paths of the files produced by building the given labels.

        `cpu` overrides the configured target cpu, one query per platform.
        """
        if not labels:
            return []
        query = f"set({' '.join(labels)})"
        output = self._cquery(query, "--output=files", cpu=cpu)
        return [line.strip() for line in output.splitlines() if line.strip()]

    def target_headers(self, label: str) -> list[str]:
        return parse_headers(self._cquery(label, "--output=jsonproto"))
