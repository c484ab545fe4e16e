"""Read rule attributes of the source checkout through `buildozer print`."""

from __future__ import annotations

import logging
import subprocess

from swiftprebuilt.errors import NameResolutionError, QueryError

log = logging.getLogger("swiftprebuilt.buildozer")


def parse_list(output: str) -> list[str]:
    """Parse `buildozer print deps` output such as '[:SwiftSyntax //:_CShims]'.

    buildozer prints '(missing)' for an unset attribute.
    """
    text = output.strip()
    if not text or text == "(missing)":
        return []
    if text.startswith("["):
        text = text[1:]
    if text.endswith("]"):
        text = text[:-1]
    return [item.strip("\"'") for item in text.split() if item.strip("\"'")]


class BuildozerGraph:
    """Build graph introspection backed by buildozer."""

    def __init__(self, workspace: str) -> None:
        self.workspace = workspace

    def _print(self, attr: str, label: str) -> str:
        cmd = ["buildozer", f"print {attr}", label]
        try:
            result = subprocess.run(
                cmd,
                cwd=self.workspace,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as e:
            raise QueryError(cmd, str(e)) from e
        # buildozer exits 3 when it made no changes, which is the normal case for print.
        if result.returncode not in (0, 3):
            raise QueryError(cmd, result.stderr)
        return result.stdout

    def name_of(self, label: str) -> str:
        """Declared `name` attribute of a rule."""
        try:
            name = self._print("name", label).strip()
        except QueryError as e:
            raise NameResolutionError(label, e.stderr.strip()) from e
        if not name or name == "(missing)":
            raise NameResolutionError(label, "rule not found")
        return name

    def deps_of(self, label: str) -> list[str]:
        """Declared `deps` attribute of a rule, in declaration order."""
        deps = parse_list(self._print("deps", label))
        log.debug("deps(%s) = %s", label, deps)
        return deps
