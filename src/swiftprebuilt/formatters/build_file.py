"""Render the archive's BUILD.bazel.

`BuildFile` mirrors the small slice of buildozer used to assemble the file
(`new kind name`, `set attr value`), with the same implicit quoting of plain
string values, but keeps everything in memory until `render()`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from swiftprebuilt.models import (
    OutputDeclaration,
    PlatformArtifacts,
    SupportDeclaration,
)

SWIFT_BZL = "@build_bazel_rules_swift//swift:swift.bzl"
PUBLIC = "//visibility:public"


@dataclass(frozen=True)
class Expr:
    """A Starlark expression emitted verbatim, e.g. glob([...])."""

    text: str


@dataclass
class _Rule:
    kind: str
    name: str
    attrs: dict[str, object] = field(default_factory=dict)


def quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_value(value: object, indent: int = 1) -> str:
    """Render a Python value as Starlark.

    Strings are quoted, lists become one-line lists, dicts become dict
    literals with one entry per line, `Expr` passes through.
    """
    if isinstance(value, Expr):
        return value.text
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return quote(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(v, indent) for v in value) + "]"
    if isinstance(value, dict):
        pad = "    " * (indent + 1)
        entries = [
            f"{pad}{quote(k)}: {format_value(v, indent + 1)}," for k, v in value.items()
        ]
        return "{\n" + "\n".join(entries) + "\n" + "    " * indent + "}"
    raise TypeError(f"Cannot render {type(value).__name__} as Starlark")


class BuildFile:
    """An in-memory BUILD file built up rule by rule."""

    def __init__(self) -> None:
        self._loads: dict[str, list[str]] = {}
        self._rules: dict[str, _Rule] = {}

    def load(self, bzl: str, *symbols: str) -> None:
        existing = self._loads.setdefault(bzl, [])
        for s in symbols:
            if s not in existing:
                existing.append(s)

    def new(self, kind: str, name: str) -> None:
        if name in self._rules:
            raise ValueError(f"Rule {name} already exists")
        self._rules[name] = _Rule(kind=kind, name=name)

    def set(self, name: str, attr: str, value: object) -> None:
        if name not in self._rules:
            raise KeyError(f"No rule named {name}")
        self._rules[name].attrs[attr] = value

    def __contains__(self, name: str) -> bool:
        return name in self._rules

    def render(self) -> str:
        blocks = []
        if self._loads:
            blocks.append(
                "\n".join(
                    f"load({quote(bzl)}, {', '.join(quote(s) for s in symbols)})"
                    for bzl, symbols in self._loads.items()
                )
            )
        for rule in self._rules.values():
            lines = [f"{rule.kind}(", f"    name = {quote(rule.name)},"]
            for attr, value in rule.attrs.items():
                lines.append(f"    {attr} = {format_value(value)},")
            lines.append(")")
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks) + "\n"


def _per_platform(paths: dict[str, PlatformArtifacts], attr: str, as_list: bool) -> object:
    return _select({p: getattr(a, attr) for p, a in paths.items()}, as_list)


def _select(values: dict[str, str], as_list: bool) -> object:
    if len(values) == 1:
        (only,) = values.values()
        return [only] if as_list else only
    choices = {f"//:{p}": ([v] if as_list else v) for p, v in values.items()}
    return Expr("select(" + format_value(choices) + ")")


def format_build_file(
    declarations: list[OutputDeclaration],
    support: list[SupportDeclaration] | None = None,
) -> str:
    """Render swift_import + alias pairs for every module and cc_import for support targets."""
    build = BuildFile()
    build.load(SWIFT_BZL, "swift_import")

    support = support or []
    platforms: list[str] = []
    keyed = [d.artifact_paths for d in declarations] + [s.static_libraries for s in support]
    for paths in keyed:
        for p in paths:
            if p not in platforms:
                platforms.append(p)
    if len(platforms) > 1:
        for p in platforms:
            build.new("config_setting", p)
            build.set(p, "values", {"cpu": p})

    for d in declarations:
        build.new("swift_import", d.name)
        build.set(d.name, "module_name", d.name)
        build.set(d.name, "visibility", [PUBLIC])
        if d.artifact_paths:
            build.set(d.name, "archives", _per_platform(d.artifact_paths, "archive", True))
            build.set(d.name, "swiftdoc", _per_platform(d.artifact_paths, "swiftdoc", False))
            build.set(
                d.name,
                "swiftinterface",
                _per_platform(d.artifact_paths, "swiftinterface", False),
            )
        if d.dependencies:
            build.set(d.name, "deps", [f":{dep}" for dep in d.dependencies])

        # Prebuilt modules are always release builds; keep the _opt label
        # that other modules refer to.
        build.new("alias", d.alias_name)
        build.set(d.alias_name, "actual", f":{d.name}")
        build.set(d.alias_name, "visibility", [PUBLIC])

    for s in support:
        build.new("cc_import", s.name)
        build.set(s.name, "visibility", [PUBLIC])
        if s.static_libraries:
            build.set(s.name, "static_library", _select(s.static_libraries, False))
        if s.hdrs_glob:
            build.set(s.name, "hdrs", Expr(f"glob([{quote(s.hdrs_glob)}])"))

    return build.render()
