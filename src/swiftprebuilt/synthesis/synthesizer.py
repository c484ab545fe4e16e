"""Turn discovered build targets into swift_import declarations.

Synthesis runs in two passes over the exported targets. The first builds an
index from normalized label to declared module name over every target; the
second rewrites each target's dependencies through that index so that every
reference resolves inside the generated archive. Any failure aborts the whole
synthesis, since a partial declaration set would be inconsistent.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

import networkx as nx

from swiftprebuilt.errors import (
    CyclicDependencyError,
    DuplicateNameError,
    EmptyInputError,
    NameResolutionError,
    UnresolvedDependencyError,
)
from swiftprebuilt.models import OutputDeclaration, Target

log = logging.getLogger("swiftprebuilt.synthesis")

OPT_SUFFIX = "_opt"


class BuildGraph(Protocol):
    def name_of(self, label: str) -> str: ...

    def deps_of(self, label: str) -> list[str]: ...


# ── Label handling ───────────────────────────────────────────────────────────


def strip_namespace(label: str) -> str:
    """'@repo//pkg:Foo', '//pkg:Foo' and ':Foo' all become 'Foo'."""
    if ":" in label:
        return label.rsplit(":", 1)[1]
    if "//" in label:
        # '//pkg/Foo' is shorthand for '//pkg/Foo:Foo'
        return label.rsplit("/", 1)[1]
    return label


def strip_opt(label: str) -> str:
    if label.endswith(OPT_SUFFIX) and len(label) > len(OPT_SUFFIX):
        return label[: -len(OPT_SUFFIX)]
    return label


def label_key(label: str) -> str:
    """Normalize a label so bare and optimized variants compare equal."""
    return strip_opt(strip_namespace(label.strip()))


# ── Discovery ────────────────────────────────────────────────────────────────


def discover_targets(graph: BuildGraph, labels: Iterable[str]) -> list[Target]:
    """Resolve name and deps for each exported label.

    The `_opt` variant carries no attributes of its own, so both lookups go
    through the bare label.
    """
    targets = []
    for label in labels:
        source_label = strip_opt(label)
        name = graph.name_of(source_label)
        if not name:
            raise NameResolutionError(label)
        deps = graph.deps_of(source_label)
        log.debug("Discovered %s: name=%s deps=%s", label, name, deps)
        targets.append(
            Target(label=label, name=name, raw_dependencies=tuple(deps), is_exported=True)
        )
    return targets


# ── Synthesis ────────────────────────────────────────────────────────────────


def _build_index(targets: list[Target]) -> dict[str, str]:
    """Pass 1: normalized label -> declared name, enforcing uniqueness."""
    index: dict[str, str] = {}
    label_for_key: dict[str, str] = {}
    label_for_name: dict[str, str] = {}
    for t in targets:
        if not t.name:
            raise NameResolutionError(t.label, "empty name")
        if t.name in label_for_name:
            raise DuplicateNameError(t.name, (label_for_name[t.name], t.label))
        key = label_key(t.label)
        if key in index:
            raise DuplicateNameError(key, (label_for_key[key], t.label), label_collision=True)
        label_for_name[t.name] = t.label
        label_for_key[key] = t.label
        index[key] = t.name
    return index


def _resolve_dependencies(
    target: Target, index: dict[str, str], internal: set[str]
) -> tuple[str, ...]:
    """Pass 2 for one target: filter support labels and map the rest to names."""
    names: set[str] = set()
    for dep in target.raw_dependencies:
        key = label_key(dep)
        if key in internal:
            continue
        if key not in index:
            raise UnresolvedDependencyError(target.name, dep)
        names.add(index[key])
    names.discard(target.name)
    return tuple(sorted(names))


def _check_acyclic(declarations: list[OutputDeclaration]) -> None:
    graph = nx.DiGraph()
    for d in declarations:
        graph.add_node(d.name)
        graph.add_edges_from((d.name, dep) for dep in d.dependencies)
    try:
        cycle = nx.find_cycle(graph)
    except nx.NetworkXNoCycle:
        return
    raise CyclicDependencyError([edge[0] for edge in cycle])


def synthesize(
    exported_targets: list[Target], internal_labels: Iterable[str]
) -> list[OutputDeclaration]:
    """Produce one declaration per exported target, in input order.

    Dependencies are deduplicated and sorted so the output is stable across
    runs. Artifact paths are left empty for the attachment step.
    """
    if not exported_targets:
        raise EmptyInputError()

    index = _build_index(exported_targets)
    internal = {label_key(label) for label in internal_labels}

    declarations = [
        OutputDeclaration(
            name=t.name,
            dependencies=_resolve_dependencies(t, index, internal),
        )
        for t in exported_targets
    ]
    _check_acyclic(declarations)

    log.info(
        "Synthesized %d declarations (%d support labels filtered)",
        len(declarations),
        len(internal),
    )
    return declarations


def dependency_order(declarations: list[OutputDeclaration]) -> list[str]:
    """Declaration names ordered so every module follows its dependencies."""
    graph = nx.DiGraph()
    for d in declarations:
        graph.add_node(d.name)
        graph.add_edges_from((dep, d.name) for dep in d.dependencies)
    return list(nx.lexicographical_topological_sort(graph))
