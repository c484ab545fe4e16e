"""Failure taxonomy for synthesis and build graph queries.

Every error here is fatal for the invocation: nothing is retried and no
partial output is written.
"""

from __future__ import annotations


class SynthesisError(Exception):
    """Base class for all fatal swiftprebuilt errors."""


class EmptyInputError(SynthesisError):
    def __init__(self) -> None:
        super().__init__("No exported targets discovered, nothing to package")


class NameResolutionError(SynthesisError):
    def __init__(self, label: str, detail: str = "") -> None:
        self.label = label
        message = f"Cannot resolve target name for {label}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class UnresolvedDependencyError(SynthesisError):
    def __init__(self, target: str, label: str) -> None:
        self.target = target
        self.label = label
        super().__init__(
            f"Target {target} depends on {label}, which matches no exported target"
        )


class DuplicateNameError(SynthesisError):
    def __init__(self, name: str, labels: tuple[str, ...], label_collision: bool = False) -> None:
        self.name = name
        self.labels = labels
        self.label_collision = label_collision
        if label_collision:
            message = f"Labels {', '.join(labels)} both normalize to {name!r}"
        else:
            message = (
                f"Declaration name {name!r} produced by more than one target: {', '.join(labels)}"
            )
        super().__init__(message)


class CyclicDependencyError(SynthesisError):
    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__("Dependency cycle: " + " -> ".join([*cycle, cycle[0]]))


class MissingArtifactError(SynthesisError):
    def __init__(self, name: str, filename: str, platform: str = "") -> None:
        self.name = name
        self.filename = filename
        self.platform = platform
        where = f" for {platform}" if platform else ""
        super().__init__(f"Build outputs of {name}{where} do not include {filename}")


class QueryError(SynthesisError):
    def __init__(self, command: list[str], stderr: str) -> None:
        self.command = command
        self.stderr = stderr
        super().__init__(f"{' '.join(command[:2])} failed: {stderr.strip()}")
