"""Plan cc_import declarations for C support targets."""

from __future__ import annotations

from pathlib import PurePosixPath

from swiftprebuilt.models import SupportDeclaration, SupportTarget
from swiftprebuilt.synthesis.artifacts import platform_prefix


def plan_support(targets: list[SupportTarget], platforms: list[str]) -> list[SupportDeclaration]:
    """Map each support target to its static libraries and relocated headers.

    Headers are platform independent and copied flat into '<name>/include/'.
    """
    planned = []
    for t in targets:
        header_dir = f"{t.name}/include" if t.headers else None
        copies = {
            h: f"{header_dir}/{PurePosixPath(h).name}" for h in t.headers
        }
        planned.append(
            SupportDeclaration(
                name=t.name,
                static_libraries={
                    p: f"{platform_prefix(p, platforms)}lib{t.name}.a" for p in platforms
                },
                header_dir=header_dir,
                header_copies=copies,
            )
        )
    return planned
