"""Tests for cc_import planning of support targets."""

from __future__ import annotations

from swiftprebuilt.models import SupportTarget
from swiftprebuilt.synthesis.support import plan_support

ARM = ["darwin_arm64"]


def test_headers_relocated_flat():
    (decl,) = plan_support(
        [
            SupportTarget(
                label="//:_SwiftSyntaxCShims",
                name="_SwiftSyntaxCShims",
                headers=(
                    "Sources/_SwiftSyntaxCShims/include/AtomicBool.h",
                    "Sources/_SwiftSyntaxCShims/include/sys/Platform.h",
                ),
            )
        ],
        ARM,
    )
    assert decl.static_libraries == {"darwin_arm64": "lib_SwiftSyntaxCShims.a"}
    assert decl.header_dir == "_SwiftSyntaxCShims/include"
    assert decl.hdrs_glob == "_SwiftSyntaxCShims/include/*.h"
    assert decl.header_copies == {
        "Sources/_SwiftSyntaxCShims/include/AtomicBool.h": "_SwiftSyntaxCShims/include/AtomicBool.h",
        "Sources/_SwiftSyntaxCShims/include/sys/Platform.h": "_SwiftSyntaxCShims/include/Platform.h",
    }


def test_static_library_per_platform():
    (decl,) = plan_support(
        [SupportTarget(label="//:Shim", name="Shim", headers=("Sources/Shim/include/a.h",))],
        ["darwin_arm64", "darwin_x86_64"],
    )
    assert decl.static_libraries == {
        "darwin_arm64": "darwin_arm64/libShim.a",
        "darwin_x86_64": "darwin_x86_64/libShim.a",
    }
    # headers are shared between platforms
    assert decl.header_copies == {"Sources/Shim/include/a.h": "Shim/include/a.h"}


def test_no_headers():
    (decl,) = plan_support([SupportTarget(label="//:Shim", name="Shim")], ARM)
    assert decl.header_dir is None
    assert decl.hdrs_glob is None
    assert decl.header_copies == {}


def test_preserves_order():
    names = ["b", "a", "c"]
    planned = plan_support([SupportTarget(label=f"//:{n}", name=n) for n in names], ARM)
    assert [d.name for d in planned] == names
