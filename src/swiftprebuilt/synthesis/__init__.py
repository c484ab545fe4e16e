"""Synthesis stage: convert discovered targets into archive declarations."""

from swiftprebuilt.synthesis.artifacts import attach_artifacts
from swiftprebuilt.synthesis.support import plan_support
from swiftprebuilt.synthesis.synthesizer import discover_targets, synthesize

__all__ = ["attach_artifacts", "discover_targets", "plan_support", "synthesize"]
