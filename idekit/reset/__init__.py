"""Identifier rotation and full data wipe."""

from idekit.reset.orchestrator import ResetOrchestrator

__all__ = ["ResetOrchestrator"]
