"""Community report lifecycle."""

from __future__ import annotations

from .lifecycle import DEFAULT_CYCLE_LENGTH, ReportingUnitOfWorkFactory, ReportLifecycleManager

__all__ = ["DEFAULT_CYCLE_LENGTH", "ReportLifecycleManager", "ReportingUnitOfWorkFactory"]
