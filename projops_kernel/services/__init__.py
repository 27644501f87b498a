"""Kernel services: imperative shell infrastructure shared by modules."""

from projops_kernel.services.sequence_service import SequenceCounter, SequenceService

__all__ = ["SequenceCounter", "SequenceService"]
